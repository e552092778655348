"""Cache a parsed document to disk: JSON round-trip."""

from cotejo import parse
from cotejo.serialization import from_json, to_json

doc = parse("---\ntitle: Cached\n---\n# Cached document\n\nThis tree can be serialized and restored.")

json_str = to_json(doc)
restored = from_json(json_str)

print("Original == restored:", doc == restored)
print("JSON length:", len(json_str), "chars")

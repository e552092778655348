"""Parse and validate a note in a few lines: one call each."""

from cotejo import parse, validate

doc = parse("---\ntitle: Groceries\ntags: [home]\n---\n# Groceries\n\n### Dairy\n\n- milk\n")
for diagnostic in validate(doc):
    print(diagnostic.format("groceries.md"))

"""Check 1000 documents in parallel against one shared reference index."""

from cotejo import Checker, SourceDocument

docs = [
    SourceDocument(f"# Doc {i}\n\nSee [the next one](doc-{i + 1}.md).\n", source_file=f"doc-{i}.md")
    for i in range(1000)
]
references = {doc.source_file: True for doc in docs if doc.source_file}

checker = Checker(default_filetype="note")
results = checker.check_many(docs, references=references, max_workers=8)

print(f"Checked {len(results)} documents in parallel")
for result in results:
    for diagnostic in result.diagnostics:
        print(diagnostic.format(result.source_file))

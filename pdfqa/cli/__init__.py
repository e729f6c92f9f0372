"""Command-line tools for pdfqa.

- ``python -m pdfqa.cli list`` -- list uploaded documents
- ``python -m pdfqa.cli upload --file report.pdf`` -- store a PDF
- ``python -m pdfqa.cli ingest --id <id>`` -- index a document's pages
- ``python -m pdfqa.cli ask --id <id> --query "..."`` -- ask a question

The CLI builds the same components as the web app
(:func:`pdfqa.main.build_components`) and runs one command per process.
"""

"""pdfqa: question answering over uploaded PDF documents.

Each uploaded PDF gets its own vector-index namespace holding one
embedding per page; questions are answered from the most similar pages.
"""

__version__ = "0.1.0"

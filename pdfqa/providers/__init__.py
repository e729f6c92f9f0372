"""Concrete adapters for every external collaborator.

Each subpackage implements one interface from ``pdfqa/interfaces/``.
Adapters translate third-party SDK exceptions into the
``pdfqa.utils.errors`` hierarchy so services never see vendor types.
"""

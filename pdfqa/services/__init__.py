"""Application services: upload, ingestion and question answering."""

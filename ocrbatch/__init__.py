"""Batch OCR and text extraction for images, PDF, DOCX and XLSX files."""

__version__ = "0.3.3"
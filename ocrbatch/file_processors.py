"""Dispatch of input files to the matching text extractor."""

from __future__ import annotations

import math
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .documents import (
    count_pdf_pages,
    extract_docx_text,
    extract_excel_text,
    extract_pdf_text,
    iter_pdf_jpeg_images,
)
from .file_types import FileType, detect_file_type
from .ocr_engine import OcrEngine, OcrError

PathArg = Union[str, os.PathLike]

_WORDS_PER_PAGE = 500
_MIN_DIRECT_TEXT = 100


class ProcessingError(Exception):
    """Raised when a file cannot be turned into text."""


@dataclass
class ProcessResult:
    file_type: FileType
    page_count: int
    text: str


class FileProcessor:
    """Extracts text from images, PDFs, DOCX and Excel files."""

    def __init__(self, use_pdf_ocr: bool = False) -> None:
        self.use_pdf_ocr = use_pdf_ocr

    def process_file(self, path: PathArg, ocr_engine: OcrEngine) -> list[ProcessResult]:
        path = Path(path)
        file_type = detect_file_type(path)
        try:
            if file_type.category == "image":
                return [ProcessResult(file_type, 1, ocr_engine.extract_text_from_image(path))]
            if file_type.category == "pdf":
                return [self._process_pdf(path, ocr_engine)]
            if file_type.category == "docx":
                return [self._process_docx(path)]
            if file_type.category in ("xlsx", "xls"):
                text, sheets = extract_excel_text(path)
                return [ProcessResult(file_type, max(sheets, 1), text)]
        except (OSError, ValueError, OcrError) as exc:
            raise ProcessingError(str(exc)) from exc
        if file_type.category == "archive":
            raise ProcessingError("Archive processing not implemented in this version")
        raise ProcessingError("Unsupported file format")

    def _process_pdf(self, path: Path, ocr_engine: OcrEngine) -> ProcessResult:
        data = path.read_bytes()
        direct = extract_pdf_text(data)
        if direct.strip() and len(direct.encode("utf-8")) > _MIN_DIRECT_TEXT:
            text = direct
        elif self.use_pdf_ocr:
            text = self._ocr_pdf_images(data, ocr_engine)
        else:
            text = ""
        try:
            pages = count_pdf_pages(data)
        except ValueError:
            pages = 1
        return ProcessResult(detect_file_type(path), pages, text)

    @staticmethod
    def _ocr_pdf_images(data: bytes, ocr_engine: OcrEngine) -> str:
        texts = []
        with tempfile.TemporaryDirectory() as workdir:
            for number, jpeg in enumerate(iter_pdf_jpeg_images(data)):
                image_path = Path(workdir, f"page_image_{number}.jpg")
                image_path.write_bytes(jpeg)
                texts.append(ocr_engine.extract_text_from_image(image_path))
        return "\n".join(t for t in texts if t)

    @staticmethod
    def _process_docx(path: Path) -> ProcessResult:
        text = extract_docx_text(path)
        pages = math.ceil(len(text.split()) / _WORDS_PER_PAGE)
        return ProcessResult(detect_file_type(path), max(pages, 1), text)
"""Result records, metadata collection and the CSV, JSON and text reports."""

from __future__ import annotations

import csv
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from PIL import Image

from .file_types import FileType

PathArg = Union[str, os.PathLike]

log = logging.getLogger(__name__)

_CSV_HEADER = ("filename", "file_type", "page_count", "text_length", "processing_time_ms", "error")

_COLOR_TYPES = {
    "L": "L8",
    "LA": "La8",
    "RGB": "Rgb8",
    "RGBA": "Rgba8",
    "I;16": "L16",
    "I;16B": "L16",
    "I;16L": "L16",
    "F": "Rgb32F",
}

_TYPE_NAMES = {
    "pdf": "PDF Document",
    "docx": "Word Document",
    "xlsx": "Excel Spreadsheet",
    "xls": "Excel Spreadsheet",
}

_SUPPORTED_FORMATS = (
    "Supported formats:\n"
    "  - Images: jpg, jpeg, png, bmp, tiff, gif, webp\n"
    "  - Documents: pdf, docx, xlsx, xls"
)


@dataclass
class OcrResult:
    """The outcome of processing one file."""

    filename: str
    file_type: str
    page_count: int
    text: str
    processing_time_ms: int
    error: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.error is None


def setup_directories(input_dir: PathArg, output_dir: PathArg) -> None:
    """Create the output directory; create a missing input directory and raise."""
    input_dir = Path(input_dir)
    if not input_dir.exists():
        input_dir.mkdir(parents=True, exist_ok=True)
        print("Created 'input' directory. Please add your files there.")
        print(_SUPPORTED_FORMATS)
        raise FileNotFoundError("Input directory was empty")
    Path(output_dir).mkdir(parents=True, exist_ok=True)


def extract_metadata(file_path: PathArg, file_type: FileType) -> dict[str, str]:
    """Collect path, size, modification time and type-specific details of a file."""
    path = Path(file_path)
    metadata = {"path": str(path)}

    try:
        stat = path.stat()
    except OSError:
        stat = None
    if stat is not None:
        metadata["size"] = f"{stat.st_size} bytes"
        metadata["modified"] = datetime.fromtimestamp(stat.st_mtime).isoformat()

    if file_type.is_image():
        try:
            with Image.open(path) as img:
                width, height = img.size
                metadata["dimensions"] = f"{width}x{height}"
                metadata["color_type"] = _COLOR_TYPES.get(img.mode, img.mode)
        except OSError:
            pass
    elif file_type.category in _TYPE_NAMES:
        metadata["type"] = _TYPE_NAMES[file_type.category]

    return metadata


def _write_csv(results: Iterable[OcrResult], csv_path: Path) -> None:
    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow(_CSV_HEADER)
        for result in results:
            writer.writerow(
                (
                    result.filename,
                    result.file_type,
                    result.page_count,
                    len(result.text.encode("utf-8")),
                    result.processing_time_ms,
                    result.error or "",
                )
            )


def save_results(
    results: Sequence[OcrResult], output_dir: PathArg, save_individual_files: bool
) -> None:
    """Write results.csv, metadata.json and optionally one text file per success."""
    output_dir = Path(output_dir)

    csv_path = output_dir / "results.csv"
    _write_csv(results, csv_path)
    log.info("Results saved to: %s", csv_path)

    if save_individual_files:
        texts_dir = output_dir / "texts"
        texts_dir.mkdir(parents=True, exist_ok=True)
        for result in results:
            if result.succeeded and result.text:
                stem = Path(result.filename).stem
                (texts_dir / f"{stem}.txt").write_text(result.text, encoding="utf-8")
        log.info("Text files saved to: %s", texts_dir)

    json_path = output_dir / "metadata.json"
    json_path.write_text(
        json.dumps([asdict(result) for result in results], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    log.info("Metadata saved to: %s", json_path)


def _percent(part: int, total: int) -> float:
    return part / total * 100.0 if total else float("nan")


def render_report(results: Sequence[OcrResult]) -> str:
    """Build the plain-text processing report."""
    total = len(results)
    successful = [r for r in results if r.succeeded]
    failed = [r for r in results if not r.succeeded]
    total_pages = sum(r.page_count for r in results)
    total_chars = sum(len(r.text) for r in results)

    lines = [
        "=== OCR Processing Report ===",
        "",
        "Overall Statistics:",
        f"  - Files processed: {total}",
        f"  - Successful: {len(successful)} ({_percent(len(successful), total):.1f}%)",
        f"  - Failed: {len(failed)} ({_percent(len(failed), total):.1f}%)",
        f"  - Total pages: {total_pages}",
        f"  - Total text characters: {total_chars}",
        "",
    ]

    type_counts: dict[str, int] = {}
    type_chars: dict[str, int] = {}
    for result in successful:
        type_counts[result.file_type] = type_counts.get(result.file_type, 0) + 1
        type_chars[result.file_type] = type_chars.get(result.file_type, 0) + len(result.text)

    lines.append("Distribution by file type (successful only):")
    for file_type, count in type_counts.items():
        average = type_chars[file_type] // max(count, 1)
        lines.append(f"  - {file_type}: {count} files, avg {average} chars/file")
    lines.append("")

    if failed:
        lines.append("Failed files:")
        lines.extend(f"  - {r.filename}: {r.error}" for r in failed)
        lines.append("")

    by_size = sorted(successful, key=lambda r: len(r.text.encode("utf-8")), reverse=True)
    if by_size:
        lines.append("Top 5 files by text size:")
        lines.extend(
            f"  {rank}. {r.filename}: {len(r.text)} characters, {r.page_count} pages"
            for rank, r in enumerate(by_size[:5], start=1)
        )
        lines.append("")

    return "\n".join(lines)


def generate_report(results: Sequence[OcrResult], output_dir: PathArg) -> None:
    """Write report.txt into ``output_dir``."""
    report_path = Path(output_dir) / "report.txt"
    report_path.write_text(render_report(results), encoding="utf-8")
    log.info("Report saved to: %s", report_path)
"""Command-line entry point for batch text extraction."""

from __future__ import annotations

import argparse
import os
import re
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Sequence, Union

from tqdm import tqdm

from . import pdf_creator
from .file_processors import FileProcessor, ProcessingError
from .file_types import detect_file_type
from .ocr_engine import OcrEngine, OcrError, check_available_languages, validate_languages
from .pdf_creator import PdfCreationError, PdfCreationMethod, create_searchable_pdf
from .reporting import OcrResult, extract_metadata, generate_report, save_results

PathArg = Union[str, os.PathLike]

_KNOWN_LANGUAGES = frozenset(
    "ukr eng rus deu ita fra spa pol ces slk bul hrv slv por nld dan "
    "swe nor fin hun ron ell tur ara heb chi_sim chi_tra jpn kor".split()
)

_DEFAULT_DPI = 300
_MAX_DPI = 2**32 - 1


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


def default_workers() -> int:
    """One less than the CPU count, but at least one."""
    return max((os.cpu_count() or 1) - 1, 1)


def parse_languages(value: str) -> str:
    """Turn comma separators into ``+`` and warn about unusual language codes."""
    normalized = value.replace(",", "+")
    for lang in normalized.split("+"):
        lang = lang.strip().lower()
        if lang and lang not in _KNOWN_LANGUAGES:
            _warn(f"⚠️  Warning: '{lang}' might not be installed. Install with:")
            _warn(f"   Ubuntu: sudo apt install tesseract-ocr-{lang}")
            _warn("   Windows: add the language data with the Tesseract installer")
            _warn("   macOS: brew install tesseract-lang")
    return normalized


def _screen_dpi() -> int:
    return 96 if sys.platform.startswith("win") else 72


def parse_dpi(value: str) -> int:
    """Parse a DPI value; ``screen`` means the platform's screen DPI."""
    if value.lower() == "screen":
        return _screen_dpi()
    if re.fullmatch(r"\+?\d+", value) and int(value) <= _MAX_DPI:
        return int(value)
    _warn(f"⚠️  Invalid DPI value '{value}', using default {_DEFAULT_DPI}")
    return _DEFAULT_DPI


def collect_files(input_dir: PathArg) -> list[Path]:
    """Every supported file below ``input_dir``, following symbolic links."""
    root = Path(input_dir)
    if root.is_file():
        return [root] if detect_file_type(root).is_supported() else []
    files = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath, name)
            if path.is_file() and detect_file_type(path).is_supported():
                files.append(path)
    return files


def process_single_file(
    path: PathArg, ocr_engine: OcrEngine, file_processor: FileProcessor
) -> list[OcrResult]:
    """Process one file, turning a failure into a result that carries the error."""
    path = Path(path)
    start = time.monotonic()
    filename = path.name

    def elapsed_ms() -> int:
        return int((time.monotonic() - start) * 1000)

    try:
        processed = file_processor.process_file(path, ocr_engine)
    except ProcessingError as exc:
        return [
            OcrResult(
                filename=filename,
                file_type=detect_file_type(path).describe(),
                page_count=0,
                text="",
                processing_time_ms=elapsed_ms(),
                error=f"Processing error: {exc}",
            )
        ]

    return [
        OcrResult(
            filename=filename,
            file_type=result.file_type.describe(),
            page_count=result.page_count,
            text=result.text,
            processing_time_ms=elapsed_ms(),
            error=None,
            metadata=extract_metadata(path, result.file_type),
        )
        for result in processed
    ]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ocrbatch", description="Batch OCR for PDF, DOCX, XLSX, and images"
    )
    parser.add_argument("-i", "--input", type=Path, default=Path("./input"), help="Input directory path")
    parser.add_argument("-o", "--output", type=Path, default=Path("./output"), help="Output directory path")
    parser.add_argument(
        "-l", "--languages", type=parse_languages, default="ukr+eng",
        help="OCR languages (comma-separated: ukr,eng)",
    )
    parser.add_argument("--list-languages", action="store_true",
                        help="List available Tesseract languages and exit")
    parser.add_argument("--pdf-ocr", action="store_true", help="Enable OCR for PDF images (slower)")
    parser.add_argument("-w", "--workers", type=int, default=default_workers(),
                        help="Number of parallel workers")
    parser.add_argument("--save-texts", action=argparse.BooleanOptionalAction, default=True,
                        help="Save individual text files")
    parser.add_argument("--searchable-pdf", action="store_true",
                        help="Create searchable PDFs from images")
    parser.add_argument("--pdf-method", choices=[m.value for m in PdfCreationMethod],
                        default=PdfCreationMethod.OCRMYPDF.value, help="PDF creation method")
    parser.add_argument("--dpi", default="300", help="DPI for OCR (default: 300)")
    parser.add_argument("--psm", type=int, default=3, help="Page segmentation mode (default: 3)")
    parser.add_argument("--oem", type=int, default=3, help="OCR Engine Mode (default: 3)")
    parser.add_argument("--analyze-quality", action=argparse.BooleanOptionalAction, default=True,
                        help="Enable detailed OCR quality analysis")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show detailed Tesseract commands and debug output")
    return parser


def _process_all(
    files: Sequence[Path], engine: OcrEngine, processor: FileProcessor, workers: int
) -> list[OcrResult]:
    lock = threading.Lock()
    with tqdm(total=len(files)) as progress:

        def work(path: Path) -> list[OcrResult]:
            with lock:
                progress.set_postfix_str(f"Processing: {path.name}")
            try:
                return process_single_file(path, engine, processor)
            finally:
                with lock:
                    progress.update(1)

        with ThreadPoolExecutor(max_workers=max(workers, 1)) as pool:
            batches = list(pool.map(work, files))
        progress.set_postfix_str("Processing complete!")
    return [result for batch in batches for result in batch]


def _quality_analysis(files: Sequence[Path], engine: OcrEngine) -> None:
    print("\n📊 OCR Quality Analysis")
    print("─" * 80)
    for path in files:
        if not detect_file_type(path).is_image():
            continue
        try:
            analysis = engine.extract_with_confidence(path)
        except OcrError as exc:
            _warn(f"  ✗ {path.name}: {exc}")
            continue
        if not analysis.words:
            print(f"{path.name:<35} N/A (no text)")
            continue
        line = f"{path.name:<35} OCR: {analysis.avg_confidence:5.1f}%"
        if analysis.detected_language is not None:
            conf = (
                f"{analysis.language_confidence * 100:.0f}%"
                if analysis.language_confidence is not None
                else "?"
            )
            line += f"  {analysis.detected_language:4} ({conf:3})"
        low = [w.text for w in analysis.words if w.confidence < 70.0][:3]
        if low:
            line += f"  ⚠️ [{', '.join(low)}]"
        print(line)
    print("─" * 80)


def _choose_pdf_method(requested: str) -> tuple[PdfCreationMethod, str]:
    if requested == PdfCreationMethod.OCRMYPDF.value:
        if pdf_creator.check_ocrmypdf_installed():
            return PdfCreationMethod.OCRMYPDF, "ocrmypdf"
        _warn("\n⚠️  ocrmypdf is not installed, falling back to the built-in method")
        _warn("\n📦 To use ocrmypdf (recommended for searchable PDFs):")
        _warn("  • Windows: pip install ocrmypdf")
        _warn("  • Linux: sudo apt install ocrmypdf")
        _warn("  • macOS: brew install ocrmypdf")
        _warn("\n⚠️  Native method will create image-only PDFs (text not searchable)\n")
    else:
        _warn("\n⚠️  Using the built-in method - PDFs will contain images only (not searchable)")
        _warn("💡 For searchable PDFs, use --pdf-method ocrmypdf\n")
    return PdfCreationMethod.NATIVE, "native (image-only)"


def _create_pdfs(
    files: Sequence[Path], results: Sequence[OcrResult], output: Path, languages: str, requested: str
) -> None:
    method, method_name = _choose_pdf_method(requested)
    print(f"🔍 Creating PDFs using: {method_name}")
    pdf_output = output / "searchable_pdfs"
    pdf_output.mkdir(parents=True, exist_ok=True)

    for path, result in zip(files, results):
        if not detect_file_type(path).is_image() or result.error is not None:
            continue
        target = pdf_output / f"{path.stem}.pdf"
        try:
            create_searchable_pdf(path, result.text, target, languages, method)
        except PdfCreationError as exc:
            _warn(f"  ✗ {path.stem}: {exc}")
        else:
            print(f"  ✓ {path.stem}")
    print(f"\nPDFs saved to: {pdf_output}")


def _run(args: argparse.Namespace) -> int:
    if not args.verbose:
        os.environ["TESSERACT_QUIET"] = "1"

    print("=== Advanced Batch OCR ===")
    args.input.mkdir(parents=True, exist_ok=True)
    args.output.mkdir(parents=True, exist_ok=True)

    print("\nSupported formats:")
    print("  - Images: jpg, jpeg, png, bmp, tiff, gif, webp")
    print("  - Documents: pdf, docx, xlsx, xls")

    files = collect_files(args.input)
    if not files:
        _warn("Error: Input directory was empty")
        return 1

    dpi = parse_dpi(args.dpi)
    if args.dpi.lower() == "screen":
        print(f"Using screen DPI for {sys.platform}: {dpi}")

    print(f"\nFound {len(files)} files to process")
    print(f"OCR Language: {args.languages}")
    print(f"OCR DPI: {dpi}")
    print(f"PDF OCR: {'enabled' if args.pdf_ocr else 'disabled'}")

    try:
        validate_languages(args.languages)
    except OcrError as exc:
        _warn(f"Warning: {exc}")

    if args.list_languages:
        print("Available Tesseract languages:")
        try:
            for lang in check_available_languages():
                print(f"  • {lang}")
        except OcrError as exc:
            _warn(f"Error: {exc}")
        return 0

    engine = OcrEngine(args.languages, dpi, args.psm, args.oem, args.verbose)
    processor = FileProcessor(args.pdf_ocr)

    worker_count = min(len(files), args.workers)
    print(f"Workers: {worker_count} (of {os.cpu_count() or 1} CPU cores, {len(files)} files)")

    start = time.monotonic()
    results = _process_all(files, engine, processor, worker_count)

    save_results(results, args.output, args.save_texts)
    generate_report(results, args.output)

    successful = sum(1 for r in results if r.error is None)
    print("\n=== Processing Complete ===")
    print(f"Total time: {time.monotonic() - start:.2f} seconds")
    print(f"Files processed: {len(results)}")
    print(f"Successful: {successful} ({successful / len(results) * 100:.1f}%)")
    print(f"Results saved to: {args.output}")

    if args.analyze_quality:
        _quality_analysis(files, engine)

    if args.searchable_pdf:
        _create_pdfs(files, results, args.output, args.languages, args.pdf_method)

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the batch OCR command and return its exit status."""
    args = _build_parser().parse_args(argv)
    try:
        return _run(args)
    except OSError as exc:
        _warn(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
"""Creation of PDFs from scanned images, via ocrmypdf or a built-in writer."""

from __future__ import annotations

import enum
import io
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Union

from PIL import Image

PathArg = Union[str, os.PathLike]

_INSTALL_HELP = (
    "ocrmypdf is not installed!\n\n"
    "Installation instructions:\n"
    "• Windows: pip install ocrmypdf\n"
    "• Linux: sudo apt install ocrmypdf\n"
    "• macOS: brew install ocrmypdf\n\n"
    "Or use --pdf-method native for the built-in PDF writer"
)


class PdfCreationMethod(enum.Enum):
    OCRMYPDF = "ocrmypdf"
    NATIVE = "native"


class PdfCreationError(Exception):
    """Raised when a PDF cannot be created."""


def check_ocrmypdf_installed() -> bool:
    return shutil.which("ocrmypdf") is not None


def create_searchable_pdf(
    image_path: PathArg,
    ocr_text: str,
    output_path: PathArg,
    language: str,
    method: PdfCreationMethod,
) -> None:
    """Write a PDF for ``image_path`` with the chosen method."""
    if method is PdfCreationMethod.OCRMYPDF:
        create_with_ocrmypdf(image_path, output_path, language)
    else:
        create_with_pdf_writer(image_path, ocr_text, output_path)


def create_with_ocrmypdf(image_path: PathArg, output_path: PathArg, language: str) -> None:
    """Convert the image to RGB PNG and run ocrmypdf on it."""
    if not check_ocrmypdf_installed():
        raise PdfCreationError(_INSTALL_HELP)

    image_path = Path(image_path)
    temp_png = Path(tempfile.gettempdir(), f"ocr_temp_{image_path.stem}.png")
    try:
        with Image.open(image_path) as img:
            img.convert("RGB").save(temp_png, "PNG")
        process = subprocess.run(
            ["ocrmypdf", "-l", language, "--image-dpi", "300", str(temp_png), os.fspath(output_path)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as exc:
        raise PdfCreationError(str(exc)) from exc
    finally:
        temp_png.unlink(missing_ok=True)

    if process.returncode != 0:
        stderr = process.stderr.decode("utf-8", errors="replace")
        raise PdfCreationError(f"ocrmypdf failed: {stderr}")


def _escape(text: str) -> bytes:
    escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    return escaped.encode("utf-8")


def _number(value: float) -> bytes:
    return (str(int(value)) if float(value).is_integer() else f"{value:.4f}").encode("ascii")


def create_with_pdf_writer(image_path: PathArg, ocr_text: str, output_path: PathArg) -> None:
    """Write a one-page PDF holding the image and the text as invisible text."""
    try:
        with Image.open(image_path) as img:
            rgb = img.convert("RGB")
    except OSError as exc:
        raise PdfCreationError(f"cannot open image: {exc}") from exc
    width, height = rgb.size
    buffer = io.BytesIO()
    rgb.save(buffer, "JPEG")
    jpeg = buffer.getvalue()

    w, h = _number(width), _number(height)
    content = (
        b"q\n" + w + b" 0 0 " + h + b" 0 0 cm\n/Im1 Do\nQ\n"
        b"BT\n3 Tr\n/F1 12 Tf\n10 " + _number(height - 20) + b" Td\n("
        + _escape(ocr_text) + b") Tj\nET"
    )

    def stream(header: bytes, data: bytes) -> bytes:
        return b"<< " + header + b" /Length %d >>\nstream\n" % len(data) + data + b"\nendstream"

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 " + w + b" " + h + b"] /Contents 5 0 R"
        b" /Resources << /XObject << /Im1 4 0 R >> /Font << /F1 6 0 R >> >> >>",
        stream(
            b"/Type /XObject /Subtype /Image /Width %d /Height %d"
            b" /ColorSpace /DeviceRGB /BitsPerComponent 8 /Filter /DCTDecode" % (width, height),
            jpeg,
        ),
        stream(b"", content),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.7\n%\x80\x80\x80\x80\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    out += b"".join(b"%010d 00000 n \n" % offset for offset in offsets)
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF" % (len(objects) + 1, xref)

    try:
        Path(output_path).write_bytes(bytes(out))
    except OSError as exc:
        raise PdfCreationError(str(exc)) from exc
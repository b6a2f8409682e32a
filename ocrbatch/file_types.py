"""Detection of supported input file types from their extensions."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import PurePath
from typing import Union


class ImageFormat(enum.Enum):
    """Raster image formats handed to the OCR engine."""

    JPEG = "Jpeg"
    PNG = "Png"
    BMP = "Bmp"
    TIFF = "Tiff"
    GIF = "Gif"
    WEBP = "Webp"


class ArchiveFormat(enum.Enum):
    """Archive formats that are recognised but not unpacked."""

    ZIP = "Zip"
    TAR = "Tar"
    RAR = "Rar"


_PLAIN_NAMES = {
    "pdf": "PDF",
    "docx": "DOCX",
    "xlsx": "XLSX",
    "xls": "XLS",
    "unsupported": "Unsupported",
}

_CATEGORIES = frozenset(_PLAIN_NAMES) | {"image", "archive"}


@dataclass(frozen=True)
class FileType:
    """A file category, with the concrete format for images and archives.

    ``category`` is one of ``image``, ``pdf``, ``docx``, ``xlsx``, ``xls``,
    ``archive`` or ``unsupported``.
    """

    category: str
    subformat: Union[ImageFormat, ArchiveFormat, None] = None

    def __post_init__(self) -> None:
        if self.category not in _CATEGORIES:
            raise ValueError(f"unknown file category: {self.category!r}")
        if self.category == "image" and not isinstance(self.subformat, ImageFormat):
            raise ValueError("an image file type needs an ImageFormat")
        if self.category == "archive" and not isinstance(self.subformat, ArchiveFormat):
            raise ValueError("an archive file type needs an ArchiveFormat")

    def describe(self) -> str:
        """Human-readable name used in reports."""
        if self.category == "image":
            return f"Image ({self.subformat.value})"
        if self.category == "archive":
            return f"Archive ({self.subformat.value})"
        return _PLAIN_NAMES[self.category]

    def is_supported(self) -> bool:
        return self.category != "unsupported"

    def is_image(self) -> bool:
        return self.category == "image"

    def __str__(self) -> str:
        return self.describe()


_BY_EXTENSION = {
    "jpg": FileType("image", ImageFormat.JPEG),
    "jpeg": FileType("image", ImageFormat.JPEG),
    "png": FileType("image", ImageFormat.PNG),
    "bmp": FileType("image", ImageFormat.BMP),
    "tiff": FileType("image", ImageFormat.TIFF),
    "tif": FileType("image", ImageFormat.TIFF),
    "gif": FileType("image", ImageFormat.GIF),
    "webp": FileType("image", ImageFormat.WEBP),
    "pdf": FileType("pdf"),
    "docx": FileType("docx"),
    "xlsx": FileType("xlsx"),
    "xls": FileType("xls"),
    "zip": FileType("archive", ArchiveFormat.ZIP),
    "tar": FileType("archive", ArchiveFormat.TAR),
    "rar": FileType("archive", ArchiveFormat.RAR),
}

_UNSUPPORTED = FileType("unsupported")


def detect_file_type(path: Union[str, os.PathLike]) -> FileType:
    """Classify ``path`` by its (case-insensitive) extension."""
    suffix = PurePath(path).suffix
    extension = suffix[1:].lower()
    if not extension:
        return _UNSUPPORTED
    return _BY_EXTENSION.get(extension, _UNSUPPORTED)
from pathlib import Path

import pytest

from ocrbatch.file_types import ArchiveFormat, FileType, ImageFormat, detect_file_type


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("scan.jpg", FileType("image", ImageFormat.JPEG)),
        ("scan.jpeg", FileType("image", ImageFormat.JPEG)),
        ("scan.png", FileType("image", ImageFormat.PNG)),
        ("scan.bmp", FileType("image", ImageFormat.BMP)),
        ("scan.tif", FileType("image", ImageFormat.TIFF)),
        ("scan.tiff", FileType("image", ImageFormat.TIFF)),
        ("scan.gif", FileType("image", ImageFormat.GIF)),
        ("scan.webp", FileType("image", ImageFormat.WEBP)),
        ("doc.pdf", FileType("pdf")),
        ("doc.docx", FileType("docx")),
        ("book.xlsx", FileType("xlsx")),
        ("book.xls", FileType("xls")),
        ("bundle.zip", FileType("archive", ArchiveFormat.ZIP)),
        ("bundle.tar", FileType("archive", ArchiveFormat.TAR)),
        ("bundle.rar", FileType("archive", ArchiveFormat.RAR)),
    ],
)
def test_known_extensions(name, expected):
    assert detect_file_type(name) == expected


def test_extension_is_case_insensitive():
    assert detect_file_type("PHOTO.JPG") == FileType("image", ImageFormat.JPEG)
    assert detect_file_type(Path("dir") / "Report.PdF") == FileType("pdf")


@pytest.mark.parametrize("name", ["notes.txt", "README", ".png", "archive.tar.gz", "file."])
def test_unsupported(name):
    file_type = detect_file_type(name)
    assert file_type.category == "unsupported"
    assert not file_type.is_supported()
    assert not file_type.is_image()


@pytest.mark.parametrize(
    ("name", "description"),
    [
        ("a.jpg", "Image (Jpeg)"),
        ("a.webp", "Image (Webp)"),
        ("a.pdf", "PDF"),
        ("a.docx", "DOCX"),
        ("a.xlsx", "XLSX"),
        ("a.xls", "XLS"),
        ("a.zip", "Archive (Zip)"),
        ("a.unknown", "Unsupported"),
    ],
)
def test_describe(name, description):
    file_type = detect_file_type(name)
    assert file_type.describe() == description
    assert str(file_type) == description


def test_is_image_only_for_images():
    assert detect_file_type("a.png").is_image()
    assert not detect_file_type("a.pdf").is_image()
    assert detect_file_type("a.pdf").is_supported()


def test_invalid_category_rejected():
    with pytest.raises(ValueError):
        FileType("spreadsheet")


def test_image_needs_format():
    with pytest.raises(ValueError):
        FileType("image")
"""Text extraction from office documents and PDF files, without OCR."""

from __future__ import annotations

import os
import re
import zipfile
import zlib
from typing import Iterator, Union
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

PathArg = Union[str, os.PathLike]

_W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_S = "{http://schemas.openxmlformats.org/spreadsheetml/2006/main}"
_R = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
_PR = "{http://schemas.openxmlformats.org/package/2006/relationships}"


def _read_xml(archive: zipfile.ZipFile, name: str) -> Element:
    return fromstring(archive.read(name))


def _paragraph_text(paragraph: Element) -> str:
    return "".join(
        (text.text or "") + " "
        for run in paragraph.findall(f"{_W}r")
        for text in run.findall(f"{_W}t")
    )


def extract_docx_text(path: PathArg) -> str:
    """Return paragraph and table text of a DOCX file.

    Table cells end with a tab and table rows with a newline.
    """
    try:
        with zipfile.ZipFile(path) as archive:
            root = _read_xml(archive, "word/document.xml")
    except (zipfile.BadZipFile, KeyError, ParseError, DefusedXmlException) as exc:
        raise ValueError(f"Failed to parse DOCX: {exc}") from exc

    body = root.find(f"{_W}body")
    parts: list[str] = []
    for child in body if body is not None else ():
        if child.tag == f"{_W}p":
            parts.append(_paragraph_text(child) + "\n")
        elif child.tag == f"{_W}tbl":
            for row in child.findall(f"{_W}tr"):
                for cell in row.findall(f"{_W}tc"):
                    parts.extend(_paragraph_text(p) for p in cell.findall(f"{_W}p"))
                    parts.append("\t")
                parts.append("\n")
    return "".join(parts)


def _column_index(reference: str) -> tuple[int, int]:
    match = re.fullmatch(r"([A-Za-z]+)(\d+)", reference)
    if not match:
        raise ValueError(f"bad cell reference: {reference!r}")
    column = 0
    for letter in match.group(1).upper():
        column = column * 26 + ord(letter) - ord("A") + 1
    return int(match.group(2)), column


def _format_number(raw: str) -> str:
    value = float(raw)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _cell_text(cell: Element, shared: list[str]) -> str | None:
    kind = cell.get("t", "n")
    if kind == "inlineStr":
        return "".join(t.text or "" for t in cell.iter(f"{_S}t"))
    value = cell.find(f"{_S}v")
    if value is None or value.text is None:
        return None
    raw = value.text
    if kind == "s":
        return shared[int(raw)]
    if kind == "b":
        return "true" if raw.strip() == "1" else "false"
    if kind == "e":
        return f"[Error: {raw}]"
    if kind in ("str", "d"):
        return raw
    return _format_number(raw)


def _sheet_rows(root: Element, shared: list[str]) -> list[list[str]]:
    cells: dict[tuple[int, int], str] = {}
    for row_number, row in enumerate(root.iter(f"{_S}row"), start=1):
        row_number = int(row.get("r", row_number))
        for column_number, cell in enumerate(row.findall(f"{_S}c"), start=1):
            reference = cell.get("r")
            position = _column_index(reference) if reference else (row_number, column_number)
            text = _cell_text(cell, shared)
            if text is not None:
                cells[position] = text
    if not cells:
        return []
    rows = [r for r, _ in cells]
    columns = [c for _, c in cells]
    return [
        [cells.get((r, c), "") for c in range(min(columns), max(columns) + 1)]
        for r in range(min(rows), max(rows) + 1)
    ]


def extract_excel_text(path: PathArg) -> tuple[str, int]:
    """Return the text of every sheet of a workbook and the number of sheets."""
    try:
        with zipfile.ZipFile(path) as archive:
            workbook = _read_xml(archive, "xl/workbook.xml")
            rels = _read_xml(archive, "xl/_rels/workbook.xml.rels")
            targets = {rel.get("Id"): rel.get("Target", "") for rel in rels.iter(f"{_PR}Relationship")}
            shared: list[str] = []
            if "xl/sharedStrings.xml" in archive.namelist():
                strings = _read_xml(archive, "xl/sharedStrings.xml")
                shared = [
                    "".join(t.text or "" for t in item.iter(f"{_S}t"))
                    for item in strings.findall(f"{_S}si")
                ]
            parts: list[str] = []
            sheets = workbook.iter(f"{_S}sheet")
            names = []
            for sheet in sheets:
                name = sheet.get("name", "")
                names.append(name)
                parts.append(f"\n=== Sheet: {name} ===\n")
                target = targets.get(sheet.get(f"{_R}id"), "")
                member = target.lstrip("/") if target.startswith("/") else f"xl/{target}"
                try:
                    root = _read_xml(archive, member)
                except KeyError:
                    continue
                for row in _sheet_rows(root, shared):
                    parts.append("".join(cell + "\t" for cell in row) + "\n")
    except (zipfile.BadZipFile, KeyError, ParseError, DefusedXmlException) as exc:
        raise ValueError(f"Failed to parse workbook: {exc}") from exc
    return "".join(parts), len(names)


_OBJECT = re.compile(rb"(\d+)\s+\d+\s+obj(.*?)endobj", re.DOTALL)
_LENGTH = re.compile(rb"/Length\s+(\d+)(?!\s+\d+\s+R)")


def _iter_streams(data: bytes) -> Iterator[tuple[bytes, bytes]]:
    for match in _OBJECT.finditer(data):
        body = match.group(2)
        start = body.find(b"stream")
        if start < 0:
            continue
        header = body[:start]
        offset = start + len(b"stream")
        if body[offset:offset + 2] == b"\r\n":
            offset += 2
        elif body[offset:offset + 1] in (b"\n", b"\r"):
            offset += 1
        length = _LENGTH.search(header)
        if length:
            raw = body[offset:offset + int(length.group(1))]
        else:
            end = body.rfind(b"endstream")
            raw = body[offset:end].rstrip(b"\r\n")
        yield header, raw


def _decoded(header: bytes, raw: bytes) -> bytes | None:
    if b"/FlateDecode" in header:
        try:
            return zlib.decompress(raw)
        except zlib.error:
            return None
    if b"/Filter" in header:
        return None
    return raw


_ESCAPES = {b"n": b"\n", b"r": b"\r", b"t": b"\t", b"b": b"\b", b"f": b"\f"}


def _read_literal(content: bytes, start: int) -> tuple[bytes, int]:
    out = bytearray()
    depth = 1
    i = start + 1
    while i < len(content) and depth:
        char = content[i:i + 1]
        if char == b"\\":
            following = content[i + 1:i + 2]
            if following in _ESCAPES:
                out += _ESCAPES[following]
                i += 2
            elif following.isdigit():
                digits = re.match(rb"[0-7]{1,3}", content[i + 1:i + 4]).group(0)
                out.append(int(digits, 8) & 0xFF)
                i += 1 + len(digits)
            elif following in (b"\n", b"\r"):
                i += 2
            else:
                out += following
                i += 2
            continue
        if char == b"(":
            depth += 1
        elif char == b")":
            depth -= 1
            if not depth:
                break
        out += char
        i += 1
    return bytes(out), i + 1


def _decode_text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


_OPERATOR = re.compile(rb"[A-Za-z'\"*]+")


def _content_text(content: bytes) -> str:
    pieces: list[str] = []
    pending: list[bytes] = []
    i = 0
    while i < len(content):
        char = content[i:i + 1]
        if char == b"(":
            literal, i = _read_literal(content, i)
            pending.append(literal)
        elif char == b"<" and content[i + 1:i + 2] != b"<":
            end = content.find(b">", i)
            end = len(content) if end < 0 else end
            digits = re.sub(rb"\s", b"", content[i + 1:end])
            if len(digits) % 2:
                digits += b"0"
            try:
                pending.append(bytes.fromhex(digits.decode("ascii")))
            except ValueError:
                pass
            i = end + 1
        elif char == b"<":
            i += 2
        elif char == b"%":
            end = content.find(b"\n", i)
            i = len(content) if end < 0 else end + 1
        elif _OPERATOR.match(char):
            operator = _OPERATOR.match(content, i).group(0)
            i += len(operator)
            if operator in (b"'", b'"', b"T*"):
                pieces.append("\n")
            if operator in (b"Tj", b"TJ", b"'", b'"'):
                pieces.append(_decode_text(b"".join(pending)))
            elif operator == b"ET":
                pieces.append("\n")
            pending.clear()
        else:
            i += 1
    return "".join(pieces)


def extract_pdf_text(data: bytes) -> str:
    """Return the text shown by the content streams of a PDF."""
    parts = []
    for header, raw in _iter_streams(data):
        if b"/Subtype" in header and b"/Image" in header:
            continue
        content = _decoded(header, raw)
        if content is not None:
            parts.append(_content_text(content))
    return "".join(parts)


def iter_pdf_jpeg_images(data: bytes) -> Iterator[bytes]:
    """Yield the JPEG data of every DCT-encoded image object in a PDF."""
    for header, raw in _iter_streams(data):
        if b"/Image" in header and b"/DCTDecode" in header:
            yield raw


_PAGE = re.compile(rb"/Type\s*/Page(?![A-Za-z])")


def count_pdf_pages(data: bytes) -> int:
    """Count page objects in a PDF; raise ValueError if there are none."""
    if not data.startswith(b"%PDF"):
        raise ValueError("not a PDF file")
    pages = len(_PAGE.findall(data))
    if not pages:
        raise ValueError("no page objects found")
    return pages
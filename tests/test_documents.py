import zipfile

import pytest

from ocrbatch.documents import (
    count_pdf_pages,
    extract_docx_text,
    extract_excel_text,
    extract_pdf_text,
    iter_pdf_jpeg_images,
)

W = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
S = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PR = "http://schemas.openxmlformats.org/package/2006/relationships"


def make_docx(path):
    body = (
        f'<w:document xmlns:w="{W}"><w:body>'
        "<w:p><w:r><w:t>Hello</w:t></w:r><w:r><w:t>world</w:t></w:r></w:p>"
        "<w:tbl><w:tr><w:tc><w:p><w:r><w:t>a</w:t></w:r></w:p></w:tc>"
        "<w:tc><w:p><w:r><w:t>b</w:t></w:r></w:p></w:tc></w:tr></w:tbl>"
        "</w:body></w:document>"
    )
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("word/document.xml", body)
    return path


def make_xlsx(path):
    workbook = (
        f'<workbook xmlns="{S}" xmlns:r="{R}"><sheets>'
        '<sheet name="Data" sheetId="1" r:id="rId1"/></sheets></workbook>'
    )
    rels = (
        f'<Relationships xmlns="{PR}">'
        '<Relationship Id="rId1" Target="worksheets/sheet1.xml"/></Relationships>'
    )
    shared = f'<sst xmlns="{S}"><si><t>name</t></si><si><t>widget</t></si></sst>'
    sheet = (
        f'<worksheet xmlns="{S}"><sheetData>'
        '<row r="1"><c r="A1" t="s"><v>0</v></c><c r="B1" t="inlineStr"><is><t>qty</t></is></c></row>'
        '<row r="2"><c r="A2" t="s"><v>1</v></c><c r="B2"><v>3</v></c></row>'
        "</sheetData></worksheet>"
    )
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("xl/workbook.xml", workbook)
        archive.writestr("xl/_rels/workbook.xml.rels", rels)
        archive.writestr("xl/sharedStrings.xml", shared)
        archive.writestr("xl/worksheets/sheet1.xml", sheet)
    return path


def test_docx_paragraphs_and_tables(tmp_path):
    text = extract_docx_text(make_docx(tmp_path / "d.docx"))
    assert text == "Hello world \na \tb \t\n"


def test_docx_invalid_raises(tmp_path):
    path = tmp_path / "bad.docx"
    path.write_bytes(b"not a zip")
    with pytest.raises(ValueError):
        extract_docx_text(path)


def test_excel_sheet_text(tmp_path):
    text, sheets = extract_excel_text(make_xlsx(tmp_path / "w.xlsx"))
    assert sheets == 1
    assert text == "\n=== Sheet: Data ===\nname\tqty\t\nwidget\t3\t\n"


def test_excel_invalid_raises(tmp_path):
    path = tmp_path / "bad.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0")
    with pytest.raises(ValueError):
        extract_excel_text(path)


def make_pdf(content):
    stream = b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"
    return (
        b"%PDF-1.7\n1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
        b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n"
        b"3 0 obj\n<< /Type /Page /Parent 2 0 R /Contents 4 0 R >>\nendobj\n"
        b"4 0 obj\n" + stream + b"\nendobj\n%%EOF\n"
    )


def test_pdf_text_with_escapes_and_hex():
    data = make_pdf(b"BT /F1 12 Tf (a \\(b\\) c) Tj [<4869>] TJ ET")
    assert extract_pdf_text(data) == "a (b) cHi\n"


def test_pdf_page_count():
    assert count_pdf_pages(make_pdf(b"")) == 1


def test_pdf_page_count_rejects_non_pdf():
    with pytest.raises(ValueError):
        count_pdf_pages(b"hello")


def test_pdf_without_images_has_no_jpegs():
    assert list(iter_pdf_jpeg_images(make_pdf(b"BT ET"))) == []
# ocrbatch

Batch text extraction from a directory tree of images and documents.

`ocrbatch` walks an input directory (following symbolic links), extracts text
from every supported file using a pool of worker threads, and writes a CSV
summary, a JSON metadata file, a plain-text report and, optionally, one `.txt`
file per document.

Recognised inputs, by file extension (case-insensitive):

- Images: jpg, jpeg, png, bmp, tiff, tif, gif, webp (recognised with Tesseract)
- Documents: pdf, docx, xlsx, xls
- Archives: zip, tar, rar (recognised, but see "Limitations")

## Requirements

- Python 3.10 or later
- The `tesseract` command on your `PATH`, with the language packs you need
- Optionally `ocrmypdf` on your `PATH`, for creating searchable PDFs from images

## Installation

```
pip install .
```

## Usage

```
ocrbatch --input ./input --output ./output
```

The input and output directories are created if they do not exist. If no
supported file is found, the command prints `Error: Input directory was empty`
and exits with status 1.

| Option | Default | Meaning |
| --- | --- | --- |
| `-i`, `--input` | `./input` | Directory to scan (recursively) |
| `-o`, `--output` | `./output` | Directory for results |
| `-l`, `--languages` | `ukr+eng` | Tesseract languages, `+` or `,` separated; unusual codes produce a warning |
| `--list-languages` | | Print the installed Tesseract languages and exit |
| `--pdf-ocr` | off | When a PDF has little or no text, OCR the JPEG images embedded in it |
| `-w`, `--workers` | CPU count − 1 (at least 1) | Number of worker threads (never more than the number of files) |
| `--save-texts` / `--no-save-texts` | on | Write one `.txt` file per successful document |
| `--searchable-pdf` | off | Build a PDF for every successfully processed image |
| `--pdf-method` | `ocrmypdf` | `ocrmypdf` or `native`; falls back to `native` if `ocrmypdf` is missing |
| `--dpi` | `300` | DPI passed to Tesseract, or `screen` (96 on Windows, 72 elsewhere); invalid values fall back to 300 |
| `--psm` | `3` | Tesseract page segmentation mode |
| `--oem` | `3` | Tesseract OCR engine mode |
| `--analyze-quality` / `--no-analyze-quality` | on | Print per-image average confidence, a guessed language and up to three low-confidence words |
| `-v`, `--verbose` | off | Show Tesseract commands and Tesseract's diagnostics |

Before processing, the requested languages are checked against
`tesseract --list-langs`; missing packs are reported as a warning.

## Output

The output directory holds:

- `results.csv`: filename, file type, page count, text length (UTF-8 bytes), processing time in milliseconds and error for each file
- `metadata.json`: every result in full, including extracted text and file metadata (path, size, modification time, and image dimensions and colour type or document type)
- `report.txt`: overall statistics, distribution by file type, failed files and the five files with the most text
- `texts/`: one text file per successfully processed document with text (with `--save-texts`)
- `searchable_pdfs/`: PDFs created with `--searchable-pdf`

Page counts are 1 for images, the number of page objects for PDFs, an estimate
of 500 words per page for DOCX files, and the number of sheets for workbooks.

## Library use

```python
from pathlib import Path

from ocrbatch.file_processors import FileProcessor, ProcessingError
from ocrbatch.ocr_engine import OcrEngine

engine = OcrEngine("eng")
processor = FileProcessor(use_pdf_ocr=False)
try:
    for result in processor.process_file(Path("scan.png"), engine):
        print(result.file_type.describe(), result.page_count, result.text)
except ProcessingError as exc:
    print("failed:", exc)
```

Other building blocks:

- `ocrbatch.file_types.detect_file_type(path)` classifies a path by extension.
- `ocrbatch.documents` has `extract_docx_text`, `extract_excel_text`,
  `extract_pdf_text` and `count_pdf_pages`, which work without Tesseract.
- `ocrbatch.ocr_engine` has `OcrEngine.extract_with_confidence`,
  `parse_tsv_output`, `check_available_languages`, `validate_languages` and
  `detect_language`, a small built-in guesser that returns a three-letter code
  such as `"Eng"` and a confidence between 0 and 1.
- `ocrbatch.pdf_creator.create_searchable_pdf` writes a PDF from an image with
  `PdfCreationMethod.OCRMYPDF` or `PdfCreationMethod.NATIVE`.
- `ocrbatch.reporting` has `OcrResult`, `extract_metadata`, `save_results`,
  `render_report` and `generate_report`.

## Limitations

- Archives (zip, tar, rar) are recognised but not unpacked; each is reported as
  a failure ("Archive processing not implemented in this version").
- Workbooks are read as Office Open XML (zip) files. Old binary `.xls` files
  cannot be read and are reported as failures.
- PDF text is read directly from uncompressed or Flate-compressed content
  streams, without font encoding maps; PDFs with other encodings may yield
  little or garbled text. A PDF's own text is used only when it is longer than
  100 bytes; otherwise the text is empty unless `--pdf-ocr` is given.
- The `native` PDF method embeds the image and places the recognised text as a
  single invisible line in the standard Helvetica font; it is not a proper
  searchable text layer. Use `ocrmypdf` for that.
- Language detection is a simple script and common-word heuristic, not a
  statistical model.
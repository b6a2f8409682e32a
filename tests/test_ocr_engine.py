import subprocess
from unittest import mock

import pytest

from ocrbatch.ocr_engine import (
    OcrEngine,
    OcrError,
    OcrWordResult,
    check_available_languages,
    detect_language,
    parse_tsv_output,
    validate_languages,
)

HEADER = "level\tpage_num\tblock_num\tpar_num\tline_num\tword_num\tleft\ttop\twidth\theight\tconf\ttext"


def _row(level, conf, text):
    return f"{level}\t1\t1\t1\t1\t1\t10\t10\t50\t20\t{conf}\t{text}"


def _completed(stdout=b"", stderr=b"", returncode=0):
    return subprocess.CompletedProcess(["tesseract"], returncode, stdout=stdout, stderr=stderr)


def test_parse_tsv_keeps_only_word_rows():
    tsv = "\n".join(
        [
            HEADER,
            _row(1, -1, ""),
            _row(4, -1, ""),
            _row(5, 96.5, "Hello"),
            _row(5, 40, "world"),
            _row(5, 91, ""),
        ]
    )
    assert parse_tsv_output(tsv) == [
        OcrWordResult("Hello", 96.5),
        OcrWordResult("world", 40.0),
    ]


def test_parse_tsv_bad_confidence_becomes_zero():
    tsv = HEADER + "\n" + _row(5, "n/a", "word")
    assert parse_tsv_output(tsv) == [OcrWordResult("word", 0.0)]


def test_parse_tsv_skips_header_and_short_rows():
    tsv = _row(5, 80, "first") + "\n5\t1\t2\n" + _row(5, 70, "second")
    words = parse_tsv_output(tsv)
    assert [w.text for w in words] == ["second"]


def test_extract_text_from_image_builds_command_and_strips():
    engine = OcrEngine(language="eng", dpi=150, psm=6, oem=1)
    with mock.patch("subprocess.run", return_value=_completed(b"  some text\n\n")) as run:
        assert engine.extract_text_from_image("page.png") == "some text"
    args = run.call_args.args[0]
    assert args == [
        "tesseract", "page.png", "stdout", "-l", "eng",
        "--dpi", "150", "--psm", "6", "--oem", "1",
    ]
    assert run.call_args.kwargs["stderr"] == subprocess.DEVNULL


def test_extract_text_from_image_failure():
    engine = OcrEngine(verbose=True)
    with mock.patch("subprocess.run", return_value=_completed(stderr=b"bad image", returncode=1)):
        with pytest.raises(OcrError, match="Tesseract failed: bad image"):
            engine.extract_text_from_image("page.png")


def test_extract_text_verbose_prints_command(capsys):
    engine = OcrEngine(language="eng", verbose=True)
    with mock.patch("subprocess.run", return_value=_completed(b"ok")) as run:
        assert engine.extract_text_from_image("a.png") == "ok"
    assert "🔧 Tesseract: tesseract a.png stdout -l eng" in capsys.readouterr().err
    assert run.call_args.kwargs["stderr"] == subprocess.PIPE


def test_missing_binary_raises_ocr_error():
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("tesseract")):
        with pytest.raises(OcrError):
            OcrEngine().extract_text_from_image("a.png")


def test_extract_with_confidence_single_word():
    tsv = (HEADER + "\n" + _row(5, 88.0, "Hello")).encode()
    with mock.patch("subprocess.run", return_value=_completed(tsv)) as run:
        result = OcrEngine(language="eng").extract_with_confidence("a.png")
    assert result.words == [OcrWordResult("Hello", 88.0)]
    assert result.avg_confidence == pytest.approx(88.0)
    assert run.call_args.args[0][-1] == "tsv"


def test_extract_with_confidence_average_and_language():
    sentence = "The results of the scan are stored in the output folder and the report is ready"
    rows = [HEADER] + [_row(5, 50 + i, word) for i, word in enumerate(sentence.split())]
    with mock.patch("subprocess.run", return_value=_completed("\n".join(rows).encode())):
        result = OcrEngine().extract_with_confidence("a.png")
    confidences = [w.confidence for w in result.words]
    assert result.avg_confidence == pytest.approx(sum(confidences) / len(confidences))
    assert result.detected_language == "Eng"
    assert 0.0 < result.language_confidence <= 1.0


def test_extract_with_confidence_empty_output():
    with mock.patch("subprocess.run", return_value=_completed(HEADER.encode())):
        result = OcrEngine().extract_with_confidence("a.png")
    assert result.words == []
    assert result.avg_confidence == 0.0
    assert result.detected_language is None
    assert result.language_confidence is None


def test_extract_with_confidence_failure():
    with mock.patch("subprocess.run", return_value=_completed(stderr=b"oops", returncode=2)):
        with pytest.raises(OcrError, match="Tesseract TSV failed: oops"):
            OcrEngine().extract_with_confidence("a.png")


def test_check_available_languages():
    listing = b'List of available languages in "/usr/share/tessdata/" (3):\neng\n  ukr \n\nosd\n'
    with mock.patch("subprocess.run", return_value=_completed(listing)) as run:
        assert check_available_languages() == ["eng", "ukr", "osd"]
    assert run.call_args.args[0] == ["tesseract", "--list-langs"]


def test_check_available_languages_failure():
    with mock.patch("subprocess.run", return_value=_completed(returncode=1)):
        with pytest.raises(OcrError, match="Cannot check Tesseract languages"):
            check_available_languages()


def test_validate_languages_reports_missing(capsys):
    listing = b"List of available languages (2):\neng\nukr\n"
    with mock.patch("subprocess.run", return_value=_completed(listing)):
        with pytest.raises(OcrError, match="Missing language packs: deu, fra"):
            validate_languages("eng+deu+fra")
    assert "tesseract-ocr-deu tesseract-ocr-fra" in capsys.readouterr().err


def test_validate_languages_all_present():
    listing = b"List of available languages (2):\neng\nukr\n"
    with mock.patch("subprocess.run", return_value=_completed(listing)) as run:
        assert validate_languages("ukr+eng") is None
    assert run.call_count == 1


def test_detect_language_without_letters():
    assert detect_language("1234 !! -- 56") is None
    assert detect_language("") is None


def test_detect_language_ukrainian():
    detected = detect_language("Це тестовий документ, і ми його перевіряємо. Україна та її мова.")
    assert detected[0] == "Ukr"
    assert 0.0 < detected[1] <= 1.0


def test_detect_language_russian():
    detected = detect_language("Это простой текст на русском языке, и мы его проверяем.")
    assert detected[0] == "Rus"
    assert 0.0 <= detected[1] <= 1.0
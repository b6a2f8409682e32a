"""Text recognition through the ``tesseract`` command-line tool."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

PathArg = Union[str, os.PathLike]


class OcrError(Exception):
    """Raised when tesseract cannot be run or reports a failure."""


@dataclass
class OcrWordResult:
    text: str
    confidence: float


@dataclass
class OcrAnalysisResult:
    words: list[OcrWordResult] = field(default_factory=list)
    avg_confidence: float = 0.0
    detected_language: Optional[str] = None
    language_confidence: Optional[float] = None


def _run(args: Sequence[str], *, capture_stderr: bool = True) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE if capture_stderr else subprocess.DEVNULL,
            check=False,
        )
    except OSError as exc:
        raise OcrError(f"cannot run {args[0]}: {exc}") from exc


def _decode_stdout(output: bytes) -> str:
    try:
        return output.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise OcrError(f"tesseract produced invalid UTF-8: {exc}") from exc


def _stderr_text(process: subprocess.CompletedProcess) -> str:
    return (process.stderr or b"").decode("utf-8", errors="replace")


@dataclass
class OcrEngine:
    """Settings for a tesseract run: languages, DPI, page segmentation and engine mode."""

    language: str = "ukr+eng"
    dpi: int = 300
    psm: int = 3
    oem: int = 3
    verbose: bool = False

    def extract_with_confidence(self, image_path: PathArg) -> OcrAnalysisResult:
        """Recognise words with their confidences and guess the text's language."""
        process = _run(
            [
                "tesseract",
                os.fspath(image_path),
                "stdout",
                "-l",
                self.language,
                "--dpi",
                str(self.dpi),
                "tsv",
            ]
        )
        if process.returncode != 0:
            raise OcrError(f"Tesseract TSV failed: {_stderr_text(process)}")

        words = parse_tsv_output(_decode_stdout(process.stdout))
        avg_confidence = (
            sum(word.confidence for word in words) / len(words) if words else 0.0
        )

        full_text = " ".join(word.text for word in words)
        detected = detect_language(full_text) if full_text else None
        if detected is None:
            return OcrAnalysisResult(words, avg_confidence)

        code, confidence = detected
        if self.verbose:
            print(f"🌍 Detected: {code} ({confidence * 100:.1f}%)", file=sys.stderr)
        return OcrAnalysisResult(words, avg_confidence, code, confidence)

    def extract_text_from_image(self, image_path: PathArg) -> str:
        """Return the recognised text of an image, stripped of surrounding whitespace."""
        path = os.fspath(image_path)
        args = [
            "tesseract",
            path,
            "stdout",
            "-l",
            self.language,
            "--dpi",
            str(self.dpi),
            "--psm",
            str(self.psm),
            "--oem",
            str(self.oem),
        ]
        if self.verbose:
            print(
                f"🔧 Tesseract: tesseract {path} stdout -l {self.language} "
                f"--dpi {self.dpi} --psm {self.psm} --oem {self.oem}",
                file=sys.stderr,
            )

        process = _run(args, capture_stderr=self.verbose)
        if process.returncode != 0:
            raise OcrError(f"Tesseract failed: {_stderr_text(process)}")
        return _decode_stdout(process.stdout).strip()


def check_available_languages() -> list[str]:
    """List the language packs tesseract reports as installed."""
    process = _run(["tesseract", "--list-langs"])
    if process.returncode != 0:
        raise OcrError("Cannot check Tesseract languages")
    lines = _decode_stdout(process.stdout).splitlines()[1:]
    return [line.strip() for line in lines if line.strip()]


def validate_languages(requested: str) -> None:
    """Raise :class:`OcrError` if any ``+``-separated language pack is missing."""
    available = set(check_available_languages())
    missing = [lang for lang in requested.split("+") if lang not in available]
    if not missing:
        return

    joined = ", ".join(missing)
    packages = " ".join(f"tesseract-ocr-{lang}" for lang in missing)
    print(f"⚠️  Missing language packs: {joined}", file=sys.stderr)
    print("\n📦 Installation instructions:", file=sys.stderr)
    print(f"  • Ubuntu/Debian: sudo apt install {packages}", file=sys.stderr)
    print("  • Windows: add the language data with the Tesseract installer", file=sys.stderr)
    print("  • macOS: brew install tesseract-lang\n", file=sys.stderr)
    raise OcrError(f"Missing language packs: {joined}")


def parse_tsv_output(tsv: str) -> list[OcrWordResult]:
    """Collect word-level rows (level 5) with non-empty text from tesseract TSV output."""
    words = []
    for line in tsv.splitlines()[1:]:
        columns = line.split("\t")
        if len(columns) < 12 or columns[0] != "5":
            continue
        try:
            confidence = float(columns[10])
        except ValueError:
            confidence = 0.0
        text = columns[11]
        if text:
            words.append(OcrWordResult(text, confidence))
    return words


_SCRIPT_RANGES = (
    ("Cyrillic", 0x0400, 0x04FF),
    ("Greek", 0x0370, 0x03FF),
    ("Armenian", 0x0530, 0x058F),
    ("Hebrew", 0x0590, 0x05FF),
    ("Arabic", 0x0600, 0x06FF),
    ("Devanagari", 0x0900, 0x097F),
    ("Thai", 0x0E00, 0x0E7F),
    ("Georgian", 0x10A0, 0x10FF),
    ("Hangul", 0x1100, 0x11FF),
    ("Kana", 0x3040, 0x30FF),
    ("Han", 0x4E00, 0x9FFF),
    ("Hangul", 0xAC00, 0xD7AF),
)

_SINGLE_LANGUAGE_SCRIPTS = {
    "Greek": "Ell",
    "Armenian": "Hye",
    "Hebrew": "Heb",
    "Arabic": "Ara",
    "Devanagari": "Hin",
    "Thai": "Tha",
    "Georgian": "Kat",
    "Hangul": "Kor",
    "Kana": "Jpn",
    "Han": "Cmn",
}


@dataclass(frozen=True)
class _Profile:
    code: str
    markers: str
    stopwords: frozenset


def _profile(code: str, markers: str, stopwords: str) -> _Profile:
    return _Profile(code, markers, frozenset(stopwords.split()))


_LATIN_PROFILES = (
    _profile("Eng", "", "the and of to in is that it was for on are with as this be at by not you have from"),
    _profile("Deu", "äöüß", "der die das und ist nicht ein eine zu den mit sich des auf für von dem ich auch"),
    _profile("Fra", "çéèêàœù", "le la les et est un une des du que dans pour pas ce sur qui avec au il elle"),
    _profile("Spa", "ñ¿¡áíóú", "el la los las y es un una que de en por para con no se del al como más"),
    _profile("Ita", "àèìòù", "il lo la gli le e è un una che di per non con del della sono come anche"),
    _profile("Por", "ãõçâê", "o a os as e é um uma que de em para com não do da no na se por"),
    _profile("Nld", "", "de het een en is van dat die niet op zijn met voor ik te aan er"),
    _profile("Pol", "ąćęłńśźż", "i w na z się nie że jest to do jak o po co ale tak"),
    _profile("Ces", "ěščřžůý", "a je se na že to v s z do jak ale jsem není by"),
    _profile("Tur", "ğış", "ve bir bu da de için ile çok ne var olan gibi daha"),
    _profile("Swe", "åäö", "och att det som en på är av för med jag inte till den"),
    _profile("Dan", "æøå", "og at det en er til på med for som ikke jeg af den"),
    _profile("Fin", "äö", "ja on ei se että oli hän mutta kun niin ovat"),
    _profile("Hun", "őű", "a az és hogy nem egy is van meg de ez el"),
    _profile("Ron", "șțăâî", "și în de la care cu pe nu este un o să din"),
)

_CYRILLIC_PROFILES = (
    _profile("Rus", "ыэёъ", "и в не на что с как это для по"),
    _profile("Ukr", "іїєґ", "і та що не на в з як це для до"),
    _profile("Bel", "ўі", "і ў не на што з як гэта"),
    _profile("Bul", "ъ", "и на да се не за от в е че"),
    _profile("Srp", "ђћџљњј", "и у је да на се не за од"),
    _profile("Mkd", "ѓќѕљњј", "и на се да не во за од е ќе"),
)

_WORD = re.compile(r"[^\W\d_]+")


def _script_of(char: str) -> Optional[str]:
    code = ord(char)
    for script, low, high in _SCRIPT_RANGES:
        if low <= code <= high:
            return script if char.isalpha() else None
    if char.isalpha() and code < 0x0250:
        return "Latin"
    return None


def _rank_profiles(text: str, profiles: Sequence[_Profile]) -> tuple[str, float]:
    lowered = text.lower()
    words = _WORD.findall(lowered)
    scores = [
        (
            2 * sum(word in profile.stopwords for word in words)
            + sum(lowered.count(marker) for marker in profile.markers),
            profile.code,
        )
        for profile in profiles
    ]
    ranked = sorted(scores, key=lambda item: item[0], reverse=True)
    best, code = ranked[0]
    if best == 0:
        return profiles[0].code, 0.0
    return code, (best - ranked[1][0]) / best


def detect_language(text: str) -> Optional[tuple[str, float]]:
    """Guess the language of ``text``.

    Returns a three-letter code such as ``"Eng"`` and a confidence between
    0 and 1, or ``None`` when the text has no letters.
    """
    counts = Counter(script for script in map(_script_of, text) if script)
    if not counts:
        return None
    total = sum(counts.values())
    script, letters = counts.most_common(1)[0]

    if script in ("Han", "Kana") and counts.get("Kana"):
        return "Jpn", (counts["Han"] + counts["Kana"]) / total
    share = letters / total
    if script in _SINGLE_LANGUAGE_SCRIPTS:
        return _SINGLE_LANGUAGE_SCRIPTS[script], share

    profiles = _CYRILLIC_PROFILES if script == "Cyrillic" else _LATIN_PROFILES
    code, confidence = _rank_profiles(text, profiles)
    return code, confidence * share
[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ocrbatch"
version = "0.3.3"
description = "Batch text extraction from images, PDF, DOCX and XLSX files using Tesseract OCR"
requires-python = ">=3.10"
keywords = ["ocr", "tesseract", "batch", "pdf", "docx", "xlsx", "text extraction"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
    "Topic :: Text Processing",
]
dependencies = [
    "pillow",
    "tqdm",
    "defusedxml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ocrbatch = "ocrbatch.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ocrbatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

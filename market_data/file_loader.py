"""
Source text loading utilities with encoding fallback and delimiter sniffing.

The pipeline itself works on already-loaded text; these helpers sit at the
boundary where a hosting application turns a file into that text.
"""

from __future__ import annotations

import csv
from pathlib import Path

from market_data.logger import get_logger

logger = get_logger(__name__)

ALLOWED_SUFFIXES = (".csv", ".tsv", ".txt")
CSV_ENCODINGS = ["utf-8", "utf-8-sig", "latin-1", "cp1252"]
CSV_DELIMITERS = [",", ";", "\t", "|"]


def sniff_delimiter(sample: str) -> str | None:
    if not sample:
        return None
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters="".join(CSV_DELIMITERS))
        return dialect.delimiter
    except csv.Error:
        return None


def detect_delimiter(text: str, sample_size: int = 8192) -> str:
    """
    Pick the delimiter for delimited text.

    The header line decides first (the candidate occurring most often wins);
    the csv sniffer is consulted when the header has none of the candidates.
    Falls back to a comma.
    """
    header = text.lstrip("\ufeff").split("\n", 1)[0]
    counts = {candidate: header.count(candidate) for candidate in CSV_DELIMITERS}
    best = max(CSV_DELIMITERS, key=lambda candidate: counts[candidate])
    if counts[best] > 0:
        return best

    return sniff_delimiter(text[:sample_size]) or ","


def read_source_text(
    path: Path | str,
    *,
    encoding: str | None = None,
    encodings: list[str] | None = None,
) -> str:
    """
    Read a delimited source file as text, trying multiple encodings if needed.

    Args:
        path: Path to the file.
        encoding: Force a single encoding.
        encodings: Candidate encodings tried in order. Defaults to CSV_ENCODINGS.

    Returns:
        Decoded file content.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the suffix is unsupported or no encoding decodes the file.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Source file not found: {file_path}")

    if file_path.suffix.lower() not in ALLOWED_SUFFIXES:
        raise ValueError(f"Unsupported file format: {file_path.suffix}")

    raw = file_path.read_bytes()
    encodings_to_try = [encoding] if encoding else (encodings or CSV_ENCODINGS)
    last_error: Exception | None = None
    for candidate in encodings_to_try:
        try:
            text = raw.decode(candidate)
            logger.debug(f"Decoded {file_path} as {candidate}")
            return text.lstrip("\ufeff")
        except (UnicodeDecodeError, LookupError) as exc:
            last_error = exc
            continue
    raise ValueError(f"Failed to decode source file: {file_path}") from last_error

from __future__ import annotations

from pathlib import Path
from typing import Iterator, TextIO


def iter_words(stream: TextIO) -> Iterator[str]:
    """Yield whitespace-separated words until end of stream."""
    for line in stream:
        yield from line.split()


def read_labels(path: str | Path) -> list[int]:
    """Read integer labels separated by whitespace and/or commas."""
    p = Path(path)
    text = p.read_text(encoding="utf-8").replace(",", " ")
    try:
        return [int(tok) for tok in text.split()]
    except ValueError as exc:
        raise ValueError(f"{p}: labels must be integers ({exc})") from None


def write_text(path: str | Path, text: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        f.write(text)

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass
class DecodeTraceLogger:
    """Collects one line per decoded record; nothing is written until ``flush``."""

    destination: Path

    def __post_init__(self) -> None:
        self._lines: List[str] = []

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def record(self, *, offset: int, kind: str, detail: str = "") -> None:
        line = f"off=0x{offset:06X} {kind:<24}"
        if detail:
            line += f" {detail}"
        self._lines.append(line.rstrip())

    def flush(self) -> None:
        if not self._lines:
            return
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        text = "\n".join(self._lines) + "\n"
        self.destination.write_text(text, encoding="utf-8")

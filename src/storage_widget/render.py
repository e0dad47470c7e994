from __future__ import annotations

import sys
from enum import Enum
from typing import List, Optional, Protocol, Sequence, TextIO

from .models import DriveRecord


class SizeHint(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @classmethod
    def parse(cls, value: str) -> "SizeHint":
        return cls(value.strip().lower())


class Renderer(Protocol):
    def render(self, drives: Sequence[DriveRecord], size: SizeHint) -> None:
        ...


def drive_lines(drive: DriveRecord, size: SizeHint) -> List[str]:
    """Text shown next to a ring; more detail for bigger sizes."""
    lines = [f"{drive.name}  {drive.used_percent}%"]
    if size is SizeHint.SMALL:
        return lines
    lines.append(f"Used: {drive.formatted_used}")
    lines.append(f"Free: {drive.formatted_free}")
    if size is SizeHint.LARGE:
        lines.append(f"Total: {drive.formatted_total}")
    return lines


class TextRenderer:
    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def render(self, drives: Sequence[DriveRecord], size: SizeHint) -> None:
        for i, drive in enumerate(drives):
            if i:
                self.stream.write("\n")
            kind = "internal" if drive.is_internal else "external"
            lines = drive_lines(drive, size)
            self.stream.write(f"[{kind}] {lines[0]}\n")
            for line in lines[1:]:
                self.stream.write(f"  {line}\n")

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

INTERNAL_NAME_MARKERS = ("Mac", "SSD", "Internal")


def is_internal_name(name: str) -> bool:
    """Guess whether a drive is built in from its display name alone."""
    return any(marker in name for marker in INTERNAL_NAME_MARKERS)


def format_bytes(value: int) -> str:
    """Format a byte count the way file browsers do (1 KB = 1000 bytes)."""
    if value == 0:
        return "Zero KB"
    if abs(value) == 1:
        return f"{value} byte"
    if abs(value) < 1000:
        return f"{value} bytes"
    size = float(value)
    for unit, digits in (("KB", 0), ("MB", 1), ("GB", 2), ("TB", 2), ("PB", 2)):
        size /= 1000
        if round(abs(size), digits) < 1000:
            break
    text = f"{size:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {unit}"


@dataclass
class RawVolume:
    mountpoint: str
    name: Optional[str] = None
    total_bytes: Optional[int] = None
    available_bytes: Optional[int] = None
    is_removable: bool = False
    is_internal: bool = False


@dataclass(frozen=True)
class DriveRecord:
    name: str
    total_bytes: int
    available_bytes: int

    @property
    def used_bytes(self) -> int:
        return self.total_bytes - self.available_bytes

    @property
    def used_ratio(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        ratio = self.used_bytes / self.total_bytes
        return max(0.0, min(1.0, ratio))

    @property
    def used_percent(self) -> int:
        return int(self.used_ratio * 100)

    @property
    def is_internal(self) -> bool:
        # Driven by the name so a record carries its class without OS flags.
        return is_internal_name(self.name)

    @property
    def formatted_total(self) -> str:
        return format_bytes(self.total_bytes)

    @property
    def formatted_used(self) -> str:
        return format_bytes(self.used_bytes)

    @property
    def formatted_free(self) -> str:
        return format_bytes(self.available_bytes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total_bytes": self.total_bytes,
            "available_bytes": self.available_bytes,
            "used_bytes": self.used_bytes,
            "used_ratio": self.used_ratio,
            "is_internal": self.is_internal,
        }


@dataclass
class StorageEntry:
    date: datetime
    drives: List[DriveRecord] = field(default_factory=list)

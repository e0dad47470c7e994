"""Disk usage rings for internal and external drives."""

from .models import DriveRecord, RawVolume, StorageEntry
from .platform import list_volumes
from .drives import (
    MAX_DISPLAY_DRIVES,
    classify,
    current_drive,
    display_drives,
    format_bytes,
    is_internal_name,
    placeholder_drive,
    placeholder_drives,
    snapshot,
)
from .render import Renderer, SizeHint, TextRenderer

__all__ = [
    "DriveRecord",
    "RawVolume",
    "StorageEntry",
    "list_volumes",
    "MAX_DISPLAY_DRIVES",
    "classify",
    "current_drive",
    "display_drives",
    "format_bytes",
    "is_internal_name",
    "placeholder_drive",
    "placeholder_drives",
    "snapshot",
    "Renderer",
    "SizeHint",
    "TextRenderer",
]

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .models import DriveRecord, RawVolume, StorageEntry, format_bytes, is_internal_name
from .platform import list_volumes

logger = logging.getLogger(__name__)

MAX_DISPLAY_DRIVES = 4

__all__ = [
    "MAX_DISPLAY_DRIVES",
    "classify",
    "display_drives",
    "format_bytes",
    "is_internal_name",
    "placeholder_drive",
    "placeholder_drives",
    "current_drive",
    "snapshot",
]


def classify(raw_volumes: Iterable[RawVolume], limit: Optional[int] = None) -> List[DriveRecord]:
    """Turn raw volumes into named drive records, keeping enumeration order.

    Unnamed volumes get generated names: internal ones (and ones the OS
    flags as neither internal nor removable) become "Mac SSD", then
    "Internal 2", "Internal 3"...; removable ones become "External 1",
    "External 2"... Volumes without both capacity figures are dropped.
    """
    internal_count = 0
    external_count = 0
    records: List[DriveRecord] = []

    for vol in raw_volumes:
        if limit is not None and len(records) >= limit:
            break
        total, available = vol.total_bytes, vol.available_bytes
        if total is None or available is None:
            logger.debug("Dropping %s: capacity unknown", vol.mountpoint)
            continue
        if total < 0 or available < 0:
            logger.debug("Dropping %s: negative capacity", vol.mountpoint)
            continue

        if vol.name:
            name = vol.name
        elif vol.is_removable and not vol.is_internal:
            external_count += 1
            name = f"External {external_count}"
        else:
            internal_count += 1
            name = "Mac SSD" if internal_count == 1 else f"Internal {internal_count}"

        if available > total:
            logger.warning(
                "%s reports more free space than capacity (%d > %d)", name, available, total
            )
        records.append(DriveRecord(name=name, total_bytes=int(total), available_bytes=int(available)))

    return records


def display_drives(raw_volumes: Iterable[RawVolume]) -> List[DriveRecord]:
    return classify(raw_volumes, limit=MAX_DISPLAY_DRIVES)


def placeholder_drive() -> DriveRecord:
    return DriveRecord(name="Mac SSD", total_bytes=1_000_000_000_000, available_bytes=300_000_000_000)


def placeholder_drives() -> List[DriveRecord]:
    return [
        placeholder_drive(),
        DriveRecord(name="External 1", total_bytes=500_000_000_000, available_bytes=200_000_000_000),
    ]


def current_drive(drives: Sequence[DriveRecord]) -> DriveRecord:
    """Pick the drive a single-ring view should show."""
    for drive in drives:
        if "Mac" in drive.name or "SSD" in drive.name:
            return drive
    if drives:
        return drives[0]
    return placeholder_drive()


def snapshot(
    volumes: Optional[Iterable[RawVolume]] = None, now: Optional[datetime] = None
) -> StorageEntry:
    if volumes is None:
        volumes = list_volumes()
    drives = display_drives(volumes)
    if not drives:
        logger.info("No readable volumes; showing placeholder drives")
        drives = placeholder_drives()
    return StorageEntry(date=now or datetime.now(), drives=drives)

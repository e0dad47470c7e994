from __future__ import annotations

import json
import logging
import os
import platform
import plistlib
import subprocess
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple
from xml.parsers.expat import ExpatError

import psutil

from .models import RawVolume

logger = logging.getLogger(__name__)

HIDDEN_MOUNT_PREFIXES = (
    "/boot",
    "/snap/",
    "/var/snap/",
    "/run/",
    "/System/Volumes/",
    "/private/var/vm",
)

_WINDOWS_DRIVE_TYPES = {2: "Removable", 3: "Fixed", 4: "Remote", 5: "CD-ROM", 6: "RAM Disk"}
_QUERY_ERRORS = (RuntimeError, OSError, ValueError, AttributeError, ExpatError)


def is_hidden_mount(mountpoint: Optional[str], opts: str = "") -> bool:
    if not mountpoint or mountpoint.startswith("["):
        return True
    if "nobrowse" in opts.split(","):
        return True
    return mountpoint.startswith(HIDDEN_MOUNT_PREFIXES)


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _run_json(cmd: List[str]) -> Any:
    proc = subprocess.run(cmd, capture_output=True, text=True)
    if not proc.stdout.strip():
        raise RuntimeError(proc.stderr.strip() or f"{cmd[0]} returned no output")
    return json.loads(proc.stdout)


def _run_powershell_json(cmd: str) -> Any:
    return _run_json(["powershell", "-NoProfile", "-Command", cmd])


def _windows_volumes() -> List[RawVolume]:
    vols = _run_powershell_json(
        "Get-Volume | Where-Object DriveLetter | "
        "Select-Object DriveLetter,FileSystemLabel,Size,SizeRemaining,DriveType | "
        "ConvertTo-Json -Depth 3"
    )
    if isinstance(vols, dict):
        vols = [vols]

    result: List[RawVolume] = []
    for v in vols:
        letter = v.get("DriveLetter")
        if not letter:
            continue
        drive_type = v.get("DriveType")
        if isinstance(drive_type, int):
            drive_type = _WINDOWS_DRIVE_TYPES.get(drive_type, "Unknown")
        try:
            total = _to_int(v.get("Size"))
            free = _to_int(v.get("SizeRemaining"))
        except (TypeError, ValueError):
            logger.debug("Skipping volume %s: unreadable size", letter)
            continue
        result.append(
            RawVolume(
                mountpoint=f"{letter}:\\",
                name=v.get("FileSystemLabel"),
                total_bytes=total,
                available_bytes=free,
                is_removable=drive_type == "Removable",
                is_internal=drive_type == "Fixed",
            )
        )
    return result


def _walk_lsblk(
    devices: Iterable[Dict[str, Any]], removable: bool
) -> Iterator[Tuple[Dict[str, Any], bool]]:
    for dev in devices:
        dev_removable = (
            removable
            or _flag(dev.get("rm"))
            or _flag(dev.get("hotplug"))
            or (dev.get("tran") or "") == "usb"
        )
        yield dev, dev_removable
        yield from _walk_lsblk(dev.get("children") or [], dev_removable)


def _linux_volumes() -> List[RawVolume]:
    data = _run_json(
        [
            "lsblk",
            "-J",
            "-b",
            "-o",
            "NAME,TYPE,LABEL,MOUNTPOINT,FSSIZE,FSAVAIL,RM,HOTPLUG,TRAN",
        ]
    )

    result: List[RawVolume] = []
    seen = set()
    for dev, removable in _walk_lsblk(data.get("blockdevices", []), False):
        mp = dev.get("mountpoint")
        if is_hidden_mount(mp) or mp in seen:
            continue
        seen.add(mp)
        try:
            total = _to_int(dev.get("fssize"))
            free = _to_int(dev.get("fsavail"))
            if total is None or free is None:
                usage = psutil.disk_usage(mp)
                total, free = int(usage.total), int(usage.free)
        except (TypeError, ValueError, OSError) as exc:
            logger.debug("Skipping volume %s: %s", mp, exc)
            continue
        result.append(
            RawVolume(
                mountpoint=mp,
                name=dev.get("label"),
                total_bytes=total,
                available_bytes=free,
                is_removable=removable,
                is_internal=not removable,
            )
        )
    return result


def _diskutil_info(mountpoint: str) -> Dict[str, Any]:
    proc = subprocess.run(
        ["diskutil", "info", "-plist", mountpoint], capture_output=True
    )
    if proc.returncode != 0 or not proc.stdout:
        raise RuntimeError(f"diskutil failed for {mountpoint}")
    return plistlib.loads(proc.stdout)


def _mac_volumes() -> List[RawVolume]:
    result: List[RawVolume] = []
    for part in psutil.disk_partitions(all=False):
        mp = part.mountpoint
        if is_hidden_mount(mp, part.opts):
            continue
        try:
            info = _diskutil_info(mp)
        except (RuntimeError, OSError, ExpatError, plistlib.InvalidFileException) as exc:
            logger.debug("diskutil unavailable for %s: %s", mp, exc)
            vol = _psutil_volume(part)
            if vol is not None:
                result.append(vol)
            continue
        free = info.get("APFSContainerFree", info.get("FreeSpace"))
        removable = _flag(info.get("RemovableMedia")) or _flag(info.get("Ejectable"))
        result.append(
            RawVolume(
                mountpoint=mp,
                name=info.get("VolumeName"),
                total_bytes=info.get("TotalSize", info.get("Size")),
                available_bytes=free,
                is_removable=removable,
                is_internal=_flag(info.get("Internal")),
            )
        )
    return result


def _psutil_volume(part) -> Optional[RawVolume]:
    mp = part.mountpoint
    try:
        usage = psutil.disk_usage(mp)
    except OSError as exc:
        logger.debug("Skipping volume %s: %s", mp, exc)
        return None
    removable = "removable" in part.opts.split(",") or mp.startswith(("/media/", "/Volumes/"))
    name = os.path.basename(mp.rstrip("/\\")) if mp not in ("/", "") else None
    return RawVolume(
        mountpoint=mp,
        name=name or None,
        total_bytes=int(usage.total),
        available_bytes=int(usage.free),
        is_removable=removable,
        is_internal=not removable,
    )


def _generic_volumes() -> List[RawVolume]:
    result: List[RawVolume] = []
    for part in psutil.disk_partitions(all=False):
        if is_hidden_mount(part.mountpoint, part.opts):
            continue
        vol = _psutil_volume(part)
        if vol is not None:
            result.append(vol)
    return result


def list_volumes() -> List[RawVolume]:
    """Return the visible mounted volumes, or an empty list if none can be read."""
    system = platform.system()
    if system == "Windows":
        query = _windows_volumes
    elif system == "Linux":
        query = _linux_volumes
    elif system == "Darwin":
        query = _mac_volumes
    else:
        query = _generic_volumes
    try:
        volumes = query()
    except _QUERY_ERRORS as exc:
        if query is _generic_volumes:
            logger.warning("Volume enumeration failed on %s: %s", system, exc)
            return []
        logger.warning("Volume query failed on %s, using psutil instead: %s", system, exc)
        try:
            volumes = _generic_volumes()
        except _QUERY_ERRORS as exc:
            logger.warning("Volume enumeration failed on %s: %s", system, exc)
            return []
    logger.debug("Enumerated %d volume(s)", len(volumes))
    return volumes

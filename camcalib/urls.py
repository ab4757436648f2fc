"""Calibration URL handling: variable substitution, classification and package lookup."""

from __future__ import annotations

import enum
import logging
import os
import re
from pathlib import Path
from typing import Callable, Optional

_log = logging.getLogger(__name__)

DEFAULT_CAMERA_INFO_URL = "file://${ROS_HOME}/camera_info/${NAME}.yaml"

_PACKAGE_PREFIX = "package://"
_CAMERA_NAME = re.compile(r"[A-Za-z0-9_]+")

PackageResolver = Callable[[str], Optional[str]]


class UrlType(enum.IntEnum):
    """Kinds of calibration URL; values at or above INVALID are unsupported."""

    EMPTY = 0
    FILE = 1
    PACKAGE = 2
    INVALID = 3
    FLASH = 4

    @property
    def supported(self) -> bool:
        """True for URL kinds that calibration data can be loaded from."""
        return self < UrlType.INVALID


def parse_url(url: str) -> UrlType:
    """Classify a (resolved) calibration URL."""
    if url == "":
        return UrlType.EMPTY
    lowered = url.lower()
    if lowered.startswith("file:///"):
        return UrlType.FILE
    if lowered.startswith("flash:///"):
        return UrlType.FLASH
    if lowered.startswith(_PACKAGE_PREFIX):
        # A '/' must follow a non-empty package name, with something after it.
        rest = url.find("/", len(_PACKAGE_PREFIX))
        if len(_PACKAGE_PREFIX) < rest < len(url) - 1:
            return UrlType.PACKAGE
    return UrlType.INVALID


def _ros_home() -> str:
    ros_home = os.environ.get("ROS_HOME")
    if ros_home is not None:
        return ros_home
    home = os.environ.get("HOME")
    if home is not None:
        return home + "/.ros"
    return ""


def resolve_url(url: str, camera_name: str) -> str:
    """Substitute ``${NAME}`` and ``${ROS_HOME}`` in a URL, in a single pass.

    Unrecognised variables are left as they are and an error is logged.
    """
    parts: list[str] = []
    rest = 0
    while True:
        dollar = url.find("$", rest)
        if dollar < 0:
            parts.append(url[rest:])
            break
        parts.append(url[rest:dollar])
        tail = url[dollar + 1:]
        if not tail.startswith("{"):
            parts.append("$")
        elif tail.startswith("{NAME}"):
            parts.append(camera_name)
            dollar += len("{NAME}")
        elif tail.startswith("{ROS_HOME}"):
            parts.append(_ros_home())
            dollar += len("{ROS_HOME}")
        else:
            _log.error("invalid URL substitution (not resolved): %s", url)
            parts.append("$")
        rest = dollar + 1
    return "".join(parts)


def find_package(name: str) -> Optional[str]:
    """Locate a package directory named ``name`` under ``$ROS_PACKAGE_PATH``.

    A package is a directory holding a ``package.xml`` or ``manifest.xml``.
    Returns its path, or None if no such package is found.
    """
    search = os.environ.get("ROS_PACKAGE_PATH", "")
    for root in filter(None, search.split(os.pathsep)):
        if not Path(root).is_dir():
            continue
        for dirpath, dirnames, filenames in os.walk(root):
            if "package.xml" in filenames or "manifest.xml" in filenames:
                if Path(dirpath).name == name:
                    return dirpath
                dirnames.clear()
                continue
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
    return None


def package_file_name(url: str, package_resolver: PackageResolver | None = None) -> Optional[str]:
    """Turn a ``package://name/rest`` URL into a file name.

    Returns None when the package cannot be found.
    """
    resolver = find_package if package_resolver is None else package_resolver
    _log.debug("camera calibration URL: %s", url)
    start = len(_PACKAGE_PREFIX)
    rest = url.find("/", start)
    if rest < 0:
        package, remainder = url[start:], ""
    else:
        package, remainder = url[start:rest], url[rest:]
    package_path = resolver(package)
    if not package_path:
        _log.warning("unknown package: %s (ignored)", package)
        return None
    return str(package_path) + remainder


def is_valid_camera_name(camera_name: str) -> bool:
    """True if the name is non-empty and holds only letters, digits and '_'."""
    return _CAMERA_NAME.fullmatch(camera_name) is not None
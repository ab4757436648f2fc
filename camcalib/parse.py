"""Format-independent reading, writing and parsing of calibrations."""

from __future__ import annotations

from camcalib.camera_info import CalibrationError, CameraInfo
from camcalib.ini import parse_ini, read_ini_file, write_ini_file
from camcalib.yml import read_yaml_file, write_yaml_file


def _kind(file_name) -> str:
    lowered = str(file_name).lower()
    if lowered.endswith(".ini"):
        return "ini"
    if lowered.endswith((".yml", ".yaml")):
        return "yaml"
    raise CalibrationError(
        f"unsupported calibration file extension: {file_name} "
        "(expected .ini, .yml or .yaml)"
    )


def write_calibration(file_name, camera_name: str, info: CameraInfo) -> None:
    """Write a calibration; the file extension selects INI or YAML."""
    if _kind(file_name) == "ini":
        write_ini_file(file_name, camera_name, info)
    else:
        write_yaml_file(file_name, camera_name, info)


def read_calibration(file_name) -> tuple[str, CameraInfo]:
    """Read ``(camera_name, info)``; the file extension selects INI or YAML."""
    if _kind(file_name) == "ini":
        return read_ini_file(file_name)
    return read_yaml_file(file_name)


def parse_calibration(buffer: str, format: str) -> tuple[str, CameraInfo]:
    """Parse calibration text held in memory; only the "ini" format is supported."""
    if format != "ini":
        raise CalibrationError(f"unsupported calibration format: {format!r}")
    return parse_ini(buffer)
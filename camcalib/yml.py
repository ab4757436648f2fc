"""Reading and writing calibrations in YAML format."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from camcalib.camera_info import PLUMB_BOB, CalibrationError, CameraInfo

_log = logging.getLogger(__name__)

CAM_YML_NAME = "camera_name"
WIDTH_YML_NAME = "image_width"
HEIGHT_YML_NAME = "image_height"
K_YML_NAME = "camera_matrix"
D_YML_NAME = "distortion_coefficients"
R_YML_NAME = "rectification_matrix"
P_YML_NAME = "projection_matrix"
DMODEL_YML_NAME = "distortion_model"


def _matrix(rows: int, cols: int, data: list[float]) -> dict[str, Any]:
    return {"rows": rows, "cols": cols, "data": [float(v) for v in data]}


def format_yaml(camera_name: str, info: CameraInfo) -> str:
    """Render a calibration as YAML text."""
    document = {
        WIDTH_YML_NAME: int(info.width),
        HEIGHT_YML_NAME: int(info.height),
        CAM_YML_NAME: camera_name,
        K_YML_NAME: _matrix(3, 3, info.K),
        DMODEL_YML_NAME: info.distortion_model,
        D_YML_NAME: _matrix(1, len(info.D), info.D),
        R_YML_NAME: _matrix(3, 3, info.R),
        P_YML_NAME: _matrix(3, 4, info.P),
    }
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=None)


def _require(node: dict, key: str) -> Any:
    if key not in node:
        raise CalibrationError(f"missing key {key!r} in YAML calibration")
    return node[key]


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise CalibrationError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError:
        raise CalibrationError(f"{what} must be an integer, got {value!r}") from None


def _as_float(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise CalibrationError(f"{what} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise CalibrationError(f"{what} must be a number, got {value!r}") from None


def _matrix_data(doc: dict, key: str) -> tuple[int, int, list[float]]:
    node = _require(doc, key)
    if not isinstance(node, dict):
        raise CalibrationError(f"{key} must be a mapping")
    rows = _as_int(_require(node, "rows"), f"{key}.rows")
    cols = _as_int(_require(node, "cols"), f"{key}.cols")
    count = rows * cols
    if rows < 0 or cols < 0:
        raise CalibrationError(f"{key} has a negative size")
    data = _require(node, "data")
    if not isinstance(data, list) or len(data) < count:
        raise CalibrationError(f"{key}.data must hold {count} values")
    values = [_as_float(v, f"{key}.data") for v in data[:count]]
    return rows, cols, values


def _fixed_matrix(doc: dict, key: str, rows: int, cols: int) -> list[float]:
    got_rows, got_cols, values = _matrix_data(doc, key)
    if (got_rows, got_cols) != (rows, cols):
        raise CalibrationError(
            f"{key} must be {rows}x{cols}, got {got_rows}x{got_cols}"
        )
    return values


def parse_yaml(text: str) -> tuple[str, CameraInfo]:
    """Parse YAML calibration text into ``(camera_name, info)``."""
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise CalibrationError(f"Exception parsing YAML camera calibration:\n{err}") from None
    if not isinstance(doc, dict):
        raise CalibrationError("YAML camera calibration must be a mapping")

    name = doc.get(CAM_YML_NAME)
    camera_name = "unknown" if name is None else str(name)

    width = _as_int(_require(doc, WIDTH_YML_NAME), WIDTH_YML_NAME)
    height = _as_int(_require(doc, HEIGHT_YML_NAME), HEIGHT_YML_NAME)
    k = _fixed_matrix(doc, K_YML_NAME, 3, 3)
    r = _fixed_matrix(doc, R_YML_NAME, 3, 3)
    p = _fixed_matrix(doc, P_YML_NAME, 3, 4)

    model = doc.get(DMODEL_YML_NAME)
    if model is None:
        model = PLUMB_BOB
        _log.warning(
            "Camera calibration file did not specify distortion model, "
            "assuming plumb bob"
        )
    _, _, d = _matrix_data(doc, D_YML_NAME)

    info = CameraInfo(
        width=width, height=height, distortion_model=str(model), D=d, K=k, R=r, P=p
    )
    return camera_name, info


def write_yaml_file(path, camera_name: str, info: CameraInfo) -> None:
    """Write a calibration to a YAML file, creating its directory if needed."""
    path = Path(path)
    text = format_yaml(camera_name, info)
    directory = path.parent
    if str(directory) not in ("", ".") and not directory.exists():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            _log.error(
                "Unable to create directory for camera calibration file [%s]",
                directory,
            )
    try:
        with path.open("w", encoding="utf-8") as out:
            out.write(text)
    except OSError as err:
        raise CalibrationError(
            f"Unable to open camera calibration file [{path}] for writing"
        ) from err


def read_yaml_file(path) -> tuple[str, CameraInfo]:
    """Read ``(camera_name, info)`` from a YAML calibration file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise CalibrationError(
            f"Unable to open camera calibration file [{path}]"
        ) from err
    try:
        return parse_yaml(text)
    except CalibrationError as err:
        raise CalibrationError(
            f"Failed to parse camera calibration from file [{path}]: {err}"
        ) from err
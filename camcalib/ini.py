"""Reading and writing calibrations in the legacy Videre INI format."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from camcalib.camera_info import (
    PLUMB_BOB,
    RATIONAL_POLYNOMIAL,
    CalibrationError,
    CameraInfo,
)

_log = logging.getLogger(__name__)

_SKIP = re.compile(r"(?:\s+|#[^\n]*)*")
_REAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_UINT = re.compile(r"\d+")
_UINT_MAX = 0xFFFFFFFF


class _NoMatch(Exception):
    pass


class _Scanner:
    """Token reader that skips whitespace and '#' line comments."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _skip(self) -> None:
        self.pos = _SKIP.match(self.text, self.pos).end()

    def literal(self, word: str) -> None:
        self._skip()
        if not self.text.startswith(word, self.pos):
            raise _NoMatch(f"expected {word!r} at offset {self.pos}")
        self.pos += len(word)

    def uint(self) -> int:
        self._skip()
        match = _UINT.match(self.text, self.pos)
        if not match or int(match.group()) > _UINT_MAX:
            raise _NoMatch(f"expected unsigned integer at offset {self.pos}")
        self.pos = match.end()
        return int(match.group())

    def real(self) -> float:
        self._skip()
        match = _REAL.match(self.text, self.pos)
        if not match:
            raise _NoMatch(f"expected number at offset {self.pos}")
        self.pos = match.end()
        return float(match.group())

    def reals(self, count: int) -> list[float]:
        return [self.real() for _ in range(count)]

    def any_reals(self) -> list[float]:
        values = []
        while True:
            saved = self.pos
            try:
                values.append(self.real())
            except _NoMatch:
                self.pos = saved
                return values

    def bracketed(self) -> str:
        self.literal("[")
        end = self.text.find("]", self.pos)
        if end < 0:
            raise _NoMatch(f"unterminated section name at offset {self.pos}")
        name = self.text[self.pos:end].strip()
        self.pos = end + 1
        return name


def _format_matrix(rows: int, cols: int, data: list[float]) -> str:
    return "".join(
        "".join(f"{value:.5f} " for value in data[row * cols:(row + 1) * cols]) + "\n"
        for row in range(rows)
    )


def format_ini(camera_name: str, info: CameraInfo) -> str:
    """Render a calibration as INI text.

    Only the plumb bob model with five coefficients can be stored.
    """
    if info.distortion_model != PLUMB_BOB or len(info.D) != 5:
        raise CalibrationError(
            "INI format can only save calibrations using the plumb bob "
            "distortion model; use the YAML format instead "
            f"(distortion_model = {info.distortion_model!r}, expected "
            f"{PLUMB_BOB!r}; {len(info.D)} coefficients, expected 5)"
        )
    return (
        "# Camera intrinsics\n\n"
        "[image]\n\n"
        f"width\n{info.width}\n\n"
        f"height\n{info.height}\n\n"
        f"[{camera_name}]\n\n"
        "camera matrix\n" + _format_matrix(3, 3, info.K)
        + "\ndistortion\n" + _format_matrix(1, 5, info.D)
        + "\n\nrectification\n" + _format_matrix(3, 3, info.R)
        + "\nprojection\n" + _format_matrix(3, 4, info.P)
    )


def _parse_externals(scanner: _Scanner) -> bool:
    saved = scanner.pos
    try:
        scanner.literal("[externals]")
        scanner.literal("translation")
        scanner.reals(3)
        scanner.literal("rotation")
        scanner.reals(3)
    except _NoMatch:
        scanner.pos = saved
        return False
    return True


def parse_ini(text: str) -> tuple[str, CameraInfo]:
    """Parse INI calibration text into ``(camera_name, info)``.

    Text after the projection matrix is ignored.
    """
    scanner = _Scanner(text)
    try:
        scanner.literal("[image]")
        scanner.literal("width")
        width = scanner.uint()
        scanner.literal("height")
        height = scanner.uint()
        _parse_externals(scanner)
        camera_name = scanner.bracketed()
        scanner.literal("camera matrix")
        k = scanner.reals(9)
        scanner.literal("distortion")
        d = scanner.any_reals()
        scanner.literal("rectification")
        r = scanner.reals(9)
        scanner.literal("projection")
        p = scanner.reals(12)
    except _NoMatch as err:
        raise CalibrationError(f"invalid INI calibration: {err}") from None

    if len(d) == 5:
        model = PLUMB_BOB
    elif len(d) == 8:
        model = RATIONAL_POLYNOMIAL
    else:
        model = ""
    info = CameraInfo(
        width=width, height=height, distortion_model=model, D=d, K=k, R=r, P=p
    )
    return camera_name, info


def write_ini_file(path, camera_name: str, info: CameraInfo) -> None:
    """Write a calibration to an INI file, creating its directory if needed."""
    path = Path(path)
    text = format_ini(camera_name, info)
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


def read_ini_file(path) -> tuple[str, CameraInfo]:
    """Read ``(camera_name, info)`` from an INI calibration file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise CalibrationError(
            f"Unable to open camera calibration file [{path}]"
        ) from err
    return parse_ini(text)
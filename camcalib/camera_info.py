"""Camera calibration data shared by the file formats."""

from __future__ import annotations

from dataclasses import dataclass, field

PLUMB_BOB = "plumb_bob"
RATIONAL_POLYNOMIAL = "rational_polynomial"

_MATRIX_SIZES = {"K": 9, "R": 9, "P": 12}


class CalibrationError(Exception):
    """Raised when calibration data cannot be read, parsed or written."""


def _zeros(count: int):
    return lambda: [0.0] * count


@dataclass
class CameraInfo:
    """Image size, distortion model and the calibration matrices.

    ``K`` and ``R`` are 3x3 and ``P`` is 3x4, all stored row-major.
    All matrices are zero when no calibration is available.
    """

    width: int = 0
    height: int = 0
    distortion_model: str = ""
    D: list[float] = field(default_factory=list)
    K: list[float] = field(default_factory=_zeros(9))
    R: list[float] = field(default_factory=_zeros(9))
    P: list[float] = field(default_factory=_zeros(12))

    def __post_init__(self) -> None:
        self.width = int(self.width)
        self.height = int(self.height)
        self.D = [float(value) for value in self.D]
        for name, size in _MATRIX_SIZES.items():
            values = [float(value) for value in getattr(self, name)]
            if len(values) != size:
                raise ValueError(
                    f"{name} must hold {size} values, got {len(values)}"
                )
            setattr(self, name, values)

    def copy(self) -> CameraInfo:
        """Return an independent copy of this calibration."""
        return CameraInfo(
            width=self.width,
            height=self.height,
            distortion_model=self.distortion_model,
            D=list(self.D),
            K=list(self.K),
            R=list(self.R),
            P=list(self.P),
        )
"""Command that converts a calibration file between INI and YAML."""

from __future__ import annotations

import sys

from camcalib.camera_info import CalibrationError
from camcalib.parse import read_calibration, write_calibration

_PROG = "camcalib-convert"


def main(argv=None) -> int:
    """Convert ``argv[0]`` to ``argv[1]``; extensions choose the formats."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print(
            f"Usage: {_PROG} input.yml output.ini\n"
            f"       {_PROG} input.ini output.yml"
        )
        return 0

    source, target = args[0], args[1]
    try:
        name, info = read_calibration(source)
    except CalibrationError as err:
        print(f"Failed to load camera model from file {source}: {err}", file=sys.stderr)
        return 1
    try:
        write_calibration(target, name, info)
    except CalibrationError as err:
        print(f"Failed to save camera model to file {target}: {err}", file=sys.stderr)
        return 1

    print(f"Saved {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
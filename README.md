# camcalib

Tools for camera calibration files.

- Read and write calibrations in two formats: YAML (`.yaml` / `.yml`) and
  the legacy Videre INI format (`.ini`). Only calibrations with the plumb bob
  distortion model and five coefficients can be written as INI.
- Convert a calibration file from one format to the other on the command line.
- Keep the calibration of a camera and load and save it through a URL, with
  `${NAME}` and `${ROS_HOME}` substitution.

## Installation

```
pip install camcalib
```

## Command line

Convert between formats. The file extension of each path picks its format:

```
camcalib-convert input.yaml output.ini
camcalib-convert input.ini output.yaml
```

With fewer than two arguments the command prints its usage and exits with
status 0. If the input cannot be read or the output cannot be written, it
prints the reason to standard error and exits with status 1. On success it
prints `Saved <output>`.

## Library

```python
from camcalib.parse import read_calibration, write_calibration, parse_calibration

name, info = read_calibration("left.yaml")
write_calibration("left.ini", name, info)

name, info = parse_calibration(ini_text, "ini")
```

`info` is a `camcalib.camera_info.CameraInfo` dataclass. It holds the image
`width` and `height`, the `distortion_model`, the distortion coefficients `D`,
and the camera (`K`, 3x3), rectification (`R`, 3x3) and projection (`P`, 3x4)
matrices, stored row-major as flat lists. `CameraInfo.copy()` returns an
independent copy.

A failed read, parse or write raises `camcalib.camera_info.CalibrationError`.
That includes a file name whose extension is not `.ini`, `.yml` or `.yaml`,
and a `parse_calibration` format other than `"ini"`.

Each format can also be used on its own:

- `camcalib.yml`: `format_yaml`, `parse_yaml`, `write_yaml_file`, `read_yaml_file`
- `camcalib.ini`: `format_ini`, `parse_ini`, `write_ini_file`, `read_ini_file`

When a YAML file has no `camera_name`, the name `"unknown"` is returned. When
it has no `distortion_model`, plumb bob is assumed. When an INI file is read,
the distortion model is set from the number of coefficients: 5 gives
`plumb_bob` and 8 gives `rational_polynomial`. Any other count leaves the
model empty. An optional `[externals]` section in INI files is accepted and
ignored. The file writers create missing parent directories.

### Managing calibration by URL

```python
from camcalib.manager import CameraInfoManager

manager = CameraInfoManager("left_camera", "file:///data/calib/${NAME}.yaml")
if manager.is_calibrated():
    info = manager.get_camera_info()
```

Nothing is loaded until `load_camera_info`, `is_calibrated` or
`get_camera_info` is called. When no calibration could be loaded, all matrices
are zero and `is_calibrated()` returns `False`.

These URL forms are supported:

- `file:///absolute/path/to/file.yaml`
- `package://package_name/path/inside/package.yaml`
- an empty URL, which means the default `file://${ROS_HOME}/camera_info/${NAME}.yaml`

`${NAME}` becomes the camera name. `${ROS_HOME}` becomes the `ROS_HOME`
environment variable, or `$HOME/.ros` when that variable is not set. Other
`${...}` variables are left unchanged and an error is logged.

By default a `package://` URL is resolved by `camcalib.urls.find_package`. It
searches the directories in `$ROS_PACKAGE_PATH` for a directory with that name
that holds a `package.xml` or `manifest.xml`. You can pass your own lookup as
`package_resolver`, a callable that takes a package name and returns its
directory or `None`.

Other methods of `CameraInfoManager`:

- `set_camera_name(name)` accepts only non-empty names made of letters, digits
  and `_`. It returns `False` otherwise. The calibration is reloaded before
  its next use.
- `set_camera_info(info)` replaces the calibration in memory without saving it.
- `validate_url(url)` returns whether the URL syntax is supported.
- `resolve_url(url, camera_name)` returns the URL with its variables substituted.
- `handle_set_camera_info(info)` stores a new calibration and saves it to the
  current URL, creating missing directories. It returns
  `(success, status_message)`. An invalid or `flash:///` URL saves to the
  default location instead.

The helpers in `camcalib.urls` expose the URL handling directly:
`parse_url` (returning a `UrlType`), `resolve_url`, `find_package`,
`package_file_name` and `is_valid_camera_name`.

## What this package does not do

- `CameraInfoManager` is a plain object. It does not publish calibration or
  offer a network service for setting it. Call `handle_set_camera_info` from
  your own service or request handler.
- `flash:///` URLs are recognised but not supported. Loading from them fails,
  and saving goes to the default file instead.
- Calibration text in memory can be parsed only in the INI format. To read
  YAML text, use `camcalib.yml.parse_yaml`.
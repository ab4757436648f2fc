import pytest

from camcalib.camera_info import (
    PLUMB_BOB,
    RATIONAL_POLYNOMIAL,
    CalibrationError,
    CameraInfo,
)
from camcalib.ini import format_ini, parse_ini, read_ini_file, write_ini_file


def _calibration():
    k = [1168.68, 0.0, 295.015, 0.0, 1169.01, 252.247, 0.0, 0.0, 1.0]
    return CameraInfo(
        width=640,
        height=480,
        distortion_model=PLUMB_BOB,
        D=[-1.04482, 1.59252, -0.01963, 0.02879, 0.0],
        K=k,
        R=[1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0],
        P=k[0:3] + [0.0] + k[3:6] + [0.0] + k[6:9] + [0.0],
    )


def _identity_calibration():
    eye = [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0]
    return CameraInfo(
        width=640,
        height=480,
        distortion_model=PLUMB_BOB,
        D=[0.0] * 5,
        K=eye,
        R=eye,
        P=[1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0],
    )


def test_format_layout():
    expected = (
        "# Camera intrinsics\n\n[image]\n\nwidth\n640\n\nheight\n480\n\n"
        "[camera]\n\n"
        "camera matrix\n"
        "1.00000 0.00000 0.00000 \n"
        "0.00000 1.00000 0.00000 \n"
        "0.00000 0.00000 1.00000 \n"
        "\ndistortion\n"
        "0.00000 0.00000 0.00000 0.00000 0.00000 \n"
        "\n\nrectification\n"
        "1.00000 0.00000 0.00000 \n"
        "0.00000 1.00000 0.00000 \n"
        "0.00000 0.00000 1.00000 \n"
        "\nprojection\n"
        "1.00000 0.00000 0.00000 0.00000 \n"
        "0.00000 1.00000 0.00000 0.00000 \n"
        "0.00000 0.00000 1.00000 0.00000 \n"
    )
    assert format_ini("camera", _identity_calibration()) == expected


def test_round_trip():
    info = _calibration()
    name, parsed = parse_ini(format_ini("08144361026320a0", info))
    assert name == "08144361026320a0"
    assert parsed == info


def test_format_rejects_other_model():
    info = _calibration()
    info.distortion_model = RATIONAL_POLYNOMIAL
    with pytest.raises(CalibrationError):
        format_ini("camera", info)


def test_format_rejects_wrong_coefficient_count():
    info = _calibration()
    info.D = info.D[:4]
    with pytest.raises(CalibrationError):
        format_ini("camera", info)


def _ini_text(distortion, extra=""):
    return (
        "# a comment\n[image]\nwidth 320 # inline\nheight\n240\n"
        + extra
        + "[left]\ncamera matrix\n1 0 2\n0 3 4\n0 0 1\n"
        + "distortion\n" + distortion + "\n"
        + "rectification\n1 0 0 0 1 0 0 0 1\n"
        + "projection\n1 0 2 0 0 3 4 0 0 0 1 0\n"
    )


def test_parse_handwritten_with_comments():
    name, info = parse_ini(_ini_text("0.1 -0.2 0.003 4e-3 .5"))
    assert name == "left"
    assert info.width == 320
    assert info.height == 240
    assert info.K == [1.0, 0.0, 2.0, 0.0, 3.0, 4.0, 0.0, 0.0, 1.0]
    assert info.D == [0.1, -0.2, 0.003, 4e-3, 0.5]
    assert info.distortion_model == PLUMB_BOB
    assert info.P[:3] == [1.0, 0.0, 2.0]


def test_parse_eight_coefficients_is_rational_polynomial():
    _, info = parse_ini(_ini_text("1 2 3 4 5 6 7 8"))
    assert len(info.D) == 8
    assert info.distortion_model == RATIONAL_POLYNOMIAL


def test_parse_other_coefficient_count_leaves_model_empty():
    _, info = parse_ini(_ini_text("1 2 3"))
    assert info.D == [1.0, 2.0, 3.0]
    assert info.distortion_model == ""


def test_parse_accepts_externals_section():
    extra = "[externals]\ntranslation\n1 2 3\nrotation\n0.1 0.2 0.3\n"
    name, info = parse_ini(_ini_text("1 2 3 4 5", extra))
    assert name == "left"
    assert info.D == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_parse_ignores_trailing_text():
    name, info = parse_ini(_ini_text("1 2 3 4 5") + "garbage that follows\n")
    assert name == "left"
    assert info.width == 320


@pytest.mark.parametrize(
    "text",
    [
        "",
        "[image]\nwidth\n-1\nheight\n2\n",
        "[image]\nwidth 1 height 2\n[cam]\ncamera matrix\n1 2 3\n",
        _ini_text("1 2 3 4 5").replace("projection\n1 0 2 0", "projection\n1 0 2"),
    ],
)
def test_parse_rejects_incomplete(text):
    with pytest.raises(CalibrationError):
        parse_ini(text)


def test_file_round_trip_creates_directories(tmp_path):
    path = tmp_path / "nested" / "dir" / "calib.ini"
    info = _calibration()
    write_ini_file(path, "camera", info)
    assert path.exists()
    name, loaded = read_ini_file(path)
    assert name == "camera"
    assert loaded == info


def test_write_invalid_model_leaves_no_file(tmp_path):
    path = tmp_path / "calib.ini"
    info = _calibration()
    info.D = []
    with pytest.raises(CalibrationError):
        write_ini_file(path, "camera", info)
    assert not path.exists()


def test_read_missing_file(tmp_path):
    with pytest.raises(CalibrationError):
        read_ini_file(tmp_path / "missing.ini")
import pytest

from camcalib.camera_info import PLUMB_BOB, CameraInfo
from camcalib.convert import main
from camcalib.parse import read_calibration, write_calibration


@pytest.fixture
def sample_info():
    return CameraInfo(
        width=640,
        height=480,
        distortion_model=PLUMB_BOB,
        D=[-1.04482, 1.59252, -0.0196308, 0.0287906, 0.0],
        K=[1168.68, 0.0, 295.015, 0.0, 1169.01, 252.247, 0.0, 0.0, 1.0],
        R=[1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0],
        P=[1168.68, 0.0, 295.015, 0.0, 0.0, 1169.01, 252.247, 0.0, 0.0, 0.0, 1.0, 0.0],
    )


def test_usage_with_too_few_arguments(capsys):
    assert main(["only_one.yml"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_yaml_to_ini(tmp_path, sample_info, capsys):
    source = tmp_path / "in.yaml"
    target = tmp_path / "out.ini"
    write_calibration(source, "cam", sample_info)
    assert main([str(source), str(target)]) == 0
    assert f"Saved {target}" in capsys.readouterr().out
    name, info = read_calibration(target)
    assert name == "cam"
    assert info.K == pytest.approx(sample_info.K, abs=1e-5)


def test_ini_to_yaml(tmp_path, sample_info):
    source = tmp_path / "in.ini"
    target = tmp_path / "sub" / "out.yml"
    write_calibration(source, "cam", sample_info)
    assert main([str(source), str(target)]) == 0
    name, info = read_calibration(target)
    assert name == "cam"
    assert info.distortion_model == PLUMB_BOB
    assert info.P == pytest.approx(sample_info.P, abs=1e-5)


def test_missing_input_fails(tmp_path, capsys):
    code = main([str(tmp_path / "absent.yaml"), str(tmp_path / "out.ini")])
    assert code == 1
    assert "Failed to load" in capsys.readouterr().err
    assert not (tmp_path / "out.ini").exists()


def test_unsupported_output_fails(tmp_path, sample_info, capsys):
    source = tmp_path / "in.yaml"
    write_calibration(source, "cam", sample_info)
    assert main([str(source), str(tmp_path / "out.txt")]) == 1
    assert "Failed to save" in capsys.readouterr().err


def test_ini_cannot_hold_other_models(tmp_path, sample_info):
    sample_info.distortion_model = "rational_polynomial"
    sample_info.D = [0.1] * 8
    source = tmp_path / "in.yaml"
    write_calibration(source, "cam", sample_info)
    assert main([str(source), str(tmp_path / "out.ini")]) == 1
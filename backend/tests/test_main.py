"""Tests for the pixfx command line shell."""

import numpy as np
import pytest
from PIL import Image

import main
from engine.errors import ParameterOutOfRange
from effects.fx.halftone import PARAMS as HALFTONE_PARAMS


@pytest.fixture(autouse=True)
def _no_side_effects(monkeypatch):
    """Keep logging handlers and Sentry out of the test process."""
    monkeypatch.setattr(main, "init_diagnostics", lambda **kw: None)
    monkeypatch.setattr(main, "init_sentry", lambda: None)


def _write_png(path, rgba=(128, 128, 128, 255), size=(8, 6)):
    frame = np.empty((size[1], size[0], 4), dtype=np.uint8)
    frame[:, :] = rgba
    Image.fromarray(frame).save(path)
    return path


def test_apply_writes_png(tmp_path):
    src = _write_png(tmp_path / "in.png")
    dst = tmp_path / "out.png"
    code = main.main(["apply", str(src), str(dst), "-e", "posterize", "-p", "levels=2"])
    assert code == 0
    with Image.open(dst) as img:
        out = np.asarray(img.convert("RGBA"))
    assert out.shape == (6, 8, 4)
    assert (out[:, :, :3] == 255).all()


def test_rgb_input_gets_alpha(tmp_path):
    src = tmp_path / "in.jpg"
    Image.new("RGB", (5, 5), (10, 20, 30)).save(src)
    dst = tmp_path / "out.png"
    assert main.main(["apply", str(src), str(dst), "-e", "blur", "-p", "radius=0"]) == 0
    with Image.open(dst) as img:
        assert img.mode == "RGBA"


def test_max_size_fits_longer_side(tmp_path):
    src = _write_png(tmp_path / "in.png", size=(40, 20))
    dst = tmp_path / "out.png"
    args = ["apply", str(src), str(dst), "-e", "emboss", "--max-size", "10"]
    assert main.main(args) == 0
    with Image.open(dst) as img:
        assert img.size == (10, 5)


def test_seeded_noise_is_reproducible(tmp_path):
    src = _write_png(tmp_path / "in.png")
    outs = []
    for name in ("a.png", "b.png"):
        dst = tmp_path / name
        args = ["apply", str(src), str(dst), "-e", "noise", "-p", "amount=40", "--seed", "9"]
        assert main.main(args) == 0
        outs.append(dst.read_bytes())
    assert outs[0] == outs[1]


def test_out_of_range_param_exits_2(tmp_path, capsys):
    src = _write_png(tmp_path / "in.png")
    args = ["apply", str(src), str(tmp_path / "o.png"), "-e", "pixelate", "-p", "pixel_size=0"]
    assert main.main(args) == main.EXIT_INVALID
    assert "out of range" in capsys.readouterr().err


def test_bad_paths_exit_2(tmp_path):
    args = ["apply", str(tmp_path / "none.png"), str(tmp_path / "o.png"), "-e", "blur"]
    assert main.main(args) == main.EXIT_INVALID


def test_undecodable_input_exits_1(tmp_path):
    src = tmp_path / "broken.png"
    src.write_bytes(b"not an image")
    args = ["apply", str(src), str(tmp_path / "o.png"), "-e", "blur"]
    assert main.main(args) == main.EXIT_IO


def test_unknown_effect_rejected_by_parser(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main.main(["apply", "a.png", "b.png", "-e", "sharpen"])
    assert exc.value.code == 2


def test_list_prints_every_effect(capsys):
    assert main.main(["list"]) == 0
    out = capsys.readouterr().out
    for name in ("pixelate", "halftone", "glass-refraction", "vintage"):
        assert name in out


def test_parse_param_types():
    assert main.parse_param("halftone", HALFTONE_PARAMS, "color-mode=yes") == ("color_mode", True)
    assert main.parse_param("halftone", HALFTONE_PARAMS, "dot_radius=2.5") == ("dot_radius", 2.5)
    assert main.parse_param("halftone", HALFTONE_PARAMS, "shape=diamond") == ("shape", "diamond")
    with pytest.raises(ParameterOutOfRange):
        main.parse_param("halftone", HALFTONE_PARAMS, "color_mode=maybe")
    with pytest.raises(ParameterOutOfRange):
        main.parse_param("halftone", HALFTONE_PARAMS, "dot_radius=big")
    with pytest.raises(ParameterOutOfRange):
        main.parse_param("halftone", HALFTONE_PARAMS, "radius")

import numpy as np
import pytest

from rd_export import build_parser, config_from_args, main


def test_cli_writes_outputs(tmp_path, logo_path):
    out = tmp_path / "run.npz"
    png = tmp_path / "run.png"
    gif = tmp_path / "run.gif"
    rc = main(["--image", str(logo_path), "--cols", "40", "--rows", "20", "--ticks", "4",
               "--steps", "2", "--preset", "worms", "--out", str(out),
               "--png", str(png), "--gif", str(gif), "--no-perturb"])
    assert rc == 0
    data = np.load(out)
    assert data["a"].shape == data["b"].shape == (20, 40)
    assert int(data["steps"]) == 8
    assert data["params"].tolist() == [1.0, 0.5, 0.025, 0.060, 1.0]
    assert png.stat().st_size > 0
    assert gif.stat().st_size > 0


def test_cli_without_image_uses_default_seed(tmp_path, capsys):
    out = tmp_path / "plain.npz"
    main(["--cols", "8", "--rows", "8", "--ticks", "1", "--out", str(out)])
    assert "seed=default" in capsys.readouterr().out
    assert out.exists()


def test_cli_rejects_degenerate_grid(tmp_path):
    with pytest.raises(SystemExit):
        main(["--cols", "1", "--rows", "8", "--out", str(tmp_path / "x.npz")])


def test_cli_rejects_unknown_preset():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--preset", "lava"])


def test_args_map_onto_config():
    args = build_parser().parse_args(["--boundary", "toroidal", "--no-perturb", "--steps", "4"])
    cfg = config_from_args(args)
    assert cfg.boundary == "toroidal"
    assert cfg.perturb is False
    assert cfg.steps_per_tick == 4

"""
Tests for pyslopes.cli
"""

import json
import os

import pytest

from pyslopes.cli import build_parser, main, resolve_parameters


def _common(tmp_path):
    return ["--log-dir", str(tmp_path / "logs"), "--quiet"]


@pytest.fixture
def fast_config_file(tmp_path, fast_config):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(fast_config))
    return str(path)


class TestResolveParameters:

    def test_defaults(self):
        seed, params = resolve_parameters(build_parser().parse_args(["render"]))
        assert seed == 0
        assert params.perspective == 40

    def test_knob_flags(self):
        args = build_parser().parse_args(["render", "--seed", "9", "--polar-amount", "100", "--no-occlusion"])
        seed, params = resolve_parameters(args)
        assert seed == 9
        assert params.polar_amount == 100
        assert params.enable_occlusion is False

    def test_random_is_reproducible(self):
        args = build_parser().parse_args(["render", "--random", "--rng-seed", "11"])
        assert resolve_parameters(args) == resolve_parameters(args)

    def test_flags_override_random(self):
        args = build_parser().parse_args(["render", "--random", "--rng-seed", "11", "--omega", "12", "--seed", "4"])
        seed, params = resolve_parameters(args)
        assert seed == 4
        assert params.omega == 12

    def test_params_file(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"seed": 321, "spikyness": 60}))
        seed, params = resolve_parameters(build_parser().parse_args(["render", "--params", str(path)]))
        assert seed == 321
        assert params.spikyness == 60


class TestMain:

    def test_render(self, tmp_path, restore_logging, fast_config_file):
        output = tmp_path / "art.svg"
        preview = tmp_path / "art.png"
        code = main([
            "render", "--seed", "3", "--height", "160",
            "--output", str(output), "--preview", str(preview),
            "--config", fast_config_file, *_common(tmp_path),
        ])
        assert code == 0
        assert output.read_text().startswith("<svg")
        assert preview.exists()
        assert os.listdir(tmp_path / "logs")

    def test_render_with_margins(self, tmp_path, restore_logging, fast_config_file):
        output = tmp_path / "art.svg"
        code = main([
            "render", "--height", "160", "--clip-margins", "--no-retrace",
            "--output", str(output), "--config", fast_config_file, *_common(tmp_path),
        ])
        assert code == 0
        assert output.exists()

    def test_export(self, tmp_path, restore_logging, fast_config_file):
        out_dir = tmp_path / "out"
        code = main([
            "export", "--seed", "3", "--size", "small", "--output-dir", str(out_dir),
            "--name", "print", "--config", fast_config_file, *_common(tmp_path),
        ])
        assert code == 0
        assert (out_dir / "print.svg").exists()

    def test_invalid_knob_returns_error_code(self, tmp_path, restore_logging):
        code = main(["render", "--perspective", "140", "--output", str(tmp_path / "x.svg"), *_common(tmp_path)])
        assert code == 1
        assert not (tmp_path / "x.svg").exists()

    def test_invalid_seed_returns_error_code(self, tmp_path, restore_logging):
        code = main(["render", "--seed", "99999", "--output", str(tmp_path / "x.svg"), *_common(tmp_path)])
        assert code == 1

    def test_missing_config_exits(self, tmp_path, restore_logging):
        with pytest.raises(SystemExit):
            main(["render", "--config", str(tmp_path / "missing.json"), *_common(tmp_path)])

"""Tests for the mathssr command line."""

import pytest

from mathssr import __version__
from mathssr.cli import build_parser, load_config, main


@pytest.fixture
def use_backend(monkeypatch):
    """Make the build use a given fake backend instead of node."""

    def install(fake):
        monkeypatch.setattr("mathssr.build.NodeKatexBackend", lambda **kwargs: fake)
        return fake

    return install


class TestMain:
    def test_renders_in_place(self, tmp_path, backend, use_backend, capsys) -> None:
        use_backend(backend)
        path = tmp_path / "index.html"
        path.write_text("$a$ \\[b\\]", encoding="utf-8")

        assert main([str(path)]) == 0

        assert path.read_text(encoding="utf-8") == "<I>a</I> <D>b</D>"
        out = capsys.readouterr().out
        assert "2 LaTeX expressions rendered" in out
        assert f"Output: {path}" in out

    def test_output_option(self, tmp_path, backend, use_backend) -> None:
        use_backend(backend)
        source = tmp_path / "in.html"
        target = tmp_path / "out.html"
        source.write_text("$a$", encoding="utf-8")

        assert main([str(source), "-o", str(target)]) == 0
        assert target.read_text(encoding="utf-8") == "<I>a</I>"

    def test_failures_exit_zero_without_check(self, tmp_path, failing_backend, use_backend, capsys) -> None:
        use_backend(failing_backend)
        path = tmp_path / "index.html"
        path.write_text("$a$", encoding="utf-8")

        assert main([str(path)]) == 0
        assert "1 expressions failed to render" in capsys.readouterr().out

    def test_check_fails_on_render_errors(self, tmp_path, failing_backend, use_backend) -> None:
        use_backend(failing_backend)
        path = tmp_path / "index.html"
        path.write_text("$a$", encoding="utf-8")

        assert main([str(path), "--check"]) == 1

    def test_missing_input_argument(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_invalid_timeout(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "x.html"), "--timeout", "-1"])
        assert exc_info.value.code == 2

    def test_non_table_config_is_a_usage_error(self, tmp_path, capsys) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool]\nmathssr = 5\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "index.html"), "--config", str(pyproject)])
        assert exc_info.value.code == 2
        assert "expected a table" in capsys.readouterr().err

    def test_missing_file_propagates(self, tmp_path, backend, use_backend) -> None:
        use_backend(backend)
        with pytest.raises(FileNotFoundError):
            main([str(tmp_path / "missing.html")])

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit):
            main(["--version"])
        assert __version__ in capsys.readouterr().out


class TestCheckBackend:
    @pytest.mark.parametrize(("available", "code"), [(True, 0), (False, 1)])
    def test_reports_availability(self, monkeypatch, available, code) -> None:
        class Probe:
            def __init__(self, **kwargs) -> None:
                self.kwargs = kwargs

            def is_available(self) -> bool:
                return available

        monkeypatch.setattr("mathssr.cli.NodeKatexBackend", Probe)
        assert main(["--check-backend"]) == code


class TestLoadConfig:
    def test_defaults(self) -> None:
        args = build_parser().parse_args(["index.html"])
        config = load_config(args)
        assert config.neutralize is True
        assert config.node_command == "node"

    def test_overrides(self) -> None:
        args = build_parser().parse_args(
            ["index.html", "--no-neutralize", "--node", "nodejs", "--timeout", "4"]
        )
        config = load_config(args)
        assert config.neutralize is False
        assert config.node_command == "nodejs"
        assert config.timeout == 4.0

    def test_config_file_then_overrides(self, tmp_path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            '[tool.mathssr]\nnode_command = "nodejs"\ntimeout = 30\ncache = false\n',
            encoding="utf-8",
        )
        args = build_parser().parse_args(["index.html", "--config", str(pyproject), "--timeout", "5"])
        config = load_config(args)
        assert config.node_command == "nodejs"
        assert config.cache is False
        assert config.timeout == 5.0

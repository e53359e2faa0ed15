"""
Unit tests for command-line parsing.
"""

import pytest

from wsserver.__main__ import build_config, build_parser, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["PORT", "HTTP_HOST", "HTTP_WORKERS", "HTTP_TIMEOUT",
                 "HTTP_TEMPLATES_DIR", "HTTP_LOG_LEVEL", "HTTP_LOG_FORMAT"]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestBuildConfig:

    def test_no_flags_uses_environment(self, clean_env):
        clean_env.setenv("PORT", "9000")

        config = build_config(build_parser().parse_args([]))

        assert config.port == 9000

    def test_flags_override_environment(self, clean_env):
        clean_env.setenv("PORT", "9000")

        args = build_parser().parse_args([
            "--host", "127.0.0.1",
            "--port", "3000",
            "--workers", "2",
            "--templates", "pages",
            "--log-level", "DEBUG",
            "--log-format", "json",
        ])
        config = build_config(args)

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.max_workers == 2
        assert config.min_workers == 2
        assert config.templates_dir == "pages"
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"


class TestMain:

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "wsserver 1.0.0" in capsys.readouterr().out

    def test_bad_port_env_is_usage_error(self, clean_env, capsys):
        clean_env.setenv("PORT", "abc")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
        assert "$PORT is not an integer" in capsys.readouterr().err

    def test_missing_templates_is_usage_error(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--templates", str(tmp_path)])

        assert exc_info.value.code == 2
        assert "home.html" in capsys.readouterr().err

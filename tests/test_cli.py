from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from hamaps_cli.cli import app
from hamaps_cli.config import Config

MODEL = """
default_x509_cert: /ssl/default.pem
hosts:
  - hostname: a.example.com
    tls: {}
    paths:
      - path: /
        backend: {namespace: ns1, name: svc1, port: "80"}
        ssl_redirect: true
  - hostname: b.example.com
    ssl_passthrough: true
    paths:
      - path: /
        backend: {namespace: ns2, name: svc2, port: "443"}
"""


def _write(tmp_path: Path, name: str, content: str) -> Path:
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


def test_cli_commands_exist_via_help() -> None:
    runner = CliRunner()
    for argv in (["compile", "--help"], ["show", "--help"], ["diff", "--help"]):
        result = runner.invoke(app, argv)
        assert result.exit_code == 0, f"{argv} failed: {result.output}"


def test_compile_writes_maps(tmp_path: Path) -> None:
    model = _write(tmp_path, "model.yaml", MODEL)
    maps_dir = tmp_path / "maps"
    runner = CliRunner()
    result = runner.invoke(app, ["--log-level", "ERROR", "compile", str(model), "--maps-dir", str(maps_dir)])
    assert result.exit_code == 0, result.output
    assert "Compiled 2 hosts and 2 backends" in result.output
    assert (maps_dir / "_global_sslpassthrough.map").read_text() == "b.example.com ns2_svc2_443\n"
    assert (maps_dir / "_front001_host.map").read_text() == "a.example.com/ ns1_svc1_80\n"
    assert (maps_dir / "_global_http_front.map").read_text() == ""


def test_show_prints_yaml(tmp_path: Path) -> None:
    model = _write(tmp_path, "model.yaml", MODEL)
    runner = CliRunner()
    result = runner.invoke(app, ["--log-level", "ERROR", "show", str(model)])
    assert result.exit_code == 0, result.output
    data = yaml.safe_load(result.output)
    assert data["frontend"]["bind_name"] == "_front001_socket"
    assert data["maps"]["https_redir_map"]["match"] == [["a.example.com/", "yes"], ["b.example.com/", "yes"]]


def test_diff(tmp_path: Path) -> None:
    old = _write(tmp_path, "old.yaml", MODEL)
    same = _write(tmp_path, "same.yaml", MODEL)
    changed = _write(tmp_path, "changed.yaml", MODEL.replace("ssl_redirect: true", "ssl_redirect: false"))
    runner = CliRunner()

    result = runner.invoke(app, ["--log-level", "ERROR", "diff", str(old), str(same)])
    assert result.exit_code == 0, result.output
    assert "unchanged" in result.output

    result = runner.invoke(app, ["--log-level", "ERROR", "diff", str(old), str(changed)])
    assert result.exit_code == 1
    assert "changed" in result.output


def test_compile_fails_on_passthrough_without_root(tmp_path: Path) -> None:
    model = _write(
        tmp_path,
        "model.yaml",
        """
hosts:
  - hostname: b.example.com
    ssl_passthrough: true
    paths:
      - path: /app
        backend: {namespace: ns2, name: svc2, port: "443"}
""",
    )
    maps_dir = tmp_path / "maps"
    runner = CliRunner()
    result = runner.invoke(app, ["--log-level", "ERROR", "compile", str(model), "--maps-dir", str(maps_dir)])
    assert result.exit_code == 2
    assert not maps_dir.exists()


def test_log_file_level(tmp_path: Path) -> None:
    model = _write(tmp_path, "model.yaml", MODEL)
    log_file = tmp_path / "hamaps.log"
    runner = CliRunner()
    root = logging.getLogger()
    try:
        result = runner.invoke(
            app,
            ["--log-level", "ERROR", "--log-file", str(log_file), "--log-file-level", "DEBUG", "show", str(model)],
        )
        assert result.exit_code == 0, result.output
        assert "New backend ns1_svc1_80" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()


def test_show_without_frontend_maps_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    model = _write(tmp_path, "model.yaml", MODEL)
    monkeypatch.setattr(Config, "build", lambda self: None)
    runner = CliRunner()
    result = runner.invoke(app, ["--log-level", "ERROR", "show", str(model)])
    assert result.exit_code == 2

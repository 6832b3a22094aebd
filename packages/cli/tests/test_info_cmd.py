"""Tests for info commands (version, doctor)."""
import json
from typer.testing import CliRunner
from piletkit_cli.main import app

runner = CliRunner()


def test_version():
    """Test version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout
    assert "Python" in result.stdout


def test_doctor(tmp_path, monkeypatch):
    """Test doctor command."""
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["doctor"])
    assert result.exit_code == 0
    assert "diagnostic" in result.stdout.lower()
    assert "No package.json" in result.stdout


def test_doctor_reads_piral_section(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "package.json").write_text(json.dumps({"piral": {"name": "my-app"}}))
    result = runner.invoke(app, ["doctor"])
    assert result.exit_code == 0
    assert "my-app" in result.stdout

"""Test CLI functionality."""

import json
from unittest.mock import patch

import pytest
import tomlkit
from click.testing import CliRunner

from settingspage.cli import cli, options_to_toml
from settingspage.db import close_db, create_tables, init_db
from settingspage.options import DBOptionStore


@pytest.fixture(autouse=True)
def setup_log():
    with patch("settingspage.cli.setup_log") as mock:
        yield mock


@pytest.fixture
def config_file(tmp_path):
    db_path = tmp_path / "settingspage.db"
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
database_path = "{db_path.as_posix()}"

[page]
slug = "plugin"

[[sections]]
id = "general"
title = "General"

[[fields.general]]
id = "site_name"
name = "Site name"

[[fields.general]]
id = "enabled"
name = "Enabled"
type = "checkbox"
"""
    )
    return path


@pytest.fixture
def stored(config_file, tmp_path):
    init_db(str(tmp_path / "settingspage.db"))
    create_tables()
    store = DBOptionStore()
    store.add("general", {"site_name": "My site", "enabled": "on", "colors": {"red": True}})
    store.add("advanced", {})
    close_db()
    return config_file


def test_options_lists_all_records(stored):
    result = CliRunner().invoke(cli, ["-c", str(stored), "options"], obj={})

    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "general": {"site_name": "My site", "enabled": "on", "colors": {"red": True}},
        "advanced": {},
    }


def test_options_single_record(stored):
    result = CliRunner().invoke(cli, ["-c", str(stored), "options", "general"], obj={})

    assert result.exit_code == 0
    assert json.loads(result.output)["site_name"] == "My site"


def test_options_missing_record(stored):
    result = CliRunner().invoke(cli, ["-c", str(stored), "options", "missing"], obj={})

    assert result.exit_code != 0
    assert "Option not found: missing" in result.output


def test_export_writes_toml(stored, tmp_path):
    output = tmp_path / "export.toml"

    result = CliRunner().invoke(cli, ["-c", str(stored), "export", "-o", str(output)], obj={})

    assert result.exit_code == 0
    exported = tomlkit.parse(output.read_text())
    assert exported["general"]["site_name"] == "My site"
    assert exported["general"]["colors"]["red"] is True


def test_export_to_stdout(stored):
    result = CliRunner().invoke(cli, ["-c", str(stored), "export"], obj={})

    assert result.exit_code == 0
    assert "[general]" in result.output


def test_schema_lists_sections_and_fields(config_file):
    result = CliRunner().invoke(cli, ["-c", str(config_file), "schema"], obj={})

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "section\tfield\ttype\tname"
    assert "general\tsite_name\ttext\tSite name" in lines
    assert "general\tenabled\tcheckbox\tEnabled" in lines


def test_missing_config_is_reported(tmp_path):
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "missing.toml"), "schema"], obj={})

    assert result.exit_code != 0
    assert "Configuration file not found" in result.output


def test_serve_runs_app(config_file):
    with patch("settingspage.cli.create_app") as create_app:
        result = CliRunner().invoke(cli, ["-c", str(config_file), "serve", "--port", "8001"], obj={})

    assert result.exit_code == 0
    create_app.return_value.run.assert_called_once_with(
        host="127.0.0.1", port=8001, debug=False, use_reloader=False
    )


def test_options_to_toml_skips_nulls():
    content = options_to_toml({"general": {"a": "1", "b": None}, "version": "2", "empty": None})

    doc = tomlkit.parse(content)
    assert doc["version"] == "2"
    assert dict(doc["general"]) == {"a": "1"}
    assert "empty" not in doc


def test_log_file_goes_to_data_dir(tmp_path, setup_log):
    data_dir = tmp_path / "state"
    path = tmp_path / "config.toml"
    path.write_text(f'data_dir = "{data_dir.as_posix()}"\n')

    result = CliRunner().invoke(cli, ["-c", str(path), "schema"], obj={})

    assert result.exit_code == 0
    setup_log.assert_called_once_with(data_dir / "settingspage.log")


def test_log_not_configured_without_config(tmp_path, setup_log):
    CliRunner().invoke(cli, ["-c", str(tmp_path / "missing.toml"), "schema"], obj={})

    setup_log.assert_not_called()

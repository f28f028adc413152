from click.testing import CliRunner

import orthanc_cli.cli as cli
from orthanc_cli import __version__
from orthanc_cli.api import client as client_mod
from orthanc_cli.commands import _shared


def test_missing_server_reported_as_error_table():
    result = CliRunner().invoke(cli.cli, ["patient", "list"])
    assert result.exit_code == 1
    assert "Command error" in result.output
    assert "Neither --server nor ORC_ORTHANC_SERVER are set" in result.output
    assert result.stdout == ""
    assert "Neither --server nor ORC_ORTHANC_SERVER are set" in result.stderr


def test_global_options_merged(monkeypatch, tmp_path):
    captured = {}

    class DummyClient:
        def list_entities(self, kind):
            return []

    def fake_build(settings):
        captured["settings"] = settings
        return DummyClient()

    monkeypatch.setattr(_shared, "build_client", fake_build)
    monkeypatch.setenv("ORC_ORTHANC_PASSWORD", "env_pw")
    settings_file = tmp_path / "settings.yaml"
    settings_file.write_text("username: file_user\ntimeout: 12\n")

    result = CliRunner().invoke(
        cli.cli,
        [
            "--settings", str(settings_file),
            "-s", "http://flag:8042",
            "--timeout", "3",
            "patient", "list",
        ],
    )
    assert result.exit_code == 0, result.output
    cfg = captured["settings"]
    assert cfg.server == "http://flag:8042"
    assert cfg.username == "file_user"
    assert cfg.password == "env_pw"
    assert cfg.timeout == 3.0


def test_client_built_once_per_invocation(monkeypatch):
    built = []

    class DummyClient:
        def get_modality(self, name):
            return None

        def put_modality(self, modality):
            pass

    def fake_build(settings):
        built.append(settings)
        return DummyClient()

    monkeypatch.setattr(_shared, "build_client", fake_build)
    result = CliRunner().invoke(
        cli.cli, ["-s", "http://h", "modality", "modify", "PACS", "-a", "A", "-h", "host", "-p", "104"]
    )
    assert result.exit_code == 0, result.output
    assert len(built) == 1


def test_subcommand_help_needs_no_server():
    result = CliRunner().invoke(cli.cli, ["study", "anonymize", "--help"])
    assert result.exit_code == 0
    assert "--keep-private-tags" in result.output


def test_version():
    result = CliRunner().invoke(cli.cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_malformed_settings_file_is_reported(tmp_path):
    bad = tmp_path / "settings.yaml"
    bad.write_text("server: [oops\n")
    result = CliRunner().invoke(cli.cli, ["--settings", str(bad), "patient", "list"])
    assert result.exit_code == 1
    assert "Could not read settings file" in result.output


def test_invalid_server_response_reported_as_error_table(monkeypatch):
    class HtmlResp:
        status_code = 200
        ok = True

        def json(self):
            raise ValueError("Expecting value: line 1 column 1 (char 0)")

    monkeypatch.setattr(client_mod.requests, "get", lambda url, **kwargs: HtmlResp())
    result = CliRunner().invoke(cli.cli, ["-s", "http://h", "study", "list"])
    assert result.exit_code == 1
    assert result.stdout == ""
    assert "Invalid server response" in result.stderr

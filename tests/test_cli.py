import pytest
from typer.testing import CliRunner

from echo360_dl import __main__ as entry_point
from echo360_dl import __version__
from echo360_dl.cli import app as cli_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_app, "CONFIG_FILE", tmp_path / "config.ini")
    monkeypatch.chdir(tmp_path)


def test_version():
    result = runner.invoke(cli_app.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_a_config_file(tmp_path):
    result = runner.invoke(cli_app.app, ["init"])

    assert result.exit_code == 0
    assert "container_ext = mp4" in (tmp_path / "config.ini").read_text()


def test_download_without_valid_urls_exits_non_zero():
    result = runner.invoke(cli_app.app, ["download", "https://echo360.org/lesson/1"])

    assert result.exit_code == 1
    assert "No valid URLs" in result.output


def test_download_with_missing_url_file_exits_non_zero():
    result = runner.invoke(cli_app.app, ["download", "--input", "missing.txt"])

    assert result.exit_code == 1


def test_invalid_option_value_exits_non_zero():
    result = runner.invoke(
        cli_app.app, ["download", "--format", "avi", "https://echo360.org/x"]
    )

    assert result.exit_code == 1


def test_ctrl_c_reports_cancellation_and_exits_130(monkeypatch, capsys):
    def interrupted():
        raise KeyboardInterrupt

    monkeypatch.setattr(entry_point, "app", interrupted)

    with pytest.raises(SystemExit) as exc_info:
        entry_point.main()

    assert exc_info.value.code == 130
    assert "Operation cancelled" in capsys.readouterr().err

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dfood.cli import cli
from dfood.core.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, environment="testing", secret_key="s" * 64)


def test_serve_invalid_workers_sqlite(settings):
    """Verify CLI fails when --workers > 1 is used with SQLite."""
    runner = CliRunner()

    with patch("dfood.cli.get_settings", return_value=settings), patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--workers", "2"])

    assert result.exit_code == 1
    assert "SQLite does not support multiple worker processes" in result.output
    mock_run.assert_not_called()


def test_serve_runs_uvicorn(settings):
    runner = CliRunner()

    with patch("dfood.cli.get_settings", return_value=settings), patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--port", "9001", "--no-reload"])

    assert result.exit_code == 0
    args, kwargs = mock_run.call_args
    assert args[0] == "dfood.infrastructure.api.app:app"
    assert kwargs["port"] == 9001
    assert kwargs["reload"] is False


def test_generate_secret():
    result = CliRunner().invoke(cli, ["generate-secret"])

    assert result.exit_code == 0
    assert len(result.output.strip()) == 64


def test_generate_secret_too_short():
    result = CliRunner().invoke(cli, ["generate-secret", "--bytes", "8"])

    assert result.exit_code != 0


def test_info_hides_secret(settings):
    with patch("dfood.cli.get_settings", return_value=settings):
        result = CliRunner().invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "Secret Key:   set" in result.output
    assert "s" * 64 not in result.output


def test_init_db_refuses_production():
    production = Settings(_env_file=None, environment="production", secret_key="s" * 64)

    with patch("dfood.cli.get_settings", return_value=production):
        result = CliRunner().invoke(cli, ["init-db"])

    assert result.exit_code == 1
    assert "Use migrations" in result.output

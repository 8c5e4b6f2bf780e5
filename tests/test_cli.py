from click.testing import CliRunner

from agent.logsentinel.config.loader import load_config
from agent.logsentinel.config.schema import SentinelConfig
from cli.logsentinel_cli.main import cli


def test_parse_lists_events(tmp_path):
    log_file = tmp_path / "app.log"
    log_file.write_text(
        '{"@l":"Information","@mt":"ok"}\n'
        "2024-01-01T00:00:00Z|Fatal|Pay|Crash|at line 10\n"
        "not a valid line\n"
    )

    result = CliRunner().invoke(cli, ["parse", str(log_file)])

    assert result.exit_code == 0
    assert "1 events from 3 lines" in result.output
    assert "Crash" in result.output


def test_parse_without_events(tmp_path):
    log_file = tmp_path / "app.log"
    log_file.write_text("nothing to see\n")

    result = CliRunner().invoke(cli, ["parse", str(log_file)])

    assert result.exit_code == 0
    assert "No events found in 1 lines." in result.output


def test_init_config_round_trips(tmp_path):
    path = tmp_path / "etc" / "config.yml"

    result = CliRunner().invoke(cli, ["init-config", str(path)])

    assert result.exit_code == 0
    assert load_config(path) == SentinelConfig()


def test_init_config_refuses_overwrite(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("agent: {}\n")

    result = CliRunner().invoke(cli, ["init-config", str(path)])

    assert result.exit_code == 1
    assert path.read_text() == "agent: {}\n"


def test_run_reports_bad_config(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("analysis:\n  provider: openai\n")

    result = CliRunner().invoke(cli, ["run", "--config", str(path)])

    assert result.exit_code == 2
    assert "Invalid configuration" in result.output

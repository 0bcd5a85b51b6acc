import pytest
from click.testing import CliRunner

from bank_recon.cli import main
from conftest import CSV_STATEMENT, QIF_STATEMENT


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def statement_csv(tmp_path):
    path = tmp_path / "statement.csv"
    path.write_text(CSV_STATEMENT)
    return path


@pytest.fixture
def journal_csv(tmp_path):
    path = tmp_path / "journal.csv"
    path.write_text("id,description,amount,date\nJE-1,Office Supplies,250.00,2025-01-10\n")
    return path


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_validate_accepts_csv(runner, statement_csv):
    result = runner.invoke(main, ["validate", str(statement_csv)])

    assert result.exit_code == 0
    assert "Valid CSV statement" in result.output


def test_validate_rejects_unknown_extension(runner, tmp_path):
    path = tmp_path / "statement.txt"
    path.write_text(CSV_STATEMENT)

    result = runner.invoke(main, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Unsupported file format" in result.output


def test_parse_with_explicit_type(runner, tmp_path):
    path = tmp_path / "export.dat"
    path.write_text(QIF_STATEMENT)

    result = runner.invoke(main, ["parse", str(path), "--type", "qif"])

    assert result.exit_code == 0
    assert "Total transactions: 2" in result.output


def test_parse_bad_csv_fails(runner, tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("Date,Memo\n2025-01-05,Coffee\n")

    result = runner.invoke(main, ["parse", str(path)])

    assert result.exit_code == 1
    assert "Error parsing file" in result.output


def test_reconcile_dry_run(runner, statement_csv, journal_csv):
    result = runner.invoke(
        main, ["reconcile", str(statement_csv), "-j", str(journal_csv), "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert "auto-matched 1 of 3" in result.output
    assert "Dry run" in result.output


def test_reconcile_writes_report(runner, tmp_path, statement_csv, journal_csv):
    output = tmp_path / "report.xlsx"

    result = runner.invoke(
        main, ["reconcile", str(statement_csv), "-j", str(journal_csv), "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_init_config(runner, tmp_path):
    output = tmp_path / "config.yaml"

    result = runner.invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0
    assert output.exists()


@pytest.fixture
def bad_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("matching:\n  auto_match_threshold: high\n")
    return path


@pytest.mark.parametrize("command", ["validate", "parse"])
def test_bad_config_reports_error(runner, statement_csv, bad_config, command):
    result = runner.invoke(main, [command, str(statement_csv), "-c", str(bad_config)])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert isinstance(result.exception, SystemExit)


def test_reconcile_undecodable_statement(runner, tmp_path):
    path = tmp_path / "statement.csv"
    path.write_bytes(b"Date,Description,Amount\n2025-01-05,Caf\xe9,-4.50\n")

    result = runner.invoke(main, ["reconcile", str(path), "--dry-run"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Failed to read statement file" in result.output

"""
Command-line interface for the bank statement reconciliation tool.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import generate_default_config, load_config
from .importer import validate_statement_file
from .models.ledger import AccountType
from .models.results import ReconciliationReport, ReconciliationSummary
from .parsers.book_parser import BookRecordParser
from .parsers.statement import get_parser
from .reports.excel_generator import ExcelReportGenerator
from .service import BankReconciliationService
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

FILE_TYPE_CHOICE = click.Choice(["csv", "qif", "ofx"], case_sensitive=False)


@click.group()
@click.version_option(version=__version__)
def main():
    """Bank Statement Reconciliation Tool."""
    pass


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-t", "--type", "file_type", type=FILE_TYPE_CHOICE, help="Statement format")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def validate(statement_file: Path, file_type: Optional[str], config: Optional[Path]):
    """
    Check a statement file's format and size before importing.

    STATEMENT_FILE: Path to the CSV, QIF or OFX statement
    """
    try:
        recon_config = load_config(config)
    except ReconciliationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    result = validate_statement_file(statement_file, file_type, recon_config)

    if result.is_valid:
        console.print(f"[green]Valid {result.file_type.value.upper()} statement[/green]")
        return

    for error in result.errors:
        console.print(f"[red]{escape(error)}[/red]")
    sys.exit(1)


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-t", "--type", "file_type", type=FILE_TYPE_CHOICE, help="Statement format")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse(statement_file: Path, file_type: Optional[str], config: Optional[Path]):
    """
    Parse a statement file and display its transactions.

    STATEMENT_FILE: Path to the CSV, QIF or OFX statement
    """
    try:
        recon_config = load_config(config)
        parser = get_parser(file_type or statement_file.suffix, recon_config)
        result = parser.parse_file(statement_file)

        table = Table(title=f"Statement Transactions: {statement_file.name}")
        table.add_column("Date")
        table.add_column("Description")
        table.add_column("Amount", justify="right")
        table.add_column("Direction")

        for txn in result.transactions[:20]:  # Show first 20
            table.add_row(
                txn.date.strftime("%Y-%m-%d"),
                txn.description[:40] + "..." if len(txn.description) > 40 else txn.description,
                f"{txn.amount:,.2f}",
                txn.direction.value,
            )

        console.print(table)

        if len(result.transactions) > 20:
            console.print(f"\n... and {len(result.transactions) - 20} more transactions")

        console.print(f"\nTotal transactions: {len(result.transactions)}")
        if result.date_fallback_count:
            console.print(
                f"[yellow]{result.date_fallback_count} rows had unparsable dates "
                "and were dated today[/yellow]"
            )
        if result.skipped_count:
            console.print(f"[yellow]{result.skipped_count} rows were skipped[/yellow]")

    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {escape(str(e))}[/red]")
        sys.exit(1)


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-t", "--type", "file_type", type=FILE_TYPE_CHOICE, help="Statement format")
@click.option(
    "-j", "--journal", type=click.Path(exists=True, path_type=Path), help="Journal entry CSV"
)
@click.option(
    "-i", "--invoices", type=click.Path(exists=True, path_type=Path), help="Invoice CSV"
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("--account-name", default=None, help="Bank account name")
@click.option("--bank-name", default="", help="Bank name")
@click.option("--currency", default=None, help="Account currency code")
@click.option(
    "--opening-balance", type=float, default=None, help="Opening balance of the account"
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option(
    "--mark-reconciled", is_flag=True, help="Mark the statement reconciled if it balances"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Match and show summary without generating report"
)
def reconcile(
    statement_file: Path,
    file_type: Optional[str],
    journal: Optional[Path],
    invoices: Optional[Path],
    config: Optional[Path],
    account_name: Optional[str],
    bank_name: str,
    currency: Optional[str],
    opening_balance: Optional[float],
    output: Optional[Path],
    mark_reconciled: bool,
    verbose: bool,
    dry_run: bool,
):
    """
    Import a bank statement and auto-match it against the books.

    STATEMENT_FILE: Path to the CSV, QIF or OFX statement
    """
    try:
        recon_config = load_config(config)
        log_level = "DEBUG" if verbose else recon_config.logging.level
        setup_logging(log_level, log_format=recon_config.logging.format)

        books = BookRecordParser(recon_config).load_source(journal, invoices)
        service = BankReconciliationService(books=books, config=recon_config)
        seed = recon_config.ledger.seed_account
        account = service.store.create_account(
            name=account_name or seed.name,
            bank_name=bank_name or seed.bank_name,
            account_number=seed.account_number,
            account_type=AccountType(seed.account_type),
            currency=currency or seed.currency,
            opening_balance=Decimal(
                str(opening_balance if opening_balance is not None else seed.opening_balance)
            ),
            is_primary=True,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Importing statement...", total=None)
            imported = service.import_bank_statement(account.id, statement_file, file_type)
            progress.update(task, completed=True)

            task = progress.add_task("Running auto-match...", total=None)
            match_result = service.run_auto_matching(account.id)
            progress.update(task, completed=True)

        statement_id = imported.statement.id
        if mark_reconciled:
            if service.mark_statement_reconciled(statement_id):
                console.print("[green]Statement marked reconciled[/green]")
            else:
                console.print("[yellow]Statement does not balance; left as imported[/yellow]")

        summary = service.get_reconciliation_summary(statement_id)
        report = service.generate_reconciliation_report(account.id)

        console.print(
            f"Imported {imported.imported_count} transactions into "
            f"{imported.statement.statement_number}; auto-matched "
            f"{match_result.matched_count} of {match_result.total_processed}"
        )
        if imported.date_fallback_count:
            console.print(
                f"[yellow]{imported.date_fallback_count} rows had unparsable dates[/yellow]"
            )
        _display_summary(summary)
        _display_recommendations(report)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        generator = ExcelReportGenerator(recon_config)
        output = output or generator.default_output_path()
        items = {
            h.statement_id: service.get_reconciliation_items(h.statement_id)
            for h in report.statements
        }
        report_path = generator.generate_report(report, items, output)

        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(summary: ReconciliationSummary) -> None:
    """Display a statement reconciliation summary in the console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Transactions", str(summary.total_transactions))
    table.add_row("Total Credits", f"{summary.total_credits:,.2f}")
    table.add_row("Total Debits", f"{summary.total_debits:,.2f}")
    table.add_row("Matched", str(summary.matched_count))
    table.add_row("Unmatched", str(summary.unmatched_count))
    table.add_row("Match Rate", f"{summary.match_rate:.1f}%")
    table.add_row("Difference", f"{summary.difference:,.2f}")
    table.add_row("Reconciled", "yes" if summary.is_reconciled else "no")

    console.print(table)


def _display_recommendations(report: ReconciliationReport) -> None:
    for text in report.recommendations:
        console.print(f"- {text}")


if __name__ == "__main__":
    main()

"""Command-line interface for the amortization engine.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute full amortization schedules, view summaries or compare two
loan scenarios. Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
import shlex
from pathlib import Path
from typing import Any, Dict, Optional

import click

from .data_models import AmortizationSchedule, LoanTerms, PaymentFrequency
from .engine import compute_schedule, maturity_date
from .formatter import print_comparison, print_schedule, print_summary
from .logging_config import setup_logging
from .utils import parse_amount, parse_date, parse_rate

logger = logging.getLogger(__name__)

FREQUENCY_CHOICES = [f.value for f in PaymentFrequency]
MAX_TERM_MONTHS = 1200


def build_terms_from_options(
    principal: str,
    rate: str,
    term: int,
    frequency: str,
    start_date: str,
) -> LoanTerms:
    """Validate raw option values and build ``LoanTerms`` from them.

    Raises ``click.BadParameter`` for anything that would not describe a
    real loan.
    """
    try:
        principal_value = parse_amount(str(principal))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="principal")
    if principal_value <= 0:
        raise click.BadParameter("Principal must be positive", param_hint="principal")

    try:
        rate_value = parse_rate(str(rate))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="rate")
    if rate_value < 0:
        raise click.BadParameter("Interest rate cannot be negative", param_hint="rate")

    try:
        term_value = int(term)
    except (TypeError, ValueError):
        raise click.BadParameter(f"Invalid term: {term}", param_hint="term")
    if term_value <= 0:
        raise click.BadParameter("Term must be a positive number of months", param_hint="term")
    if term_value > MAX_TERM_MONTHS:
        raise click.BadParameter(f"Term cannot exceed {MAX_TERM_MONTHS} months", param_hint="term")

    try:
        frequency_value = PaymentFrequency(str(frequency).lower())
    except ValueError:
        raise click.BadParameter(
            f"Frequency must be one of {', '.join(FREQUENCY_CHOICES)}; got {frequency}",
            param_hint="frequency",
        )

    try:
        start_dt = parse_date(str(start_date))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="start-date")
    try:
        maturity_date(start_dt, term_value)
    except ValueError:
        raise click.BadParameter("Loan would mature after the last supported date", param_hint="start-date")

    return LoanTerms(
        principal=principal_value,
        annual_interest_rate=rate_value,
        term_months=term_value,
        frequency=frequency_value,
        start_date=start_dt,
    )


def export_to_json(path: Path, schedule: AmortizationSchedule, summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": summary, "schedule": schedule.to_dict()}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: AmortizationSchedule) -> None:
    """Export schedule rows to a CSV file."""
    header = [
        "Payment_Number",
        "Scheduled_Date",
        "Due_Date",
        "Amount_Due",
        "Principal",
        "Interest",
        "Remaining_Balance",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule.installments:
            writer.writerow(
                [
                    e.payment_number,
                    e.scheduled_date.isoformat(),
                    e.due_date.isoformat(),
                    f"{e.amount_due:.2f}",
                    f"{e.principal_amount:.2f}",
                    f"{e.interest_amount:.2f}",
                    f"{e.remaining_balance:.2f}",
                ]
            )


def loan_options(func):
    """Attach the options shared by every command that takes loan terms."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 250000, 250k, 1.5m)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate in percent (e.g. 6.5)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option(
            "--frequency",
            "-f",
            "frequency",
            type=click.Choice(FREQUENCY_CHOICES),
            default=PaymentFrequency.MONTHLY.value,
            show_default=True,
            help="Installment frequency",
        ),
        click.option("--start-date", "-s", "start_date", required=True, help="First payment date (YYYY-MM-DD or YYYY-MM)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    envvar="LOAN_SCHEDULE_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity",
)
@click.option("--log-json", is_flag=True, help="Emit log records as JSON")
def cli(log_level: str, log_json: bool) -> None:
    """Loan amortization schedules from the command line."""
    setup_logging(log_level, json_output=log_json)


@cli.command()
@loan_options
@click.option("--max-rows", "max_rows", type=int, default=120, show_default=True, help="Rows to print (0 for all)")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: str,
    term: int,
    frequency: str,
    start_date: str,
    max_rows: int,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    terms = build_terms_from_options(principal, rate, term, frequency, start_date)
    amortization, summary_data = compute_schedule(terms)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, amortization, summary_data)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, amortization)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="output")
        logger.info("Exported %d installments to %s", amortization.total_payments, path)
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(summary_data)
    installments = amortization.installments
    # Limit schedule length printed to avoid flooding the terminal
    if max_rows > 0 and len(installments) > max_rows:
        click.echo(f"Schedule has {len(installments)} rows; showing first {max_rows} rows.")
        installments = installments[:max_rows]
    print_schedule(installments)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: str,
    term: int,
    frequency: str,
    start_date: str,
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    terms = build_terms_from_options(principal, rate, term, frequency, start_date)
    _, summary_data = compute_schedule(terms)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="output")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Turn a quoted scenario option string into ``build_terms_from_options`` kwargs."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {
        "principal": None,
        "rate": None,
        "term": None,
        "frequency": PaymentFrequency.MONTHLY.value,
        "start_date": None,
    }
    flags = {
        "-p": "principal",
        "--principal": "principal",
        "-r": "rate",
        "--rate": "rate",
        "-t": "term",
        "--term": "term",
        "-f": "frequency",
        "--frequency": "frequency",
        "-s": "start_date",
        "--start-date": "start_date",
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in flags:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Missing value for {token} in scenario")
        params[flags[token]] = tokens[i + 1]
        i += 2
    for name in ("principal", "rate", "term", "start_date"):
        if params[name] is None:
            raise click.BadParameter(f"Scenario missing required option {name}")
    return params


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        loan-schedule compare --scenario1 "-p 300k -r 6 -t 360 -s 2025-01" --scenario2 "-p 300k -r 5.5 -t 240 -s 2025-01"
    """
    terms1 = build_terms_from_options(**parse_scenario_opts(scenario1))
    terms2 = build_terms_from_options(**parse_scenario_opts(scenario2))
    _, summary1 = compute_schedule(terms1)
    _, summary2 = compute_schedule(terms2)
    print_comparison(summary1, summary2)


if __name__ == "__main__":
    cli()

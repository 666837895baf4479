"""Output helpers for the loan schedule tools.

This module provides simple functions to render amortization schedules and
summaries in a tabular text format. Output goes through ``click.echo`` so it
can be captured by click's test runner.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

import click

from .data_models import Installment


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Principal          : {summary['principal']:.2f}")
    click.echo(f"Annual rate        : {summary['annual_interest_rate'] * 100:.3f}%")
    click.echo(f"Term               : {summary['term_months']} months ({summary['frequency']})")
    click.echo(f"Recurring payment  : {summary['recurring_payment']:.2f}")
    # The last installment absorbs rounding drift, so it usually differs slightly.
    if summary["total_payments"]:
        click.echo(f"Final payment      : {summary['final_payment']:.2f}")
    click.echo(f"Number of payments : {summary['total_payments']}")
    click.echo(f"Total interest     : {summary['total_interest']:.2f}")
    click.echo(f"Total cost         : {summary['total_cost']:.2f}")
    if summary.get("first_payment_date"):
        click.echo(f"First payment      : {summary['first_payment_date']}")
        click.echo(f"Final payment date : {summary['final_payment_date']}")
    if summary.get("maturity_date"):
        click.echo(f"Maturity date      : {summary['maturity_date']}")
    click.echo("-" * 72)


def print_schedule(installments: Iterable[Installment]) -> None:
    """Print the amortization schedule as a simple tab-separated table."""
    headers = ["No", "Due", "Payment", "Principal", "Interest", "Balance"]
    click.echo("\t".join(headers))
    for entry in installments:
        row = [
            str(entry.payment_number),
            entry.due_date.isoformat(),
            f"{entry.amount_due:.2f}",
            f"{entry.principal_amount:.2f}",
            f"{entry.interest_amount:.2f}",
            f"{entry.remaining_balance:.2f}",
        ]
        click.echo("\t".join(row))


def print_comparison(s1: Dict[str, Any], s2: Dict[str, Any]) -> None:
    """Print a comparison of two loan summaries side by side.

    The difference column is scenario2 - scenario1; a negative difference
    means the second scenario is cheaper or shorter.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    keys = [
        "recurring_payment",
        "total_payments",
        "total_interest",
        "total_cost",
    ]
    click.echo(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1.get(key)
        v2 = s2.get(key)
        diff = v2 - v1
        click.echo(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    click.echo("=" * 72)

"""CLI entry point for CASH website audits."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.status import Status
from rich.table import Table

from .main import AnalysisError, analyze_url
from .models import AnalysisResult
from .report import generate_report_pdf


def _print_result(console: Console, result: AnalysisResult):
    score_result = result.score
    scores = score_result.scores

    console.print(f"\n[bold]{escape(result.content.title)}[/]  ({result.url})")
    if score_result.detected_business_type:
        console.print(f"Business type: [cyan]{score_result.detected_business_type}[/]")
    console.print(f"Overall CASH score: [bold]{scores.overall}/100[/]\n")

    table = Table(title="Signals")
    table.add_column("Category")
    table.add_column("Signal")
    table.add_column("Score", justify="right")
    for category, signals in score_result.signals.items():
        category_score = getattr(scores, category)
        for i, signal in enumerate(signals):
            label = f"{category.title()} ({category_score})" if i == 0 else ""
            style = "red" if signal.score < 5 else None
            table.add_row(label, signal.label, f"{signal.score}/10", style=style)
    console.print(table)

    for issue in score_result.priority_issues:
        console.print(f"[bold red]![/] ({issue.severity}) {escape(issue.label)}")

    console.print()
    for offer in score_result.offers:
        loss = f" [red](${offer.monetized_loss:,}/month)[/]" if offer.monetized_loss is not None else ""
        console.print(f"[bold green]+[/] {escape(offer.label)}{loss}: {escape(offer.reason)}")

    console.print(f"\n[italic]{escape(result.ai_summary.one_line_hook)}[/]\n")


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="cash-report",
        description="Score a business website against the CASH Method.",
    )
    parser.add_argument(
        "--url",
        required=True,
        help="Website URL to analyze",
    )
    parser.add_argument(
        "--email",
        default=None,
        help="Client email to attach to the lead",
    )
    parser.add_argument(
        "--pdf",
        type=Path,
        default=None,
        help="Also write a PDF audit report to this path",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of a table",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show collaborator log output",
    )
    args = parser.parse_args()

    console = Console()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    status = Status("", console=console)
    status.start()

    def on_progress(msg: str):
        status.update(f"[bold cyan]{msg}[/]")

    try:
        result = asyncio.run(
            analyze_url(
                url=args.url,
                email=args.email,
                on_progress=on_progress,
            )
        )
        if args.pdf:
            on_progress("Generating PDF...")
            generate_report_pdf(result, args.pdf)
        status.stop()
    except KeyboardInterrupt:
        status.stop()
        console.print("\n[yellow]Cancelled.[/]")
        sys.exit(1)
    except AnalysisError as e:
        status.stop()
        console.print(f"\n[bold red]Error:[/] {e.message} (request {e.request_id})\n")
        sys.exit(1)
    except Exception as e:
        status.stop()
        console.print(f"\n[bold red]Error:[/] {escape(str(e))}\n")
        sys.exit(1)

    if args.json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        _print_result(console, result)
    if args.pdf:
        console.print(f"[bold green]Done![/] Report saved to [bold]{args.pdf}[/]\n")


if __name__ == "__main__":
    main()

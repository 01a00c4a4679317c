"""CLI entrypoint: run one scan in-process or serve the scan API."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Tuple

from rich.console import Console
from rich.table import Table

from aggregator import print_module_summary
from config import get_settings
from core import LSIResult, TargetProfile
from orchestrator import ScanOrchestrator
from scoring import component_breakdown
from utils.logger import configure_package_logging


console = Console()

CLI_USER = "cli"


def _print_lsi(lsi: LSIResult) -> None:
    table = Table(title=f"LSI {lsi.total} / 100", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Max", justify="right")
    for row in component_breakdown(lsi).values():
        table.add_row(row["label"], f"{row['current']:.1f}", f"{row['max']:.0f}")
    console.print(table)


def _print_providers() -> None:
    table = Table(title="Provider credentials", show_header=True)
    table.add_column("Credential", style="cyan")
    table.add_column("Configured", justify="center")
    for name, configured in get_settings().provider_status().items():
        table.add_row(name, "[green]yes[/green]" if configured else "[dim]no[/dim]")
    console.print(table)


async def _run_scan(profile: TargetProfile) -> Tuple[ScanOrchestrator, str]:
    orchestrator = ScanOrchestrator()
    target_id = orchestrator.profile_store.add_target(CLI_USER, profile)
    run, _ = orchestrator.prepare_scan(target_id, CLI_USER)
    await orchestrator.run_scan(run.run_id, profile)
    return orchestrator, run.run_id


def main() -> None:
    parser = argparse.ArgumentParser(description="Reputation scan CLI")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan")
    scan.add_argument("--name", required=True)
    scan.add_argument("--company", default=None)
    scan.add_argument("--role", default=None)
    scan.add_argument("--industry", default=None)
    scan.add_argument("--linkedin-url", default=None)
    scan.add_argument("--keywords", default="", help="comma-separated")
    scan.add_argument("--full", action="store_true", help="print every kept mention")
    scan.add_argument("--json", action="store_true", help="print the scan view as JSON")

    serve = sub.add_parser("serve")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    sub.add_parser("providers")

    args = parser.parse_args()
    configure_package_logging(level=getattr(logging, str(args.log_level).upper(), logging.INFO), log_file=args.log_file)

    if args.command == "providers":
        _print_providers()
        return

    if args.command == "serve":
        import uvicorn

        uvicorn.run("webapp.app:app", host=args.host, port=int(args.port))
        return

    profile = TargetProfile(
        name=args.name,
        company=args.company,
        role=args.role,
        industry=args.industry,
        linkedin_url=args.linkedin_url,
        keywords=[item.strip() for item in str(args.keywords).split(",") if item.strip()],
    )
    orchestrator, run_id = asyncio.run(_run_scan(profile))
    payload = orchestrator.scan_store.get_payload(run_id)
    if args.json or payload is None:
        view = orchestrator.get_scan(run_id, full=bool(args.full))
        print(json.dumps(view, ensure_ascii=False, indent=2, default=str))
        return

    print_module_summary(payload.module_summary, payload.total_mentions, payload.deduplicated_count)
    _print_lsi(payload.lsi)
    console.print(f"[bold]Summary:[/bold] {payload.narrative_summary}")
    if payload.archetype_hints:
        console.print(f"[bold]Archetypes:[/bold] {', '.join(payload.archetype_hints)}")
    for signal in payload.crisis_signals:
        console.print(f"[red]Crisis signal:[/red] {signal}")


if __name__ == "__main__":
    main()

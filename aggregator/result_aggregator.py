"""
Result Aggregator
Merge module outputs, drop duplicates, rank by relevance and cap volume.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Sequence
import logging

from rich.console import Console
from rich.table import Table

from core import ModuleResult, ModuleSummary, SourceResult


logger = logging.getLogger(__name__)
console = Console()

DEFAULT_RESULT_CAP = 200


@dataclass
class AggregatedResults:
    """Deduplicated, ranked and capped results plus pre-dedup accounting."""
    results: List[SourceResult] = field(default_factory=list)
    total_mentions: int = 0
    deduplicated_count: int = 0

    @property
    def dropped_duplicates(self) -> int:
        return self.total_mentions - self.deduplicated_count


def dedupe_results(results: Iterable[SourceResult]) -> List[SourceResult]:
    """First occurrence of each identity key wins."""
    seen = set()
    unique: List[SourceResult] = []
    for item in results:
        key = item.identity_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def rank_results(results: Sequence[SourceResult]) -> List[SourceResult]:
    """
    Order by relevance, highest first.

    Missing relevance counts as 0. ``sorted`` is stable, so ties keep
    encounter order; arrival order carries no other meaning.
    """
    return sorted(
        results,
        key=lambda item: float(item.relevance) if item.relevance is not None else 0.0,
        reverse=True,
    )


def aggregate(module_results: Sequence[ModuleResult], cap: int = DEFAULT_RESULT_CAP) -> AggregatedResults:
    """
    Flatten every module's results in the given order, dedup, rank and cap.

    ``total_mentions`` is the raw count before dedup and before the cap.
    """
    flat: List[SourceResult] = [item for module in module_results for item in module.results]
    unique = dedupe_results(flat)
    ranked = rank_results(unique)
    capped = ranked[: max(0, int(cap))]

    logger.info(
        f"Aggregated {len(flat)} mentions -> {len(unique)} unique -> {len(capped)} kept (cap={cap})"
    )
    return AggregatedResults(
        results=capped,
        total_mentions=len(flat),
        deduplicated_count=len(unique),
    )


def print_module_summary(
    module_summary: Mapping[str, ModuleSummary],
    total_mentions: int,
    unique_count: int,
) -> None:
    """Rich table of per-module counts, used by the CLI."""
    console.print()

    table = Table(title="📊 Scan Summary", show_header=True)
    table.add_column("Module", style="cyan")
    table.add_column("Adapters", justify="right", style="magenta")
    table.add_column("Results", justify="right", style="green")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Duration", justify="right")

    for name, summary in module_summary.items():
        table.add_row(
            name,
            str(summary.sources_scanned),
            str(summary.count),
            str(len(summary.errors)),
            f"{summary.duration_ms}ms",
        )

    table.add_row("", "", "", "", "")
    table.add_row("[bold]Total[/bold]", "", f"[bold]{total_mentions}[/bold]", "", "")
    table.add_row("[bold]Unique[/bold]", "", f"[bold]{unique_count}[/bold]", "", "")

    console.print(table)
    console.print()

"""Tests for merging, dedup, ranking and capping of module results."""

from __future__ import annotations

import itertools

from aggregator import aggregate, dedupe_results, rank_results
from core import ModuleResult, SourceResult


def _item(source: str, title: str, url: str = "", relevance=None, category: str = "news") -> SourceResult:
    return SourceResult(source=source, category=category, url=url, title=title, relevance=relevance)


def test_identity_key_uses_url_then_source_and_title() -> None:
    assert _item("Reuters", "X", url="https://r.com/x").identity_key() == "https://r.com/x"
    assert _item(" Reuters ", " Big News ").identity_key() == "reuters::big news"


def test_dedupe_keeps_first_occurrence() -> None:
    first = _item("Reuters", "Story", url="https://r.com/1", relevance=0.2)
    again = _item("Bloomberg", "Other title", url="https://r.com/1", relevance=0.9)
    no_url = _item("Reddit", "Thread")
    no_url_same = _item("reddit", "THREAD")

    unique = dedupe_results([first, again, no_url, no_url_same])

    assert unique == [first, no_url]


def test_dedupe_gives_same_key_set_under_permutation() -> None:
    items = [
        _item("A", "one", url="https://a/1"),
        _item("B", "two", url="https://a/1"),
        _item("C", "three"),
        _item("c", "THREE"),
        _item("D", "four", url="https://d/4"),
    ]
    expected = {item.identity_key() for item in dedupe_results(items)}

    for perm in itertools.permutations(items):
        keys = [item.identity_key() for item in dedupe_results(list(perm))]
        assert len(keys) == len(set(keys))
        assert set(keys) == expected


def test_rank_is_stable_and_treats_missing_relevance_as_zero() -> None:
    a = _item("A", "a", relevance=0.5)
    b = _item("B", "b")
    c = _item("C", "c", relevance=0.9)
    d = _item("D", "d", relevance=0.5)
    e = _item("E", "e", relevance=0.0)

    assert rank_results([a, b, c, d, e]) == [c, a, d, b, e]


def test_aggregate_counts_before_dedup_and_caps() -> None:
    modules = [
        ModuleResult(
            module="search",
            results=[_item("Google Web", f"g{i}", url=f"https://g/{i}", relevance=i / 10) for i in range(5)],
        ),
        ModuleResult(
            module="news",
            results=[_item("Reuters", "dup", url="https://g/0"), _item("Reuters", "n1", url="https://n/1")],
        ),
        ModuleResult(module="social", errors=["Twitter/X: HTTP 401"]),
    ]

    aggregated = aggregate(modules, cap=3)

    assert aggregated.total_mentions == 7
    assert aggregated.deduplicated_count == 6
    assert aggregated.dropped_duplicates == 1
    assert [item.title for item in aggregated.results] == ["g4", "g3", "g2"]


def test_aggregate_of_nothing_is_empty() -> None:
    aggregated = aggregate([])
    assert aggregated.results == []
    assert aggregated.total_mentions == 0

"""
Tests for the multi-source subdomain merge.
"""

from __future__ import annotations

from domainrecon.engine.aggregator import SubdomainAggregator, SubdomainFinding, merge_subdomains


def test_merge_dedupes_case_insensitively_and_drops_foreign_names() -> None:
    merged = merge_subdomains(
        "example.com",
        ["Www.Example.com", "www.example.com", "mail.example.com", "not-this.other.com"],
    )
    assert merged == ["mail.example.com", "www.example.com"]


def test_merge_across_sources() -> None:
    merged = merge_subdomains(
        "example.com",
        ["api.example.com", "b.example.com"],
        ["API.EXAMPLE.COM ", "a.example.com"],
        [],
    )
    assert merged == ["a.example.com", "api.example.com", "b.example.com"]


def test_rejects_apex_wildcards_and_lookalikes() -> None:
    agg = SubdomainAggregator("example.com")
    added = agg.add("crtsh", [
        "example.com",
        "*.example.com",
        "admin@example.com",
        "badexample.com",
        "a..example.com",
        "dev.example.com",
        None,
    ])
    assert added == 1
    assert agg.names() == ["dev.example.com"]


def test_first_source_wins() -> None:
    agg = SubdomainAggregator("example.com")
    agg.add("bruteforce", ["www.example.com"])
    assert agg.add("crtsh", ["www.example.com", "api.example.com"]) == 1

    findings = {f.name: f for f in agg.findings()}
    assert findings["www.example.com"].source == "bruteforce"
    assert findings["api.example.com"].source == "crtsh"


def test_only_annotated_names_are_alive() -> None:
    agg = SubdomainAggregator("Example.com.")
    agg.add("bruteforce", ["www.example.com"])
    agg.add("crtsh", ["old.example.com"])

    assert agg.annotate("WWW.example.com", "203.0.113.10") is True
    assert agg.annotate("ghost.example.com", "203.0.113.11") is False

    assert agg.findings() == [
        SubdomainFinding(name="old.example.com", source="crtsh"),
        SubdomainFinding(
            name="www.example.com",
            ip_address="203.0.113.10",
            is_alive=True,
            source="bruteforce",
        ),
    ]


def test_findings_exclude_known_names() -> None:
    agg = SubdomainAggregator("example.com")
    agg.add("securitytrails", ["a.example.com", "b.example.com"])

    assert [f.name for f in agg.findings(exclude=["A.example.com"])] == ["b.example.com"]
    assert "b.example.com" in agg
    assert len(agg) == 2

"""Tests for run summaries."""

from fleetledger.domain.summary import RunSummary


def test_summary_counts_and_lines():
    summary = RunSummary(job="Commission migration", dry_run=True, examined=5, updated=2)
    summary.skip("zero total")
    summary.skip("ambiguous technician")
    summary.skip("zero total")
    summary.ambiguous_names.add("Ana")

    lines = summary.format_lines()

    assert summary.skipped_total == 3
    assert lines[0] == "Commission migration complete (dry run):"
    assert "  Updated: 2" in lines
    assert "    zero total: 2" in lines
    assert "    - Ana" in lines
    assert not any("Unmatched" in line for line in lines)


def test_summary_as_dict_is_sorted():
    summary = RunSummary(job="Field unification")
    summary.unmatched_names.update({"Zoe", "Beto"})
    summary.skip("b")
    summary.skip("a")

    data = summary.as_dict()

    assert data["unmatched_names"] == ["Beto", "Zoe"]
    assert list(data["skipped"]) == ["a", "b"]
    assert data["dry_run"] is False

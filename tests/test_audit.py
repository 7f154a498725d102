# File: tests/test_audit.py
"""Tests for the valid-source-maps audit: classification, orphans, ordering, score."""
import pytest

from sourcemap_scout.audit import (
    FAILURE_TITLE,
    LARGE_FILE_ERROR,
    TITLE,
    Verdict,
    audit_source_maps,
    classify_resolutions,
    compute_verdict,
    count_missing_sources_content,
    detect_orphan_scripts,
    sort_rows,
)
from sourcemap_scout.models import (
    Artifacts,
    DiagnosticRow,
    RawSourceMap,
    ScriptRecord,
    SourceMapResolution,
)

LARGE = 500 * 1000


def with_map(script_url, sources, sources_content=None, source_map_url=None):
    return SourceMapResolution(
        script_url=script_url,
        source_map_url=source_map_url,
        map=RawSourceMap(sources=list(sources), sources_content=sources_content),
    )


def with_error(script_url, message, source_map_url=None):
    return SourceMapResolution(
        script_url=script_url, source_map_url=source_map_url, error_message=message
    )


# --------------------------------------------------------------------------- #
#                               Classification                                #
# --------------------------------------------------------------------------- #


def test_load_error_becomes_row_with_exact_message():
    rows = classify_resolutions([with_error("a.js", "Failed fetching source map (404)", "a.js.map")])
    assert rows == [
        DiagnosticRow(script_url="a.js", source_map_url="a.js.map", error="Failed fetching source map (404)")
    ]


def test_full_sources_content_is_healthy(healthy_map):
    rows = classify_resolutions(
        [SourceMapResolution(script_url="a.js", source_map_url="a.js.map", map=healthy_map)]
    )
    assert rows == [DiagnosticRow(script_url="a.js", source_map_url="a.js.map", error=None)]
    assert not rows[0].has_error


@pytest.mark.parametrize(
    "sources,sources_content,expected",
    [
        (["a", "b", "c"], ["x", None, ""], 2),
        (["a", "b", "c"], None, 3),
        (["a", "b"], [], 2),
        ([], None, 0),
        (["a"], ["x", "extra"], 0),
    ],
)
def test_missing_sources_content_counted(sources, sources_content, expected):
    assert count_missing_sources_content(sources, sources_content) == expected


def test_missing_sources_content_message():
    rows = classify_resolutions([with_map("a.js", ["a.ts", "b.ts", "c.ts"], ["code"])])
    assert rows[0].error == "missing 2 items in `.sourcesContent`"


def test_short_sources_content_counts_every_index_past_the_end():
    # The length bound is ``len < i`` rather than ``len <= i``; index == len is
    # still counted because the entry itself is absent.
    assert count_missing_sources_content(["a", "b", "c"], ["x"]) == 2
    assert count_missing_sources_content(["a", "b"], ["x"]) == 1


def test_classification_keeps_input_order():
    rows = classify_resolutions(
        [with_error("z.js", "boom"), with_map("a.js", ["a.ts"], ["ok"]), with_error("m.js", "bad")]
    )
    assert [r.script_url for r in rows] == ["z.js", "a.js", "m.js"]


# --------------------------------------------------------------------------- #
#                              Orphan detection                               #
# --------------------------------------------------------------------------- #


def test_large_script_without_map_is_orphan(make_script):
    rows, has_orphan = detect_orphan_scripts([make_script("big.js", LARGE)], [])
    assert has_orphan is True
    assert rows == [DiagnosticRow(script_url="big.js", source_map_url=None, error=LARGE_FILE_ERROR)]


def test_threshold_boundary(make_script):
    rows, has_orphan = detect_orphan_scripts([make_script("big.js", LARGE - 1)], [])
    assert rows == []
    assert has_orphan is False


@pytest.mark.parametrize(
    "script",
    [
        ScriptRecord(url=None, content="x" * LARGE),
        ScriptRecord(url="", content="x" * LARGE),
        ScriptRecord(url="nocontent.js", content=None),
    ],
)
def test_inline_and_unknown_size_scripts_are_skipped(script):
    rows, has_orphan = detect_orphan_scripts([script], [])
    assert rows == []
    assert not has_orphan


def test_large_script_with_working_map_is_not_orphan(make_script):
    rows, has_orphan = detect_orphan_scripts(
        [make_script("big.js", LARGE)], [with_map("big.js", ["a.ts"], [None])]
    )
    assert rows == []
    assert not has_orphan


def test_orphan_row_carries_failed_map_url(make_script):
    rows, has_orphan = detect_orphan_scripts(
        [make_script("big.js", LARGE)], [with_error("big.js", "404", "big.js.map")]
    )
    assert has_orphan
    assert rows[0].source_map_url == "big.js.map"


def test_duplicate_resolutions_use_first_match(make_script):
    resolutions = [with_error("big.js", "404", "first.map"), with_map("big.js", ["a.ts"], ["ok"])]
    rows, has_orphan = detect_orphan_scripts([make_script("big.js", LARGE)], resolutions)
    assert has_orphan
    assert rows[0].source_map_url == "first.map"


def test_custom_threshold(make_script):
    rows, has_orphan = detect_orphan_scripts([make_script("mid.js", 100)], [], threshold=100)
    assert has_orphan
    assert len(rows) == 1


# --------------------------------------------------------------------------- #
#                                   Sorting                                   #
# --------------------------------------------------------------------------- #


def test_errors_first_then_descending_url():
    rows = [
        DiagnosticRow(script_url="b", error="x"),
        DiagnosticRow(script_url="a", error=None),
        DiagnosticRow(script_url="a", error="x"),
    ]
    assert sort_rows(rows) == [
        DiagnosticRow(script_url="b", error="x"),
        DiagnosticRow(script_url="a", error="x"),
        DiagnosticRow(script_url="a", error=None),
    ]


def test_absent_url_sorts_last_within_group():
    rows = [
        DiagnosticRow(script_url=None, error="x"),
        DiagnosticRow(script_url="a", error=None),
        DiagnosticRow(script_url="c", error="x"),
        DiagnosticRow(script_url=None, error=None),
        DiagnosticRow(script_url="b", error=None),
    ]
    assert [(r.script_url, r.error) for r in sort_rows(rows)] == [
        ("c", "x"),
        (None, "x"),
        ("b", None),
        ("a", None),
        (None, None),
    ]


def test_sort_is_stable_for_equal_keys():
    first = DiagnosticRow(script_url="a", source_map_url="1", error="x")
    second = DiagnosticRow(script_url="a", source_map_url="2", error="y")
    assert sort_rows([first, second]) == [first, second]
    assert sort_rows([second, first]) == [second, first]


def test_sort_uses_code_point_order():
    rows = [DiagnosticRow(script_url="B", error="x"), DiagnosticRow(script_url="a", error="x")]
    assert [r.script_url for r in sort_rows(rows)] == ["a", "B"]


# --------------------------------------------------------------------------- #
#                                   Scoring                                   #
# --------------------------------------------------------------------------- #


def test_no_source_maps_is_not_applicable(make_script):
    verdict = audit_source_maps(Artifacts(script_elements=[make_script("big.js", LARGE)]))
    assert verdict.not_applicable is True
    assert verdict.score == 1
    assert verdict.rows == []


def test_diagnostic_rows_do_not_fail():
    verdict = compute_verdict(
        [with_error("a.js", "404")], [DiagnosticRow(script_url="a.js", error="404")], False
    )
    assert verdict.score == 1
    assert not verdict.not_applicable
    assert verdict.rows[0].error == "404"


def test_healthy_scenario():
    artifacts = Artifacts(
        script_elements=[ScriptRecord(url="a.js", content="short")],
        source_maps=[with_map("a.js", ["a.ts"], ["code"])],
    )
    verdict = audit_source_maps(artifacts)
    assert verdict.score == 1
    assert verdict.rows == [DiagnosticRow(script_url="a.js")]


def test_load_error_and_large_file_scenario(make_script):
    artifacts = Artifacts(
        script_elements=[make_script("b.js", 600_000)],
        source_maps=[with_error("b.js", "404")],
    )
    verdict = audit_source_maps(artifacts)
    assert verdict.score == 0
    assert [r.error for r in verdict.rows] == ["404", LARGE_FILE_ERROR]


def test_audit_is_idempotent(make_script):
    artifacts = Artifacts(
        script_elements=[make_script("c.js", LARGE), make_script("d.js", 10)],
        source_maps=[
            with_map("a.js", ["a.ts"], ["ok"]),
            with_error("b.js", "bad"),
            with_map("d.js", ["d.ts", "e.ts"], None),
        ],
    )
    first = audit_source_maps(artifacts)
    second = audit_source_maps(artifacts)
    assert first == second
    assert [r.script_url for r in first.rows] == ["d.js", "c.js", "b.js", "a.js"]


# --------------------------------------------------------------------------- #
#                               Result payload                                #
# --------------------------------------------------------------------------- #


def test_details_table():
    verdict = Verdict(
        score=0,
        rows=[
            DiagnosticRow(script_url="b.js", error=LARGE_FILE_ERROR),
            DiagnosticRow(script_url="a.js", source_map_url="a.js.map"),
        ],
    )
    result = verdict.to_dict()
    assert result["id"] == "valid-source-maps"
    assert result["title"] == FAILURE_TITLE
    assert result["notApplicable"] is False
    assert [h["key"] for h in result["details"]["headings"]] == ["scriptUrl", "sourceMapUrl", "error"]
    assert [h["itemType"] for h in result["details"]["headings"]] == ["url", "url", "code"]
    assert result["details"]["items"] == [
        {"scriptUrl": "b.js", "error": LARGE_FILE_ERROR},
        {"scriptUrl": "a.js", "sourceMapUrl": "a.js.map"},
    ]


def test_not_applicable_has_no_details():
    result = Verdict(score=1, not_applicable=True).to_dict()
    assert result["title"] == TITLE
    assert "details" not in result


def test_description_links_to_docs():
    result = Verdict(score=1).to_dict()
    assert result["description"].endswith("[Learn more](https://web.dev/valid-source-maps).")

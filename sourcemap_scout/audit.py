# File: sourcemap_scout/audit.py
"""sourcemap_scout.audit: проверка ``valid-source-maps``.

Pipeline
--------
1. :func:`classify_resolutions` – one row per source map resolution.
2. :func:`detect_orphan_scripts` – rows for large scripts without a working map,
   plus the flag that fails the audit.
3. :func:`sort_rows` – errors first, then ``scriptUrl`` in descending order.
4. :func:`compute_verdict` – pass / fail / not applicable.

:func:`audit_source_maps` runs all four on an :class:`~sourcemap_scout.models.Artifacts`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sourcemap_scout.config import LARGE_SCRIPT_THRESHOLD
from sourcemap_scout.logger import logger
from sourcemap_scout.models import (
    Artifacts,
    DiagnosticRow,
    ScriptRecord,
    SourceMapResolution,
)

AUDIT_ID = "valid-source-maps"
TITLE = "Page has valid source maps"
FAILURE_TITLE = "Missing source maps for large first party JavaScript"
DESCRIPTION = (
    "Source maps translate minified code to the original source code. This helps "
    "developers debug in production. [Learn more](https://web.dev/valid-source-maps)."
)
REQUIRED_ARTIFACTS: Tuple[str, ...] = ("ScriptElements", "SourceMaps")

LARGE_FILE_ERROR = "Large JavaScript file is missing a source map."

TABLE_HEADINGS: Tuple[Dict[str, str], ...] = (
    {"key": "scriptUrl", "itemType": "url", "text": "URL"},
    {"key": "sourceMapUrl", "itemType": "url", "text": "Map URL"},
    {"key": "error", "itemType": "code", "text": "Error"},
)


@dataclass(slots=True)
class Verdict:
    """Итог проверки: оценка, признак неприменимости и отсортированные строки."""

    score: int
    not_applicable: bool = False
    rows: List[DiagnosticRow] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.score == 1

    @property
    def display_title(self) -> str:
        return TITLE if self.passed else FAILURE_TITLE

    def details(self) -> Dict[str, Any]:
        """Table description for the report renderer."""
        return {
            "type": "table",
            "headings": [dict(h) for h in TABLE_HEADINGS],
            "items": [row.as_item() for row in self.rows],
        }

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": AUDIT_ID,
            "title": self.display_title,
            "description": DESCRIPTION,
            "score": self.score,
            "notApplicable": self.not_applicable,
        }
        if not self.not_applicable:
            result["details"] = self.details()
        return result

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def count_missing_sources_content(sources: Sequence[str], sources_content: Optional[Sequence[Any]]) -> int:
    """Number of ``sources`` entries with no usable ``sourcesContent`` counterpart.

    The ``len(content) < i`` bound is kept as is; any index past the end of
    ``sourcesContent`` is also missing through the entry check, so the count
    matches a plain "absent or empty" test.
    """
    content = sources_content or []
    missing = 0
    for i in range(len(sources)):
        entry = content[i] if i < len(content) else None
        if len(content) < i or not entry:
            missing += 1
    return missing


def classify_resolutions(source_maps: Sequence[SourceMapResolution]) -> List[DiagnosticRow]:
    """Emit one row per resolution: load error, missing ``sourcesContent`` or healthy."""
    rows: List[DiagnosticRow] = []
    for resolution in source_maps:
        if resolution.map is None:
            rows.append(
                DiagnosticRow(
                    script_url=resolution.script_url,
                    source_map_url=resolution.source_map_url,
                    error=resolution.error_message,
                )
            )
            continue

        missing = count_missing_sources_content(
            resolution.map.sources, resolution.map.sources_content
        )
        error = f"missing {missing} items in `.sourcesContent`" if missing > 0 else None
        rows.append(
            DiagnosticRow(
                script_url=resolution.script_url,
                source_map_url=resolution.source_map_url,
                error=error,
            )
        )
    logger.debug("Classified %d source map resolutions", len(rows))
    return rows


def _index_by_script_url(source_maps: Sequence[SourceMapResolution]) -> Dict[str, SourceMapResolution]:
    index: Dict[str, SourceMapResolution] = {}
    for resolution in source_maps:
        # first match wins for duplicated URLs
        index.setdefault(resolution.script_url, resolution)
    return index


def detect_orphan_scripts(
    script_elements: Sequence[ScriptRecord],
    source_maps: Sequence[SourceMapResolution],
    threshold: int = LARGE_SCRIPT_THRESHOLD,
) -> Tuple[List[DiagnosticRow], bool]:
    """Find large external scripts with no parsed map.

    Returns the extra rows and whether at least one such script exists.
    """
    by_url = _index_by_script_url(source_maps)
    rows: List[DiagnosticRow] = []
    has_orphan = False
    for script in script_elements:
        if not script.url:
            continue  # inline scripts (no or empty src) are not checked

        resolution = by_url.get(script.url)
        if resolution is not None and resolution.map is not None:
            continue
        if script.content is None:
            continue
        if len(script.content) < threshold:
            continue

        has_orphan = True
        rows.append(
            DiagnosticRow(
                script_url=script.url,
                source_map_url=resolution.source_map_url if resolution is not None else None,
                error=LARGE_FILE_ERROR,
            )
        )
    if has_orphan:
        logger.debug("%d large scripts have no source map", len(rows))
    return rows, has_orphan


def sort_rows(rows: Sequence[DiagnosticRow]) -> List[DiagnosticRow]:
    """Errored rows first; ``script_url`` descending inside each group, absent URLs last."""
    by_url = sorted(
        rows,
        key=lambda r: (r.script_url is not None, r.script_url or ""),
        reverse=True,
    )
    return sorted(by_url, key=lambda r: not r.has_error)


def compute_verdict(
    source_maps: Sequence[SourceMapResolution],
    rows: Sequence[DiagnosticRow],
    has_orphan: bool,
) -> Verdict:
    if not source_maps:
        return Verdict(score=1, not_applicable=True)
    # only orphan large scripts fail the audit, other rows are diagnostic
    return Verdict(score=0 if has_orphan else 1, rows=sort_rows(rows))


def audit_source_maps(artifacts: Artifacts, threshold: int = LARGE_SCRIPT_THRESHOLD) -> Verdict:
    """Запускает проверку на снимке артефактов и возвращает Verdict."""
    rows = classify_resolutions(artifacts.source_maps)
    orphan_rows, has_orphan = detect_orphan_scripts(
        artifacts.script_elements, artifacts.source_maps, threshold
    )
    verdict = compute_verdict(artifacts.source_maps, rows + orphan_rows, has_orphan)
    logger.debug(
        "Audit %s: score=%d notApplicable=%s rows=%d",
        AUDIT_ID,
        verdict.score,
        verdict.not_applicable,
        len(verdict.rows),
    )
    return verdict


__all__ = [
    "AUDIT_ID",
    "TITLE",
    "FAILURE_TITLE",
    "DESCRIPTION",
    "REQUIRED_ARTIFACTS",
    "LARGE_FILE_ERROR",
    "TABLE_HEADINGS",
    "Verdict",
    "count_missing_sources_content",
    "classify_resolutions",
    "detect_orphan_scripts",
    "sort_rows",
    "compute_verdict",
    "audit_source_maps",
]

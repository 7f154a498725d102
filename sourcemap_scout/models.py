# sourcemap_scout/models.py
"""
Data models shared by the collector, the audit and the reports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True, frozen=True)
class ScriptRecord:
    """One ``<script>`` element seen on the page. ``url`` is None for inline scripts."""

    url: Optional[str] = None
    content: Optional[str] = None

    @property
    def content_length(self) -> Optional[int]:
        return None if self.content is None else len(self.content)


@dataclass(slots=True, frozen=True)
class RawSourceMap:
    """Parsed source map payload; only ``sources`` and ``sources_content`` are inspected."""

    sources: List[str] = field(default_factory=list)
    sources_content: Optional[List[Optional[str]]] = None
    version: Optional[int] = None
    file: Optional[str] = None
    source_root: Optional[str] = None
    names: List[str] = field(default_factory=list)
    mappings: str = ""


@dataclass(slots=True, frozen=True)
class SourceMapResolution:
    """Outcome of resolving the map of one script: either ``map`` or ``error_message``."""

    script_url: str
    source_map_url: Optional[str] = None
    map: Optional[RawSourceMap] = None
    error_message: Optional[str] = None


@dataclass(slots=True)
class Artifacts:
    """Snapshot consumed by the audit."""

    script_elements: List[ScriptRecord] = field(default_factory=list)
    source_maps: List[SourceMapResolution] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class DiagnosticRow:
    """One table row of the audit result. ``error`` None means the map is healthy."""

    script_url: Optional[str] = None
    source_map_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    def as_item(self) -> dict:
        item = {
            "scriptUrl": self.script_url,
            "sourceMapUrl": self.source_map_url,
            "error": self.error,
        }
        return {k: v for k, v in item.items() if v is not None}


__all__ = [
    "ScriptRecord",
    "RawSourceMap",
    "SourceMapResolution",
    "Artifacts",
    "DiagnosticRow",
]

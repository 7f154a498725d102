# === FILE: sourcemap_scout/collector/scripts.py ===
"""Script element extraction and ``sourceMappingURL`` discovery.

* :func:`extract_script_elements`: every JavaScript ``<script>`` of a page, in
  document order, external ones with an absolute URL.
* :func:`find_source_map_reference`: the map URL announced by a script,
  either through the ``SourceMap`` / ``X-SourceMap`` response header or the
  trailing ``//# sourceMappingURL=`` comment.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

__all__: Sequence[str] = ("ScriptTag", "extract_script_elements", "find_source_map_reference")

_JS_TYPES = frozenset(
    {
        "",
        "module",
        "text/javascript",
        "application/javascript",
        "text/ecmascript",
        "application/ecmascript",
        "application/x-javascript",
        "text/jsx",
    }
)
_SOURCE_MAP_COMMENT_RE = re.compile(r"//[#@][ \t]*sourceMappingURL=[ \t]*(\S+)[ \t\r]*$", re.MULTILINE)
_SOURCE_MAP_HEADERS = ("SourceMap", "X-SourceMap")


@dataclass(slots=True)
class ScriptTag:
    """A ``<script>`` found in markup. ``src`` is None for inline scripts."""

    src: Optional[str]
    content: Optional[str] = None


def _is_javascript(type_attr: Optional[str]) -> bool:
    if type_attr is None:
        return True
    return type_attr.split(";", 1)[0].strip().lower() in _JS_TYPES


def extract_script_elements(html: str, page_url: str) -> list[ScriptTag]:
    soup = BeautifulSoup(html, "html.parser")
    tags: list[ScriptTag] = []
    for script in soup.find_all("script"):
        if not _is_javascript(script.get("type")):  # type: ignore[union-attr]
            continue
        src = script.get("src")  # type: ignore[union-attr]
        if src and str(src).strip():
            tags.append(ScriptTag(src=urljoin(page_url, str(src).strip())))
        else:
            tags.append(ScriptTag(src=None, content=script.string or script.get_text()))
    return tags


def find_source_map_reference(content: str, headers: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the raw map reference of a script, or None when it announces none."""
    if headers:
        lowered = {k.lower(): v for k, v in headers.items()}
        for name in _SOURCE_MAP_HEADERS:
            value = lowered.get(name.lower())
            if value and value.strip():
                return value.strip()
    matches = _SOURCE_MAP_COMMENT_RE.findall(content)
    return matches[-1] if matches else None

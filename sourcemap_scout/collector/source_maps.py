# sourcemap_scout/collector/source_maps.py
"""
Decoding of fetched or inlined source maps into RawSourceMap.
"""
from __future__ import annotations

import base64
import binascii
import json
from typing import Any
from urllib.parse import unquote

from sourcemap_scout.models import RawSourceMap

_XSSI_PREFIX = ")]}'"


class SourceMapError(Exception):
    """Map text could not be turned into a RawSourceMap."""


def is_data_url(url: str) -> bool:
    return url[:5].lower() == "data:"


def decode_data_url(url: str) -> str:
    """Return the text payload of a ``data:`` URL (base64 or percent-encoded)."""
    header, sep, payload = url.partition(",")
    if not sep:
        raise SourceMapError("Invalid data URL: missing ','")
    try:
        if header.lower().endswith(";base64"):
            return base64.b64decode(unquote(payload), validate=False).decode("utf-8")
        return unquote(payload)
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise SourceMapError(f"Invalid data URL: {exc}") from exc


def parse_source_map(text: str) -> RawSourceMap:
    if text.startswith(_XSSI_PREFIX):
        text = text.split("\n", 1)[1] if "\n" in text else ""
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SourceMapError(f"Invalid source map JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise SourceMapError("Unsupported source map: top level is not an object")
    if "sections" in data:
        raise SourceMapError("Unsupported source map: index maps with sections")
    sources = data.get("sources")
    if not isinstance(sources, list):
        raise SourceMapError("Unsupported source map: missing sources")

    sources_content = data.get("sourcesContent")
    if isinstance(sources_content, list):
        sources_content = [c if isinstance(c, str) else None for c in sources_content]
    else:
        sources_content = None

    names = data.get("names")
    version = data.get("version")
    return RawSourceMap(
        sources=["" if s is None else str(s) for s in sources],
        sources_content=sources_content,
        version=version if isinstance(version, int) else None,
        file=data.get("file") if isinstance(data.get("file"), str) else None,
        source_root=data.get("sourceRoot") if isinstance(data.get("sourceRoot"), str) else None,
        names=[str(n) for n in names] if isinstance(names, list) else [],
        mappings=data.get("mappings") if isinstance(data.get("mappings"), str) else "",
    )


__all__ = ["SourceMapError", "is_data_url", "decode_data_url", "parse_source_map"]

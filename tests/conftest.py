# File: tests/conftest.py
from pathlib import Path

import pytest

from sourcemap_scout.config import AuditConfig
from sourcemap_scout.logger import configure
from sourcemap_scout.models import RawSourceMap, ScriptRecord


@pytest.fixture(autouse=True)
def fresh_logging():
    """
    Rebind the project logger to the current stderr for each test,
    so handlers created inside CliRunner never outlive its streams.
    """
    configure(level="DEBUG")
    yield


@pytest.fixture()
def fast_config() -> AuditConfig:
    """
    Return an AuditConfig with short timeouts and no retries for collector tests.
    """
    return AuditConfig(timeout=2.0, scan_timeout=10.0, retry_times=0, user_agent="TestAgent/1.0")


@pytest.fixture()
def healthy_map() -> RawSourceMap:
    return RawSourceMap(version=3, sources=["a.ts"], sources_content=["code"], mappings="AAAA")


@pytest.fixture()
def make_script():
    """Factory for ScriptRecord with content of a given length."""

    def _make(url, length=None):
        return ScriptRecord(url=url, content=None if length is None else "x" * length)

    return _make


@pytest.fixture()
def snapshot_file(tmp_path) -> Path:
    """
    Write a small JSON snapshot: one healthy map, one 404 map for a large script.
    """
    path = tmp_path / "snapshot.json"
    path.write_text(
        """
{
  "ScriptElements": [
    {"src": "https://example.com/a.js", "content": "short"},
    {"src": "https://example.com/b.js", "content": "%s"},
    {"src": null, "content": "inline()"}
  ],
  "SourceMaps": [
    {
      "scriptUrl": "https://example.com/a.js",
      "sourceMapUrl": "https://example.com/a.js.map",
      "map": {"version": 3, "sources": ["a.ts"], "sourcesContent": ["code"], "mappings": "AAAA"}
    },
    {
      "scriptUrl": "https://example.com/b.js",
      "sourceMapUrl": "https://example.com/b.js.map",
      "errorMessage": "Failed fetching source map (404)"
    }
  ]
}
"""
        % ("x" * 600_000),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def passing_snapshot_file(tmp_path) -> Path:
    path = tmp_path / "passing.yaml"
    path.write_text(
        "ScriptElements:\n"
        "  - src: https://example.com/a.js\n"
        "    content: short\n"
        "SourceMaps:\n"
        "  - scriptUrl: https://example.com/a.js\n"
        "    map:\n"
        "      sources: [a.ts, b.ts]\n"
        "      sourcesContent: [code]\n",
        encoding="utf-8",
    )
    return path


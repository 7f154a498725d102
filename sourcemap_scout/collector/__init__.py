# File: sourcemap_scout/collector/__init__.py
"""sourcemap_scout.collector: сбор скриптов и source map страницы по HTTP."""

from .collector import ArtifactCollector, collect_artifacts
from .fetcher import FetchError

__all__ = ["ArtifactCollector", "collect_artifacts", "FetchError"]

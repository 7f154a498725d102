# === FILE: sourcemap_scout/collector/collector.py ===
from __future__ import annotations

import asyncio
import time
from typing import Optional, Tuple
from urllib.parse import urljoin

from aiohttp import ClientSession, ClientTimeout

from sourcemap_scout.collector.fetcher import Fetcher, FetchError
from sourcemap_scout.collector.scripts import (
    ScriptTag,
    extract_script_elements,
    find_source_map_reference,
)
from sourcemap_scout.collector.source_maps import (
    SourceMapError,
    decode_data_url,
    is_data_url,
    parse_source_map,
)
from sourcemap_scout.config import AuditConfig
from sourcemap_scout.logger import logger
from sourcemap_scout.models import Artifacts, ScriptRecord, SourceMapResolution

__all__ = ("ArtifactCollector", "collect_artifacts")


class ArtifactCollector:
    """
    Собирает ScriptElements и SourceMaps страницы по HTTP, без браузера.
    Ошибки загрузки отдельных скриптов и карт превращаются в данные.
    """

    def __init__(self, config: AuditConfig) -> None:
        self.config = config
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self._semaphore = asyncio.Semaphore(config.max_concurrency)

    async def __aenter__(self) -> ArtifactCollector:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def collect(self, page_url: str) -> Artifacts:
        if not self.fetcher:
            raise RuntimeError("Session not initialized")
        logger.info("Collecting scripts from %s", page_url)
        start = time.monotonic()

        page = await self.fetcher.fetch(page_url)
        if not page.ok:
            raise FetchError(f"Page {page_url} returned status {page.status}")

        tags = extract_script_elements(page.text or "", page.url)
        results = await asyncio.gather(*(self._collect_script(tag) for tag in tags))

        artifacts = Artifacts(
            script_elements=[script for script, _ in results],
            source_maps=[resolution for _, resolution in results if resolution is not None],
        )
        logger.info(
            "Collected %d scripts and %d source maps in %.2f s",
            len(artifacts.script_elements),
            len(artifacts.source_maps),
            time.monotonic() - start,
        )
        return artifacts

    async def _collect_script(self, tag: ScriptTag) -> Tuple[ScriptRecord, Optional[SourceMapResolution]]:
        if tag.src is None:
            return ScriptRecord(url=None, content=tag.content), None

        async with self._semaphore:
            try:
                result = await self.fetcher.fetch(tag.src)  # type: ignore[union-attr]
            except FetchError as exc:
                logger.warning("Failed %s: %s", tag.src, exc)
                return ScriptRecord(url=tag.src), None
        if not result.ok:
            logger.warning("Failed %s: status %d", tag.src, result.status)
            return ScriptRecord(url=tag.src), None

        script = ScriptRecord(url=tag.src, content=result.text)
        reference = find_source_map_reference(result.text or "", result.headers)
        if reference is None:
            return script, None
        return script, await self._resolve_map(tag.src, reference)

    async def _resolve_map(self, script_url: str, reference: str) -> SourceMapResolution:
        if is_data_url(reference):
            try:
                raw = parse_source_map(decode_data_url(reference))
            except SourceMapError as exc:
                return SourceMapResolution(script_url=script_url, error_message=str(exc))
            return SourceMapResolution(script_url=script_url, map=raw)

        map_url = urljoin(script_url, reference)
        async with self._semaphore:
            try:
                result = await self.fetcher.fetch(map_url)  # type: ignore[union-attr]
            except FetchError as exc:
                return SourceMapResolution(
                    script_url=script_url,
                    source_map_url=map_url,
                    error_message=f"Failed fetching source map: {exc}",
                )
        if not result.ok:
            return SourceMapResolution(
                script_url=script_url,
                source_map_url=map_url,
                error_message=f"Failed fetching source map ({result.status})",
            )
        try:
            raw = parse_source_map(result.text or "")
        except SourceMapError as exc:
            return SourceMapResolution(
                script_url=script_url, source_map_url=map_url, error_message=str(exc)
            )
        logger.debug("Loaded source map %s for %s", map_url, script_url)
        return SourceMapResolution(script_url=script_url, source_map_url=map_url, map=raw)


async def collect_artifacts(config: AuditConfig, page_url: str) -> Artifacts:
    """Запускает ArtifactCollector в контексте и возвращает снимок артефактов."""
    async with ArtifactCollector(config) as collector:
        return await collector.collect(page_url)

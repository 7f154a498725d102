# File: sourcemap_scout/engine.py
"""sourcemap_scout.engine: Orchestration layer для сбора артефактов и запуска аудита."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from sourcemap_scout.artifacts import load_artifacts
from sourcemap_scout.audit import Verdict, audit_source_maps
from sourcemap_scout.collector import collect_artifacts
from sourcemap_scout.config import AuditConfig
from sourcemap_scout.logger import logger
from sourcemap_scout.models import Artifacts

__all__ = ["Engine"]


class Engine:
    """Фасад для CLI и тестов: сбор артефактов и аудит."""

    def __init__(self, config: Optional[AuditConfig] = None) -> None:
        self.config = config if config is not None else AuditConfig()

    def collect(self, page_url: str) -> Artifacts:
        """Собирает снимок артефактов страницы с общим таймаутом ``scan_timeout``."""
        logger.info("Starting collection…")
        try:
            return asyncio.run(
                asyncio.wait_for(
                    collect_artifacts(self.config, page_url), timeout=self.config.scan_timeout
                )
            )
        except asyncio.TimeoutError:
            logger.error("Collection did not finish within %s seconds", self.config.scan_timeout)
            raise
        except Exception as exc:
            logger.error("Collection failed: %s", exc)
            raise

    def audit(self, artifacts: Artifacts) -> Verdict:
        return audit_source_maps(artifacts, threshold=self.config.large_script_threshold)

    def audit_snapshot(self, path: Union[str, Path]) -> Verdict:
        return self.audit(load_artifacts(path))

    def scan(self, page_url: str) -> Verdict:
        """Собирает артефакты и сразу проверяет их."""
        return self.audit(self.collect(page_url))

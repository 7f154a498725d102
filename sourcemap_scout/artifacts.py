# === FILE: sourcemap_scout/artifacts.py ===
"""
Чтение и запись снимка артефактов (``ScriptElements`` + ``SourceMaps``).

Формат файла (JSON или YAML)::

    ScriptElements:
      - src: https://example.com/app.js
        content: "..."
    SourceMaps:
      - scriptUrl: https://example.com/app.js
        sourceMapUrl: https://example.com/app.js.map
        map: {version: 3, sources: [app.ts], sourcesContent: ["..."], mappings: ""}
      - scriptUrl: https://example.com/vendor.js
        errorMessage: Failed fetching source map (404)

Файл проверяется Pydantic-моделями; аудит получает уже проверенные данные.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sourcemap_scout.config import read_mapping
from sourcemap_scout.logger import logger
from sourcemap_scout.models import Artifacts, RawSourceMap, ScriptRecord, SourceMapResolution


class ScriptElementModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    src: Optional[str] = None
    content: Optional[str] = None


class RawSourceMapModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    version: Optional[int] = None
    file: Optional[str] = None
    source_root: Optional[str] = Field(None, alias="sourceRoot")
    sources: List[str]
    sources_content: Optional[List[Optional[str]]] = Field(None, alias="sourcesContent")
    names: List[str] = Field(default_factory=list)
    mappings: str = ""


class SourceMapModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    script_url: str = Field(..., alias="scriptUrl")
    source_map_url: Optional[str] = Field(None, alias="sourceMapUrl")
    map: Optional[RawSourceMapModel] = None
    error_message: Optional[str] = Field(None, alias="errorMessage")

    @model_validator(mode="after")
    def _check_exactly_one_payload(self) -> SourceMapModel:
        if (self.map is None) == (self.error_message is None):
            raise ValueError("ровно одно из полей map / errorMessage должно быть задано")
        return self


class ArtifactSnapshot(BaseModel):
    """Схема файла снимка."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    script_elements: List[ScriptElementModel] = Field(default_factory=list, alias="ScriptElements")
    source_maps: List[SourceMapModel] = Field(default_factory=list, alias="SourceMaps")

    def to_artifacts(self) -> Artifacts:
        scripts = [ScriptRecord(url=s.src, content=s.content) for s in self.script_elements]
        maps = [
            SourceMapResolution(
                script_url=m.script_url,
                source_map_url=m.source_map_url,
                map=None if m.map is None else RawSourceMap(**m.map.model_dump()),
                error_message=m.error_message,
            )
            for m in self.source_maps
        ]
        return Artifacts(script_elements=scripts, source_maps=maps)


def load_artifacts(path: Union[str, Path]) -> Artifacts:
    """Читает снимок из YAML/JSON и возвращает Artifacts."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
    snapshot = ArtifactSnapshot.model_validate(read_mapping(path_obj))
    artifacts = snapshot.to_artifacts()
    logger.info(
        "Loaded snapshot %s: %d scripts, %d source maps",
        path_obj,
        len(artifacts.script_elements),
        len(artifacts.source_maps),
    )
    return artifacts


def _map_to_dict(raw: RawSourceMap) -> dict[str, Any]:
    data: dict[str, Any] = {
        "version": raw.version,
        "file": raw.file,
        "sourceRoot": raw.source_root,
        "sources": list(raw.sources),
        "sourcesContent": None if raw.sources_content is None else list(raw.sources_content),
        "names": list(raw.names),
        "mappings": raw.mappings,
    }
    return {k: v for k, v in data.items() if v is not None}


def artifacts_to_dict(artifacts: Artifacts) -> dict[str, Any]:
    """Сериализует Artifacts в формат файла снимка."""
    source_maps = []
    for res in artifacts.source_maps:
        entry: dict[str, Any] = {"scriptUrl": res.script_url}
        if res.source_map_url is not None:
            entry["sourceMapUrl"] = res.source_map_url
        if res.map is not None:
            entry["map"] = _map_to_dict(res.map)
        else:
            entry["errorMessage"] = res.error_message
        source_maps.append(entry)
    return {
        "ScriptElements": [
            {"src": s.url, "content": s.content} for s in artifacts.script_elements
        ],
        "SourceMaps": source_maps,
    }


def dump_artifacts(artifacts: Artifacts, output_path: Union[str, Path], *, pretty: bool = True) -> Path:
    """Сохраняет снимок в JSON по указанному пути."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(artifacts_to_dict(artifacts), f, ensure_ascii=False, indent=2 if pretty else None)
    return output


__all__ = [
    "ArtifactSnapshot",
    "load_artifacts",
    "artifacts_to_dict",
    "dump_artifacts",
]

"""Per-process cache of adapter configurations keyed by ecosystem."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from ..config import parse_adapter_config, read_document
from ..errors import ConfigError
from ..logging import get_logger
from ..models import AdapterConfig

ConfigSource = Callable[[], Any]

_CONFIG_SUFFIXES = (".json", ".yaml", ".yml")


class AdapterConfigLoader:
    """Loads each ecosystem's AdapterConfig once and remembers the outcome.

    Failed or missing configurations are cached as ``None`` so later lookups
    for the same ecosystem do not retry the failing load.
    """

    def __init__(self, sources: Mapping[str, ConfigSource] | None = None) -> None:
        self._sources: Dict[str, ConfigSource] = dict(sources or {})
        self._cache: Dict[str, Optional[AdapterConfig]] = {}
        self.logger = get_logger("stores.adapter_configs")

    @classmethod
    def from_directory(cls, directory: Path) -> "AdapterConfigLoader":
        """Register ``<ecosystem>.json|yaml|yml`` files found in ``directory``."""
        sources: Dict[str, ConfigSource] = {}
        if directory.is_dir():
            for path in sorted(directory.iterdir()):
                if path.is_file() and path.suffix in _CONFIG_SUFFIXES:
                    sources.setdefault(path.stem, _document_source(path))
        return cls(sources)

    @classmethod
    def from_mappings(cls, configs: Mapping[str, Any]) -> "AdapterConfigLoader":
        return cls({ecosystem: _constant_source(data) for ecosystem, data in configs.items()})

    async def load_config(self, ecosystem: str) -> Optional[AdapterConfig]:
        if ecosystem in self._cache:
            return self._cache[ecosystem]

        config: Optional[AdapterConfig] = None
        source = self._sources.get(ecosystem)
        if source is None:
            self.logger.debug("No adapter configuration registered for %s", ecosystem)
        else:
            try:
                config = parse_adapter_config(source())
            except (ConfigError, OSError) as exc:
                self.logger.warning(
                    "Adapter configuration for %s could not be loaded: %s", ecosystem, exc
                )
                config = None
        self._cache[ecosystem] = config
        return config

    def cached(self, ecosystem: str) -> bool:
        return ecosystem in self._cache

    def clear(self) -> None:
        self._cache.clear()


def _document_source(path: Path) -> ConfigSource:
    def _load() -> Any:
        return read_document(path)

    return _load


def _constant_source(data: Any) -> ConfigSource:
    def _load() -> Any:
        return data

    return _load


__all__ = ["AdapterConfigLoader"]

"""Pipeline orchestration: sequences the assemblers into one in-memory file map."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Dict, List

from .assemblers.adapter_files import AdapterExportManager
from .assemblers.app_config import generate_and_add_app_config
from .config import ExportSettings, load_renderer_config, load_settings
from .errors import ConfigError
from .formatting import JsonFormatter, StandardJsonFormatter
from .logging import get_logger
from .models import ExportOptions, ExportResult, FileMap, FormConfig, NetworkConfig
from .packages import PackageManager
from .sources import scan_sources
from .stores.adapter_configs import AdapterConfigLoader

PACKAGE_JSON_PATH = "package.json"

DEFAULT_BASE_PACKAGE_JSON = json.dumps(
    {
        "name": "exported-form",
        "version": "0.1.0",
        "private": True,
        "type": "module",
        "scripts": {
            "dev": "vite",
            "build": "tsc && vite build",
            "preview": "vite preview",
        },
        "dependencies": {},
        "devDependencies": {
            "typescript": "^5.4.0",
            "vite": "^5.2.0",
        },
    },
    indent=2,
)


class ExportPipeline:
    """Runs every assembler for one export request."""

    def __init__(
        self,
        package_manager: PackageManager,
        adapter_manager: AdapterExportManager,
        *,
        formatter: JsonFormatter | None = None,
        base_package_json: str = DEFAULT_BASE_PACKAGE_JSON,
    ) -> None:
        self.package_manager = package_manager
        self.adapter_manager = adapter_manager
        self.formatter = formatter or StandardJsonFormatter()
        self.base_package_json = base_package_json
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> "ExportPipeline":
        """Build a pipeline from directories named in .formexport.yml."""
        if settings.renderer_config is None:
            raise ConfigError("renderer_config must be set in .formexport.yml")
        if settings.sources_dir is None:
            raise ConfigError("sources_dir must be set in .formexport.yml")

        renderer_config = load_renderer_config(settings.renderer_config)
        config_loader = (
            AdapterConfigLoader.from_directory(settings.adapter_configs_dir)
            if settings.adapter_configs_dir is not None
            else AdapterConfigLoader()
        )
        patch_store = (
            scan_sources(settings.patches_dir, ("*.patch",))
            if settings.patches_dir is not None
            else {}
        )
        package_manager = PackageManager(
            renderer_config,
            config_loader,
            packages=settings.packages,
            versions=settings.versions,
            patch_store=patch_store,
        )
        adapter_manager = AdapterExportManager(
            scan_sources(settings.sources_dir, ("*.ts", "*.tsx")),
            renderer_package=settings.packages.renderer,
        )
        return cls(package_manager, adapter_manager)

    @classmethod
    def from_path(cls, path: Path) -> "ExportPipeline":
        return cls.from_settings(load_settings(path))

    async def export(
        self,
        form: FormConfig,
        network: NetworkConfig,
        options: ExportOptions | None = None,
        *,
        base_files: FileMap | None = None,
    ) -> ExportResult:
        options = options or ExportOptions()
        ecosystem = network.ecosystem
        self.logger.info("Exporting %s form for %s (%s)", form.function_id, network.id, options.env)

        files: FileMap = dict(base_files or {})

        adapter_files = await self.adapter_manager.get_adapter_files(ecosystem)
        added = self._add_files(files, adapter_files)
        self.logger.debug("Added %d adapter file(s) for %s", added, ecosystem)

        base_package_json = files.get(PACKAGE_JSON_PATH, self.base_package_json)
        if isinstance(base_package_json, bytes):
            base_package_json = base_package_json.decode("utf-8")
        files[PACKAGE_JSON_PATH] = await self.package_manager.update_package_json(
            base_package_json,
            form,
            ecosystem,
            form.function_id,
            options,
            files=files,
        )

        await generate_and_add_app_config(files, network, form, self.formatter)

        self.logger.info("Export assembled %d file(s)", len(files))
        return ExportResult(files=files, ecosystem=ecosystem, env=options.env)

    def run(
        self,
        form: FormConfig,
        network: NetworkConfig,
        options: ExportOptions | None = None,
        *,
        base_files: FileMap | None = None,
    ) -> ExportResult:
        """Synchronous entrypoint for callers outside an event loop."""
        return asyncio.run(self.export(form, network, options, base_files=base_files))

    async def list_ecosystems(self) -> List[str]:
        return await self.adapter_manager.get_available_ecosystems()

    def _add_files(self, files: FileMap, new_files: Dict[str, str]) -> int:
        added = 0
        for path, content in new_files.items():
            if path in files:
                self.logger.warning("Keeping existing %s; assembler output ignored", path)
                continue
            files[path] = content
            added += 1
        return added


__all__ = ["DEFAULT_BASE_PACKAGE_JSON", "ExportPipeline", "PACKAGE_JSON_PATH"]

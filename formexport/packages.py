"""Dependency merging and package.json rewriting for exported projects."""

from __future__ import annotations

import copy
import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .assemblers.patches import copy_adapter_patch_files
from .config import PackageNames
from .errors import ConfigError
from .logging import get_logger
from .models import AdapterConfig, ExportOptions, FieldConfig, FileMap, FormConfig, RendererConfig
from .sources import SourceTable
from .stores.adapter_configs import AdapterConfigLoader
from .versioning import WORKSPACE_PROTOCOL, patch_key_for, resolve_version, split_patch_key

PATCHES_DIR = "patches"

_TARBALL_VERSION = re.compile(r"-(\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?)\.tgz$")


def collect_field_types(fields: Iterable[FieldConfig]) -> List[str]:
    """Return each distinct field type once, in first-seen order, including nested fields."""
    seen: Set[str] = set()
    ordered: List[str] = []
    stack = list(reversed(list(fields)))
    while stack:
        field = stack.pop()
        if field.type not in seen:
            seen.add(field.type)
            ordered.append(field.type)
        nested: List[FieldConfig] = []
        if field.element_field_config is not None:
            nested.append(field.element_field_config)
        nested.extend(field.components)
        stack.extend(reversed(nested))
    return ordered


class PackageManager:
    """Computes the dependency set of an exported project and rewrites its package.json.

    Sources merge with last-write-wins precedence: renderer core, then field
    types, then the ecosystem adapter, then explicit export options.
    """

    def __init__(
        self,
        renderer_config: RendererConfig,
        adapter_config_loader: AdapterConfigLoader | None = None,
        *,
        packages: PackageNames | None = None,
        versions: Mapping[str, str] | None = None,
        patch_store: SourceTable | None = None,
    ) -> None:
        self.renderer_config = renderer_config
        self.adapter_config_loader = adapter_config_loader or AdapterConfigLoader()
        self.packages = packages or PackageNames()
        self.versions: Dict[str, str] = dict(versions or {})
        self.patch_store = patch_store
        self.logger = get_logger("packages")

    # ------------------------------------------------------------------
    # Dependency sets

    async def get_runtime_dependencies(
        self,
        form_config: FormConfig,
        ecosystem: str,
        options: ExportOptions | None = None,
    ) -> Dict[str, str]:
        combined: Dict[str, str] = dict(self.renderer_config.core_dependencies)
        for field_type in collect_field_types(form_config.fields):
            field_deps = self.renderer_config.field_dependencies.get(field_type)
            if field_deps is not None:
                combined.update(field_deps.runtime)

        adapter_config = await self.adapter_config_loader.load_config(ecosystem)
        if adapter_config is not None:
            combined.update(adapter_config.runtime)
            combined.update(self._ui_kit_dependencies(adapter_config, form_config))

        adapter_package = self.packages.adapters.get(ecosystem)
        if adapter_package:
            combined[adapter_package] = WORKSPACE_PROTOCOL
            combined[self.packages.types] = WORKSPACE_PROTOCOL

        if options is not None:
            combined.update(options.dependencies)
        return combined

    async def get_dev_dependencies(
        self, form_config: FormConfig, ecosystem: str
    ) -> Dict[str, str]:
        combined: Dict[str, str] = {}
        for field_type in collect_field_types(form_config.fields):
            field_deps = self.renderer_config.field_dependencies.get(field_type)
            if field_deps is not None:
                combined.update(field_deps.dev)

        adapter_config = await self.adapter_config_loader.load_config(ecosystem)
        if adapter_config is not None:
            combined.update(adapter_config.dev)
        return combined

    async def get_patched_dependencies(self, ecosystem: str) -> Dict[str, str]:
        """Return ``{"pkg@version": "patches/<file>"}`` for the ecosystem's declared patches."""
        adapter_config = await self.adapter_config_loader.load_config(ecosystem)
        if adapter_config is None:
            return {}
        return {
            key: f"{PATCHES_DIR}/{patch_file}"
            for key, patch_file in adapter_config.patched_dependencies.items()
        }

    # ------------------------------------------------------------------
    # package.json

    async def update_package_json(
        self,
        base_json_text: str,
        form_config: FormConfig,
        ecosystem: str,
        function_id: str,
        options: ExportOptions | None = None,
        files: FileMap | None = None,
    ) -> str:
        """Return ``base_json_text`` rewritten for this form, ecosystem and environment.

        When ``files`` is given and the ecosystem ships patches, the patch files
        are copied into it as well.
        """
        options = options or ExportOptions()
        parsed = json.loads(base_json_text)
        if not isinstance(parsed, dict):
            raise ConfigError("Base package.json must contain a JSON object")
        package_json: Dict[str, Any] = copy.deepcopy(parsed)

        runtime = await self.get_runtime_dependencies(form_config, ecosystem)
        dev = await self.get_dev_dependencies(form_config, ecosystem)

        dependencies = {**_as_dict(package_json.get("dependencies")), **runtime}
        dependencies.update(options.dependencies)
        dev_dependencies = {**_as_dict(package_json.get("devDependencies")), **dev}

        pinned = set(options.dependencies)
        package_json["dependencies"] = self._apply_versioning(dependencies, options, pinned)
        versioned_dev = self._apply_versioning(dev_dependencies, options, pinned)
        if versioned_dev:
            package_json["devDependencies"] = versioned_dev
        else:
            package_json.pop("devDependencies", None)

        package_json["name"] = options.project_name or f"{function_id.lower()}-form"
        package_json["description"] = options.description or f"Transaction form for {function_id}"
        if options.author:
            package_json["author"] = options.author
        if options.license:
            package_json["license"] = options.license

        self._add_helper_scripts(package_json)

        adapter_config = await self.adapter_config_loader.load_config(ecosystem)
        await self._apply_pnpm_settings(package_json, adapter_config, ecosystem, options, files)

        return json.dumps(package_json, indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Internal helpers

    def _ui_kit_dependencies(
        self, adapter_config: AdapterConfig, form_config: FormConfig
    ) -> Dict[str, str]:
        kit = form_config.ui_kit_config
        if kit is None or not kit.kit_name:
            return {}
        return dict(adapter_config.ui_kits.get(kit.kit_name, {}))

    def _apply_versioning(
        self,
        dependencies: Mapping[str, str],
        options: ExportOptions,
        pinned: Set[str],
    ) -> Dict[str, str]:
        self_published = set(self.packages.self_published())
        updated: Dict[str, str] = {}
        for name, version in dependencies.items():
            if name in self_published and name not in pinned:
                updated[name] = resolve_version(
                    name,
                    self._published_version_lookup(version),
                    options.env,
                    options.packed_tarball_map,
                )
            else:
                updated[name] = version
        return updated

    def _published_version_lookup(self, declared: str):
        def _lookup(name: str) -> Optional[str]:
            managed = self.versions.get(name)
            if managed:
                return managed
            if declared and not declared.startswith(("workspace:", "file:")):
                return declared
            return None

        return _lookup

    def _add_helper_scripts(self, package_json: Dict[str, Any]) -> None:
        scripts = dict(_as_dict(package_json.get("scripts")))
        renderer = self.packages.renderer
        script_suffix = renderer.rsplit("/", 1)[-1].split("-")[-1]
        scripts[f"update-{script_suffix}"] = f"npm update {renderer}"
        scripts["check-deps"] = "npm outdated"
        package_json["scripts"] = scripts

    async def _apply_pnpm_settings(
        self,
        package_json: Dict[str, Any],
        adapter_config: Optional[AdapterConfig],
        ecosystem: str,
        options: ExportOptions,
        files: FileMap | None,
    ) -> None:
        pnpm = dict(_as_dict(package_json.get("pnpm")))
        overrides = dict(_as_dict(pnpm.get("overrides")))

        if adapter_config is not None:
            overrides.update(adapter_config.overrides)

        if options.env == "packed":
            for name, tarball in options.packed_tarball_map.items():
                overrides[name] = f"file:{tarball}"

        if adapter_config is not None and adapter_config.patched_dependencies and options.env != "local":
            declared = dict(adapter_config.patched_dependencies)
            if files is not None and self.patch_store is not None:
                written = await copy_adapter_patch_files(
                    files, ecosystem, self.adapter_config_loader, self.patch_store
                )
                available = {path.split("/", 1)[1] for path in written}
                available.update(
                    patch for patch in declared.values() if f"{PATCHES_DIR}/{patch}" in files
                )
                declared = {key: patch for key, patch in declared.items() if patch in available}
            patched = dict(_as_dict(pnpm.get("patchedDependencies")))
            installed = {
                **_as_dict(package_json.get("dependencies")),
                **_as_dict(package_json.get("devDependencies")),
            }
            for key, patch_file in declared.items():
                patch_key = self._patch_key(key, options)
                if options.env == "packed":
                    name, version = split_patch_key(patch_key)
                    if name not in installed:
                        self.logger.debug("Skipping patch %s; %s is not a dependency", patch_key, name)
                        continue
                    # pnpm must install exactly the version the patch key names.
                    if version and not str(overrides.get(name, "")).startswith("file:"):
                        overrides[name] = version
                patched[patch_key] = f"{PATCHES_DIR}/{patch_file}"
            if patched:
                pnpm["patchedDependencies"] = patched

        if overrides:
            pnpm["overrides"] = overrides
        if pnpm:
            package_json["pnpm"] = pnpm

    def _patch_key(self, key: str, options: ExportOptions) -> str:
        if options.env != "packed":
            return key
        name, version = split_patch_key(key)
        tarball = options.packed_tarball_map.get(name)
        if not tarball:
            return key
        match = _TARBALL_VERSION.search(tarball)
        if not match or match.group(1) == version:
            return key
        self.logger.debug("Rewriting patch key %s to packed version %s", key, match.group(1))
        return patch_key_for(name, match.group(1))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


__all__ = ["PATCHES_DIR", "PackageManager", "collect_field_types"]

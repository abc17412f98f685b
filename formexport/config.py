"""Configuration loading for formexport (.formexport.yml and config sources)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigError
from .models import (
    ENVIRONMENTS,
    AdapterConfig,
    FieldConfig,
    FieldDependencies,
    FormConfig,
    NetworkConfig,
    RendererConfig,
    UiKitConfig,
)

CONFIG_FILENAME = ".formexport.yml"

DEFAULT_RENDERER_PACKAGE = "@openzeppelin/ui-renderer"
DEFAULT_TYPES_PACKAGE = "@openzeppelin/ui-types"
DEFAULT_ADAPTER_PACKAGES: Dict[str, str] = {
    "evm": "@openzeppelin/ui-builder-adapter-evm",
    "solana": "@openzeppelin/ui-builder-adapter-solana",
    "stellar": "@openzeppelin/ui-builder-adapter-stellar",
    "midnight": "@openzeppelin/ui-builder-adapter-midnight",
    "polkadot": "@openzeppelin/ui-builder-adapter-polkadot",
}
DEFAULT_VERSIONS: Dict[str, str] = {
    "@openzeppelin/ui-builder-adapter-evm": "0.2.0",
    "@openzeppelin/ui-builder-adapter-solana": "0.0.3",
    "@openzeppelin/ui-builder-adapter-stellar": "0.0.3",
    "@openzeppelin/ui-builder-adapter-midnight": "0.0.4",
    "@openzeppelin/ui-builder-adapter-polkadot": "0.0.1",
    "@openzeppelin/ui-renderer": "0.1.4",
    "@openzeppelin/ui-types": "0.2.0",
}


@dataclass
class PackageNames:
    """Names of the packages this project publishes itself."""

    renderer: str = DEFAULT_RENDERER_PACKAGE
    types: str = DEFAULT_TYPES_PACKAGE
    adapters: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ADAPTER_PACKAGES))

    def self_published(self) -> List[str]:
        return [self.renderer, self.types, *self.adapters.values()]


@dataclass
class ExportSettings:
    """High-level settings defined in .formexport.yml."""

    root: Path
    env: str = "production"
    renderer_config: Optional[Path] = None
    adapter_configs_dir: Optional[Path] = None
    sources_dir: Optional[Path] = None
    patches_dir: Optional[Path] = None
    packages: PackageNames = field(default_factory=PackageNames)
    versions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_VERSIONS))


def load_settings(config_path: Path) -> ExportSettings:
    """Load export settings from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ExportSettings(root=root)

    data = read_document(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    env = _as_str(data.get("env")) or "production"
    if env not in ENVIRONMENTS:
        raise ConfigError(f"Unknown export environment '{env}' in {CONFIG_FILENAME}")

    packages = PackageNames()
    packages_data = _as_dict(data.get("packages"))
    if packages_data:
        packages.renderer = _as_str(packages_data.get("renderer")) or packages.renderer
        packages.types = _as_str(packages_data.get("types")) or packages.types
        adapters = _as_str_map(packages_data.get("adapters"))
        if adapters:
            packages.adapters = adapters

    versions = dict(DEFAULT_VERSIONS)
    versions.update(_as_str_map(data.get("versions")))

    return ExportSettings(
        root=root,
        env=env,
        renderer_config=_as_path(root, data.get("renderer_config")),
        adapter_configs_dir=_as_path(root, data.get("adapter_configs_dir")),
        sources_dir=_as_path(root, data.get("sources_dir")),
        patches_dir=_as_path(root, data.get("patches_dir")),
        packages=packages,
        versions=versions,
    )


def read_document(path: Path) -> Any:
    """Parse a YAML or JSON document; JSON is valid YAML so one parser covers both."""
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def parse_renderer_config(data: Any) -> RendererConfig:
    """Build a RendererConfig, rejecting documents missing the required maps."""
    if not isinstance(data, dict):
        raise ConfigError("Renderer configuration must be a mapping")
    core = data.get("coreDependencies")
    fields = data.get("fieldDependencies")
    if not isinstance(core, dict) or not isinstance(fields, dict):
        raise ConfigError(
            "Invalid renderer configuration: coreDependencies and fieldDependencies are required"
        )
    field_dependencies: Dict[str, FieldDependencies] = {}
    for field_type, raw in fields.items():
        entry = _as_dict(raw)
        field_dependencies[str(field_type)] = FieldDependencies(
            runtime=_as_str_map(entry.get("runtimeDependencies")),
            dev=_as_str_map(entry.get("devDependencies")),
        )
    return RendererConfig(
        core_dependencies=_as_str_map(core),
        field_dependencies=field_dependencies,
    )


def load_renderer_config(path: Path) -> RendererConfig:
    return parse_renderer_config(read_document(path))


def parse_adapter_config(data: Any) -> AdapterConfig:
    """Build an AdapterConfig; raises ConfigError when the shape is wrong."""
    if not isinstance(data, dict):
        raise ConfigError("Adapter configuration must be a mapping")
    dependencies = data.get("dependencies")
    if not isinstance(dependencies, dict) or not isinstance(dependencies.get("runtime"), dict):
        raise ConfigError("Adapter configuration requires dependencies.runtime")

    ui_kits: Dict[str, Dict[str, str]] = {}
    for kit_name, raw in _as_dict(data.get("uiKits")).items():
        kit_deps = _as_dict(_as_dict(raw).get("dependencies"))
        ui_kits[str(kit_name)] = _as_str_map(kit_deps.get("runtime"))

    return AdapterConfig(
        runtime=_as_str_map(dependencies.get("runtime")),
        dev=_as_str_map(dependencies.get("dev")),
        overrides=_as_str_map(data.get("overrides")),
        patched_dependencies=_as_str_map(data.get("patchedDependencies")),
        ui_kits=ui_kits,
    )


def parse_field_config(data: Any) -> FieldConfig:
    entry = _as_dict(data)
    field_type = _as_str(entry.get("type"))
    if not field_type:
        raise ConfigError("Every form field requires a type")
    element = entry.get("elementFieldConfig")
    components = entry.get("components")
    return FieldConfig(
        type=field_type,
        id=_as_str(entry.get("id")) or "",
        name=_as_str(entry.get("name")) or "",
        element_field_config=parse_field_config(element) if isinstance(element, dict) else None,
        components=[parse_field_config(item) for item in components]
        if isinstance(components, list)
        else [],
    )


def parse_form_config(data: Any) -> FormConfig:
    """Build a FormConfig from the builder's camelCase JSON."""
    if not isinstance(data, dict):
        raise ConfigError("Form configuration must be a mapping")
    raw_fields = data.get("fields")
    if not isinstance(raw_fields, list):
        raise ConfigError("Form configuration requires a list of fields")

    ui_kit = None
    kit_data = _as_dict(data.get("uiKitConfig"))
    if kit_data:
        ui_kit = UiKitConfig(
            kit_name=_as_str(kit_data.get("kitName")),
            kit_config=_as_dict(kit_data.get("kitConfig")),
        )

    return FormConfig(
        fields=[parse_field_config(item) for item in raw_fields],
        function_id=_as_str(data.get("functionId")) or "",
        contract_address=_as_str(data.get("contractAddress")) or "",
        ui_kit_config=ui_kit,
    )


def parse_network_config(data: Any) -> NetworkConfig:
    entry = _as_dict(data)
    network_id = _as_str(entry.get("id"))
    ecosystem = _as_str(entry.get("ecosystem"))
    if not network_id or not ecosystem:
        raise ConfigError("Network configuration requires id and ecosystem")
    return NetworkConfig(
        id=network_id,
        name=_as_str(entry.get("name")) or network_id,
        ecosystem=ecosystem,
        primary_explorer_api_identifier=_as_str(entry.get("primaryExplorerApiIdentifier")),
        rpc_url=_as_str(entry.get("rpcUrl")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(key): str(item) for key, item in value.items() if _as_str(item) is not None}


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    return root / text if text else None

"""Core data models shared across formexport components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

FileContent = Union[str, bytes]
FileMap = Dict[str, FileContent]

ENVIRONMENTS = ("local", "packed", "production")


@dataclass(frozen=True)
class FieldDependencies:
    """Runtime and development packages required by one form field type."""

    runtime: Dict[str, str] = field(default_factory=dict)
    dev: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RendererConfig:
    """Dependencies of the form renderer, globally and per field type."""

    core_dependencies: Dict[str, str]
    field_dependencies: Dict[str, FieldDependencies] = field(default_factory=dict)


@dataclass(frozen=True)
class AdapterConfig:
    """Dependency metadata declared by one ecosystem adapter."""

    runtime: Dict[str, str] = field(default_factory=dict)
    dev: Dict[str, str] = field(default_factory=dict)
    overrides: Dict[str, str] = field(default_factory=dict)
    patched_dependencies: Dict[str, str] = field(default_factory=dict)
    ui_kits: Dict[str, Dict[str, str]] = field(default_factory=dict)


@dataclass
class FieldConfig:
    """A single form field, possibly wrapping nested element or component fields."""

    type: str
    id: str = ""
    name: str = ""
    element_field_config: Optional["FieldConfig"] = None
    components: List["FieldConfig"] = field(default_factory=list)


@dataclass
class UiKitConfig:
    """Wallet UI kit chosen in the builder plus its saved options."""

    kit_name: Optional[str] = None
    kit_config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FormConfig:
    """Finished form definition handed to the export pipeline."""

    fields: List[FieldConfig]
    function_id: str = ""
    contract_address: str = ""
    ui_kit_config: Optional[UiKitConfig] = None


@dataclass
class NetworkConfig:
    """Network the form was configured for."""

    id: str
    name: str
    ecosystem: str
    primary_explorer_api_identifier: Optional[str] = None
    rpc_url: Optional[str] = None


@dataclass
class ExportOptions:
    """Per-invocation export settings."""

    env: str = "production"
    project_name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    license: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    packed_tarball_map: Dict[str, str] = field(default_factory=dict)


@dataclass
class ExportResult:
    """Files produced by one pipeline run."""

    files: FileMap
    ecosystem: str
    env: str

"""Export assembly pipeline for contract interaction forms."""

from .errors import (
    ConfigError,
    ExportError,
    MissingSourceError,
    UnsupportedEcosystemError,
    VersionResolutionError,
)
from .models import ExportOptions, FieldConfig, FormConfig, NetworkConfig, UiKitConfig
from .orchestrator import ExportPipeline
from .packages import PackageManager
from .versioning import resolve_version

__all__ = [
    "ConfigError",
    "ExportError",
    "ExportOptions",
    "ExportPipeline",
    "FieldConfig",
    "FormConfig",
    "MissingSourceError",
    "NetworkConfig",
    "PackageManager",
    "UiKitConfig",
    "UnsupportedEcosystemError",
    "VersionResolutionError",
    "resolve_version",
]

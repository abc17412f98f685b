"""File assemblers contributing entries to an export's file map."""

from .adapter_files import AdapterExportManager, adapter_class_name, build_registry, extract_block
from .app_config import (
    APP_CONFIG_EXAMPLE_PATH,
    APP_CONFIG_PATH,
    AppConfigFiles,
    generate_and_add_app_config,
    generate_app_config,
)
from .patches import copy_adapter_patch_files

__all__ = [
    "APP_CONFIG_EXAMPLE_PATH",
    "APP_CONFIG_PATH",
    "AdapterExportManager",
    "AppConfigFiles",
    "adapter_class_name",
    "build_registry",
    "copy_adapter_patch_files",
    "extract_block",
    "generate_and_add_app_config",
    "generate_app_config",
]

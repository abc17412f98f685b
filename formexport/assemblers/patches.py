"""Copies third-party source patches declared by an adapter into the export."""

from __future__ import annotations

from typing import List

from ..logging import get_logger
from ..models import FileMap
from ..sources import SourceTable, find_by_suffix
from ..stores.adapter_configs import AdapterConfigLoader

logger = get_logger("assemblers.patches")


async def copy_adapter_patch_files(
    files: FileMap,
    ecosystem: str,
    config_loader: AdapterConfigLoader,
    patch_store: SourceTable,
) -> List[str]:
    """Add ``patches/<name>`` entries for every patch the ecosystem declares.

    Existing entries in ``files`` are never replaced. A patch missing from
    ``patch_store`` is logged and skipped. Returns the paths written.
    """
    adapter_config = await config_loader.load_config(ecosystem)
    if adapter_config is None or not adapter_config.patched_dependencies:
        return []

    written: List[str] = []
    for dependency_key, patch_file in adapter_config.patched_dependencies.items():
        destination = f"patches/{patch_file}"
        if destination in files:
            logger.debug("Patch %s already present; leaving it untouched", destination)
            continue
        source_path = find_by_suffix(patch_store, patch_file)
        if source_path is None:
            logger.warning(
                "Patch file %s for %s (%s) not found; skipping",
                patch_file,
                dependency_key,
                ecosystem,
            )
            continue
        files[destination] = patch_store[source_path]()
        written.append(destination)

    if written:
        logger.info("Copied %d patch file(s) for %s", len(written), ecosystem)
    return written


__all__ = ["copy_adapter_patch_files"]

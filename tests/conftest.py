from __future__ import annotations

import logging

import pytest

from formexport.config import PackageNames
from formexport.packages import PackageManager
from formexport.stores import AdapterConfigLoader
from tests._fixtures.export_sources import (
    ADAPTER_CONFIGS,
    patch_sources,
    renderer_config,
)

PUBLISHED_VERSIONS = {
    "@openzeppelin/ui-builder-adapter-evm": "0.2.0",
    "@openzeppelin/ui-builder-adapter-midnight": "0.0.4",
    "@openzeppelin/ui-builder-adapter-solana": "0.0.3",
    "@openzeppelin/ui-builder-adapter-stellar": "0.0.3",
    "@openzeppelin/ui-renderer": "0.1.4",
    "@openzeppelin/ui-types": "0.2.0",
}


@pytest.fixture
def config_loader() -> AdapterConfigLoader:
    """Adapter config loader seeded with evm, solana and midnight configs."""
    return AdapterConfigLoader.from_mappings(ADAPTER_CONFIGS)


@pytest.fixture
def package_manager(config_loader: AdapterConfigLoader) -> PackageManager:
    return PackageManager(
        renderer_config(),
        config_loader,
        packages=PackageNames(),
        versions=PUBLISHED_VERSIONS,
        patch_store=patch_sources(),
    )


@pytest.fixture(autouse=True)
def _reset_formexport_logger():
    """Let records reach caplog even after a CLI test configured logging."""
    logger = logging.getLogger("formexport")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

"""Versioning strategy for packages this project publishes itself."""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Union

from .errors import VersionResolutionError
from .models import ENVIRONMENTS

WORKSPACE_PROTOCOL = "workspace:*"

PublishedVersions = Union[Mapping[str, str], Callable[[str], Optional[str]]]


def resolve_version(
    package_name: str,
    published_version_of: PublishedVersions,
    env: str,
    packed_tarball_map: Mapping[str, str] | None = None,
) -> str:
    """Return the dependency specifier for ``package_name`` in ``env``.

    ``local`` links the monorepo sibling, ``packed`` points at a tarball built
    by ``pnpm pack`` and ``production`` uses a caret range of the released
    version. A package absent from ``packed_tarball_map`` in ``packed`` mode
    falls back to its production range.
    """
    if env not in ENVIRONMENTS:
        raise ValueError(f"Unknown export environment: {env}")

    if env == "local":
        return WORKSPACE_PROTOCOL

    if env == "packed" and packed_tarball_map and package_name in packed_tarball_map:
        return f"file:{packed_tarball_map[package_name]}"

    version = _lookup(published_version_of, package_name)
    if not version:
        raise VersionResolutionError(f"No published version known for {package_name}")
    if version.startswith(("^", "~", "workspace:", "file:")):
        return version
    return f"^{version}"


def patch_key_for(package_name: str, version: str) -> str:
    """Build the ``name@version`` key pnpm uses in patchedDependencies."""
    return f"{package_name}@{version}"


def split_patch_key(key: str) -> tuple[str, str]:
    """Split ``@scope/pkg@1.2.3`` into ``("@scope/pkg", "1.2.3")``."""
    index = key.rfind("@")
    if index <= 0:
        return key, ""
    return key[:index], key[index + 1 :]


def _lookup(published_version_of: PublishedVersions, package_name: str) -> Optional[str]:
    if callable(published_version_of):
        return published_version_of(package_name)
    return published_version_of.get(package_name)


__all__ = [
    "WORKSPACE_PROTOCOL",
    "patch_key_for",
    "resolve_version",
    "split_patch_key",
]

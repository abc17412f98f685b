"""Tests for formexport.versioning."""

from __future__ import annotations

import pytest

from formexport.errors import VersionResolutionError
from formexport.versioning import resolve_version, split_patch_key

VERSIONS = {"@openzeppelin/ui-renderer": "0.1.4", "@openzeppelin/ui-types": "^0.2.0"}
TARBALLS = {"@openzeppelin/ui-renderer": "/tmp/packs/openzeppelin-ui-renderer-0.1.4.tgz"}


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ("local", "workspace:*"),
        ("packed", "file:/tmp/packs/openzeppelin-ui-renderer-0.1.4.tgz"),
        ("production", "^0.1.4"),
    ],
)
def test_resolve_version_per_environment(env: str, expected: str) -> None:
    assert resolve_version("@openzeppelin/ui-renderer", VERSIONS, env, TARBALLS) == expected


def test_resolve_version_is_pure() -> None:
    for env in ("local", "packed", "production"):
        first = resolve_version("@openzeppelin/ui-renderer", VERSIONS, env, TARBALLS)
        second = resolve_version("@openzeppelin/ui-renderer", VERSIONS, env, TARBALLS)
        assert first == second


def test_packed_without_tarball_falls_back_to_production_range() -> None:
    assert resolve_version("@openzeppelin/ui-types", VERSIONS, "packed", TARBALLS) == "^0.2.0"


def test_resolve_version_accepts_callable_lookup() -> None:
    assert resolve_version("pkg", lambda name: "1.2.3", "production") == "^1.2.3"


def test_resolve_version_rejects_unknown_environment() -> None:
    with pytest.raises(ValueError):
        resolve_version("@openzeppelin/ui-renderer", VERSIONS, "staging")


def test_resolve_version_requires_published_version_in_production() -> None:
    with pytest.raises(VersionResolutionError):
        resolve_version("@openzeppelin/unknown", VERSIONS, "production")


def test_split_patch_key_handles_scoped_names() -> None:
    assert split_patch_key("@midnight-ntwrk/compact-runtime@0.9.0") == (
        "@midnight-ntwrk/compact-runtime",
        "0.9.0",
    )
    assert split_patch_key("left-pad@1.3.0") == ("left-pad", "1.3.0")

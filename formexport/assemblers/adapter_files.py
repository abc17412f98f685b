"""Selects and rewrites the adapter source one ecosystem needs in an exported project."""

from __future__ import annotations

import asyncio
import re
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import DEFAULT_RENDERER_PACKAGE
from ..errors import MissingSourceError, UnsupportedEcosystemError
from ..logging import get_logger
from ..sources import SourceTable

AdapterRegistry = Dict[str, List[str]]

SCHEMA_SOURCE = "types/contracts/schema.ts"
UTILS_SOURCE = "utils/index.ts"
ADAPTERS_INDEX_SOURCE = "adapters/index.ts"
ADAPTER_INTERFACE_HEADER = "export interface ContractAdapter"

EXPORT_SCHEMA_PATH = "src/types/ContractSchema.ts"
EXPORT_UTILS_PATH = "src/utils/index.ts"
EXPORT_INDEX_PATH = "src/adapters/index.ts"

_ADAPTER_PATH = re.compile(r"(?:^|/)adapters/([^/]+)/adapter\.ts$")
_ADAPTER_RELATIVE = re.compile(r"(?:^|/)adapters/([^/]+/.+)$")
_SIBLING_FILES = ("types.ts", "utils.ts")
_IMPORT_STATEMENT = re.compile(
    r"^import\s[^;]*?from\s+(['\"])([^'\"]+)\1;?[ \t]*$", re.MULTILINE | re.DOTALL
)
_IMPORT_NAMES = re.compile(r"\{([^}]*)\}")

logger = get_logger("assemblers.adapter_files")


def build_registry(paths: Iterable[str]) -> AdapterRegistry:
    """Map each ecosystem to its adapter file plus any sibling types/utils files."""
    available = set(paths)
    registry: AdapterRegistry = {}
    for path in sorted(available):
        match = _ADAPTER_PATH.search(path)
        if not match:
            continue
        ecosystem = match.group(1)
        entries = registry.setdefault(ecosystem, [])
        entries.append(path)
        base = path[: -len("adapter.ts")]
        for sibling in _SIBLING_FILES:
            candidate = f"{base}{sibling}"
            if candidate in available:
                entries.append(candidate)
    return registry


def adapter_class_name(ecosystem: str) -> str:
    """PascalCase the ecosystem id and append ``Adapter`` (``stellar`` -> ``StellarAdapter``)."""
    parts = [part for part in re.split(r"[^0-9A-Za-z]+", ecosystem) if part]
    return "".join(part[0].upper() + part[1:] for part in parts) + "Adapter"


def extract_block(source: str, header: str) -> Optional[str]:
    """Return the declaration starting at ``header`` through its matching closing brace.

    The scan tracks brace depth and ignores braces inside string literals and
    comments, so nested object and generic types are kept intact.
    """
    match = _declaration_pattern(header).search(source)
    if match is None:
        return None
    start = match.start(1)
    index = _find_body_brace(source, match.end())
    if index < 0:
        return None

    depth = 0
    length = len(source)
    while index < length:
        char = source[index]
        if char in "'\"`":
            index = _skip_string(source, index)
            continue
        if source.startswith("//", index):
            newline = source.find("\n", index)
            index = length if newline < 0 else newline
            continue
        if source.startswith("/*", index):
            close = source.find("*/", index + 2)
            index = length if close < 0 else close + 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return source[start : index + 1]
        index += 1
    return None


def _declaration_pattern(header: str) -> "re.Pattern[str]":
    # Line-anchored with a trailing word boundary; `ContractAdapterConfig` does not match.
    words = [re.escape(word) for word in header.split()]
    return re.compile(r"^[ \t]*(" + r"\s+".join(words) + r")\b", re.MULTILINE)


def _find_body_brace(source: str, index: int) -> int:
    # Braces inside generic parameters (``<T extends { a: number }>``) are not the body.
    angle = 0
    while index < len(source):
        char = source[index]
        if char == "<":
            angle += 1
        elif char == ">" and angle > 0 and source[index - 1] != "=":
            angle -= 1
        elif char == "{" and angle == 0:
            return index
        index += 1
    return -1


def _skip_string(source: str, index: int) -> int:
    quote = source[index]
    index += 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    return index


class AdapterExportManager:
    """Assembles the adapter files for one ecosystem from an in-memory source table."""

    def __init__(
        self,
        sources: SourceTable,
        registry: AdapterRegistry | None = None,
        *,
        renderer_package: str = DEFAULT_RENDERER_PACKAGE,
        schema_source: str = SCHEMA_SOURCE,
        utils_source: str = UTILS_SOURCE,
        index_source: str = ADAPTERS_INDEX_SOURCE,
        interface_header: str = ADAPTER_INTERFACE_HEADER,
    ) -> None:
        self.sources = sources
        self.renderer_package = renderer_package
        self.schema_source = schema_source
        self.utils_source = utils_source
        self.index_source = index_source
        self.interface_header = interface_header
        self._registry: Optional[AdapterRegistry] = (
            {key: list(value) for key, value in registry.items()} if registry is not None else None
        )
        self._registry_task: Optional[asyncio.Future[AdapterRegistry]] = None

    async def ensure_registry(self) -> AdapterRegistry:
        """Build the registry once; concurrent first callers share one in-flight build."""
        if self._registry is not None:
            return self._registry
        if self._registry_task is None:
            self._registry_task = asyncio.ensure_future(self._build_registry())
        try:
            return await self._registry_task
        except Exception:
            self._registry_task = None
            raise

    async def _build_registry(self) -> AdapterRegistry:
        # Yield once so callers arriving in the same tick attach to this build.
        await asyncio.sleep(0)
        registry = build_registry(self.sources.keys())
        if not registry:
            logger.error(
                "No adapter sources discovered; expected paths like 'adapters/<ecosystem>/adapter.ts'"
            )
        else:
            logger.debug("Registered adapters for: %s", ", ".join(sorted(registry)))
        self._registry = registry
        return registry

    async def get_available_ecosystems(self) -> List[str]:
        return sorted(await self.ensure_registry())

    async def get_adapter_files(self, ecosystem: str) -> Dict[str, str]:
        """Return export paths mapped to contents for ``ecosystem``.

        Output depends only on the source table and registry, so repeated calls
        produce identical maps.
        """
        registry = await self.ensure_registry()
        if ecosystem not in registry:
            raise UnsupportedEcosystemError(ecosystem, sorted(registry))

        files: Dict[str, str] = {
            EXPORT_SCHEMA_PATH: self._read_required(self.schema_source),
            EXPORT_UTILS_PATH: self._read_required(self.utils_source),
        }
        for path in registry[ecosystem]:
            files[self._export_path(path)] = self._read_required(path)
        files[EXPORT_INDEX_PATH] = self.create_adapter_index(ecosystem)
        return files

    def create_adapter_index(self, ecosystem: str) -> str:
        """Build an index exposing only the shared interface and ``ecosystem``'s adapter."""
        class_name = adapter_class_name(ecosystem)
        canonical = self._read_optional(self.index_source)

        renderer_imports: List[str] = []
        schema_names: List[str] = []
        interface_block: Optional[str] = None
        if canonical is not None:
            renderer_imports, schema_names = self._classify_imports(canonical)
            interface_block = extract_block(canonical, self.interface_header)
            if interface_block is None:
                logger.warning(
                    "Adapter interface '%s' not found in %s", self.interface_header, self.index_source
                )
        else:
            logger.warning("Canonical adapter index %s not available", self.index_source)

        if not schema_names:
            schema_names = ["ContractSchema"]

        lines = [f"// This file is auto-generated - only the {class_name} is included"]
        lines.extend(renderer_imports)
        lines.append(
            f"import type {{ {', '.join(schema_names)} }} from '../types/ContractSchema';"
        )
        lines.append(f"import {{ {class_name} }} from './{ecosystem}/adapter';")
        lines.append("")
        if interface_block is not None:
            lines.append(interface_block)
            lines.append("")
        lines.append(f"export {{ {class_name} }};")
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------
    # Internal helpers

    def _classify_imports(self, source: str) -> Tuple[List[str], List[str]]:
        renderer_imports: List[str] = []
        schema_names: List[str] = []
        for match in _IMPORT_STATEMENT.finditer(source):
            statement, module = match.group(0).strip(), match.group(2)
            if module == self.renderer_package or module.startswith(f"{self.renderer_package}/"):
                renderer_imports.append(statement)
            elif module.endswith(("ContractSchema", "contracts/schema", "schema")):
                for name in _import_names(statement):
                    if name not in schema_names:
                        schema_names.append(name)
        return renderer_imports, schema_names

    def _export_path(self, path: str) -> str:
        match = _ADAPTER_RELATIVE.search(path)
        if match:
            return f"src/adapters/{match.group(1)}"
        return f"src/{path.rsplit('/', 1)[-1]}"

    def _read_required(self, path: str) -> str:
        loader = self.sources.get(path)
        if loader is None:
            raise MissingSourceError(path)
        return loader()

    def _read_optional(self, path: str) -> Optional[str]:
        loader = self.sources.get(path)
        return loader() if loader is not None else None


def _import_names(statement: str) -> List[str]:
    match = _IMPORT_NAMES.search(statement)
    if not match:
        return []
    names: List[str] = []
    for raw in match.group(1).split(","):
        name = raw.strip()
        if name.startswith("type "):
            name = name[len("type ") :].strip()
        if name:
            names.append(name)
    return names


__all__ = [
    "AdapterExportManager",
    "AdapterRegistry",
    "adapter_class_name",
    "build_registry",
    "extract_block",
]

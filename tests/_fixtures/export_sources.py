"""Sample adapter sources and configurations shared by export tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from formexport.config import parse_renderer_config
from formexport.models import FieldConfig, FormConfig, NetworkConfig, RendererConfig, UiKitConfig
from formexport.sources import Loader, static_sources

SCHEMA_TS = """export interface ContractSchema {
  name: string;
  functions: ContractFunction[];
}

export interface ContractFunction {
  id: string;
  inputs: { name: string; type: string }[];
}
"""

UTILS_TS = """export function cn(...classes: string[]): string {
  return classes.filter(Boolean).join(' ');
}
"""

ADAPTERS_INDEX_TS = """import type { ContractSchema, ContractFunction } from '../types/contracts/schema';
import type { FieldType, FormFieldType } from '@openzeppelin/ui-renderer';
import { EvmAdapter } from './evm/adapter';
import { SolanaAdapter } from './solana/adapter';
import { MidnightAdapter } from './midnight/adapter';

export interface ContractAdapter {
  loadContract(source: string): Promise<ContractSchema>;
  mapParameterTypeToFieldType(parameterType: string): FieldType;
  generateDefaultField<T extends FieldType = FieldType>(
    parameter: { name: string; type: string; components?: { name: string }[] }
  ): FormFieldType<T>;
  formatTransactionData(fn: ContractFunction, values: Record<string, unknown>): unknown;
  getExplorerUrl(address: string): string | null; // template like '{address}'
}

export { EvmAdapter, SolanaAdapter, MidnightAdapter };
"""

ADAPTER_SOURCES: Dict[str, str] = {
    "types/contracts/schema.ts": SCHEMA_TS,
    "utils/index.ts": UTILS_TS,
    "adapters/index.ts": ADAPTERS_INDEX_TS,
    "adapters/evm/adapter.ts": "export class EvmAdapter {}\n",
    "adapters/evm/types.ts": "export type EvmAddress = `0x${string}`;\n",
    "adapters/evm/utils.ts": "export const isEvmAddress = (v: string) => v.startsWith('0x');\n",
    "adapters/solana/adapter.ts": "export class SolanaAdapter {}\n",
    "adapters/midnight/adapter.ts": "export class MidnightAdapter {}\n",
    "adapters/midnight/types.ts": "export type MidnightProof = Uint8Array;\n",
}

PATCH_TEXT = """diff --git a/package.json b/package.json
--- a/package.json
+++ b/package.json
@@ -1,3 +1,4 @@
 {
+  "type": "module",
   "name": "compact-runtime"
 }
"""

PATCH_SOURCES: Dict[str, str] = {
    "adapter-midnight/patches/@midnight-ntwrk__compact-runtime@0.9.0.patch": PATCH_TEXT,
    "adapter-midnight/patches/@midnight-ntwrk__midnight-js-contracts@2.0.2.patch": PATCH_TEXT,
}

RENDERER_CONFIG_DATA: Dict[str, Any] = {
    "coreDependencies": {
        "react": "^19.0.0",
        "react-dom": "^19.0.0",
        "react-hook-form": "^7.43.9",
        "@openzeppelin/ui-renderer": "1.0.0",
    },
    "fieldDependencies": {
        "text": {"runtimeDependencies": {}},
        "number": {"runtimeDependencies": {}},
        "array": {"runtimeDependencies": {}},
        "object": {"runtimeDependencies": {}},
        "date": {
            "runtimeDependencies": {"react-datepicker": "^4.14.0"},
            "devDependencies": {"@types/react-datepicker": "^4.11.2"},
        },
        "select": {
            "runtimeDependencies": {"react-select": "^5.7.3"},
            "devDependencies": {"@types/react-select": "^5.0.1"},
        },
    },
}

ADAPTER_CONFIGS: Dict[str, Any] = {
    "evm": {
        "dependencies": {
            "runtime": {"viem": "^2.0.0", "wagmi": "^2.0.0"},
            "dev": {"@types/node": "^20.0.0"},
        },
        "uiKits": {
            "rainbowkit": {"dependencies": {"runtime": {"@rainbow-me/rainbowkit": "^2.0.0"}}},
        },
    },
    "solana": {
        "dependencies": {"runtime": {"@solana/web3.js": "^1.87.0"}, "dev": {}},
    },
    "midnight": {
        "dependencies": {
            "runtime": {
                "@midnight-ntwrk/compact-runtime": "^0.9.0",
                "@midnight-ntwrk/midnight-js-contracts": "^2.0.2",
            },
            "dev": {},
        },
        "overrides": {"@midnight-ntwrk/compact-runtime": "0.9.0"},
        "patchedDependencies": {
            "@midnight-ntwrk/compact-runtime@0.9.0": "@midnight-ntwrk__compact-runtime@0.9.0.patch",
            "@midnight-ntwrk/midnight-js-contracts@2.0.2": "@midnight-ntwrk__midnight-js-contracts@2.0.2.patch",
        },
    },
}


def adapter_sources() -> Dict[str, Loader]:
    return static_sources(ADAPTER_SOURCES)


def patch_sources() -> Dict[str, Loader]:
    return static_sources(PATCH_SOURCES)


def renderer_config() -> RendererConfig:
    return parse_renderer_config(RENDERER_CONFIG_DATA)


def make_form(
    field_types: List[str] | None = None,
    *,
    kit_name: Optional[str] = None,
    kit_config: Optional[Dict[str, Any]] = None,
) -> FormConfig:
    fields = [
        FieldConfig(type=field_type, id=f"param{index}", name=f"param{index}")
        for index, field_type in enumerate(field_types or ["text"])
    ]
    ui_kit = UiKitConfig(kit_name=kit_name, kit_config=kit_config or {}) if kit_name else None
    return FormConfig(
        fields=fields,
        function_id="testFunction",
        contract_address="0x0000000000000000000000000000000000000000",
        ui_kit_config=ui_kit,
    )


def make_network(
    ecosystem: str, network_id: str, *, explorer: Optional[str] = "default"
) -> NetworkConfig:
    return NetworkConfig(
        id=network_id,
        name=f"{ecosystem} Testnet",
        ecosystem=ecosystem,
        primary_explorer_api_identifier=f"{ecosystem}explorer" if explorer == "default" else explorer,
        rpc_url=f"https://{ecosystem}-testnet-rpc.example.com",
    )


__all__ = [
    "ADAPTER_CONFIGS",
    "ADAPTER_SOURCES",
    "PATCH_SOURCES",
    "PATCH_TEXT",
    "RENDERER_CONFIG_DATA",
    "adapter_sources",
    "make_form",
    "make_network",
    "patch_sources",
    "renderer_config",
]

"""Generates public/app.config.json(.example) for an exported project."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..formatting import JsonFormatter, StandardJsonFormatter, run_formatter
from ..logging import get_logger
from ..models import FileMap, FormConfig, NetworkConfig

APP_CONFIG_EXAMPLE_PATH = "public/app.config.json.example"
APP_CONFIG_PATH = "public/app.config.json"

RECOMMENDED_UI_KITS: Dict[str, str] = {
    "evm": "rainbowkit",
    "midnight": "custom",
    "polkadot": "custom",
    "solana": "custom",
    "stellar": "stellar-wallets-kit",
}
_INACTIVE_KITS = {"custom", "none"}

logger = get_logger("assemblers.app_config")


@dataclass
class AppConfigFiles:
    """Formatted documents produced for one export."""

    example: str
    active: Optional[str] = None


def _placeholder_token(value: str) -> str:
    return re.sub(r"[^0-9A-Za-z]+", "_", value).strip("_").upper()


def _explorer_section(network: NetworkConfig) -> Tuple[Dict[str, Any], str]:
    section: Dict[str, Any] = {
        "_comment": (
            "No block explorer API key is strictly required for the default functionality of this "
            "exported form, as the contract ABI is pre-loaded. Configure one here if you plan to "
            "fetch ABIs for other contracts on this network."
        )
    }
    service_id = network.primary_explorer_api_identifier
    if service_id:
        section[service_id] = {
            "apiKey": f"YOUR_{_placeholder_token(service_id)}_API_KEY_HERE",
            "_comment": (
                f"API key for the {service_id} block explorer. "
                "Used if the app dynamically loads new contract ABIs."
            ),
        }
        note = (
            f"The entry for '{service_id}' is for the primary block explorer of the network "
            f"this form was exported for ({network.name})."
        )
    else:
        generic_id = f"CONFIGURE_EXPLORER_API_KEY_FOR_{_placeholder_token(network.id)}"
        section[generic_id] = {
            "apiKey": f"YOUR_API_KEY_FOR_{network.name}_EXPLORER",
            "_comment": (
                f"API key for the block explorer for {network.name}. Rename this key to the "
                "explorer's service identifier if known."
            ),
        }
        note = (
            f"This network ({network.ecosystem}) has no predefined explorer service identifier. "
            "Update the generic placeholder if using dynamic ABI loading."
        )
        logger.warning(
            "No explorer service identifier for network %s; using generic placeholder", network.id
        )
    return section, note


def _rpc_section(network: NetworkConfig) -> Dict[str, str]:
    return {
        network.id: f"YOUR_{_placeholder_token(network.id)}_RPC_URL_HERE_IF_NEEDED",
        f"_comment_for_{network.id}": (
            f"Optional: Provide a custom RPC URL for the {network.name} network. "
            "If omitted, a default public RPC will be used."
        ),
    }


def _wallet_ui_section() -> Dict[str, Any]:
    section: Dict[str, Any] = {
        "_comment": (
            "Wallet UI configuration is ecosystem-specific. Set kitName to a supported kit for the "
            "ecosystem, 'custom', or 'none'; kitConfig holds kit options."
        )
    }
    for ecosystem, kit_name in sorted(RECOMMENDED_UI_KITS.items()):
        section[ecosystem] = {"kitName": kit_name, "kitConfig": {}}
    section["default"] = {"kitName": "custom", "kitConfig": {}}
    return section


def build_example_config(network: NetworkConfig) -> Dict[str, Any]:
    explorer_section, explorer_note = _explorer_section(network)
    return {
        "_readme": [
            "This is an example configuration file. To use it, rename it to 'app.config.json' "
            "in the 'public' directory.",
            "Then fill in your API keys, WalletConnect Project ID and custom RPC URLs as needed.",
            "The defaults baked into this exported form are used when this file is absent or a "
            "setting is omitted.",
            explorer_note,
            "API keys and other sensitive information should be managed securely.",
        ],
        "networkServiceConfigs": explorer_section,
        "globalServiceConfigs": {
            "walletui": _wallet_ui_section(),
            "walletconnect": {
                "projectId": "YOUR_WALLETCONNECT_PROJECT_ID_HERE",
                "_comment": "WalletConnect Project ID, required if you intend to use WalletConnect.",
            },
        },
        "rpcEndpoints": _rpc_section(network),
        "featureFlags": {"exampleFeatureInExportedApp": True},
        "defaultLanguage": "en",
    }


def build_active_config(network: NetworkConfig, form: FormConfig) -> Optional[Dict[str, Any]]:
    """Return the active config when the form selected a concrete UI kit, else None."""
    kit = form.ui_kit_config
    if kit is None or not kit.kit_name or kit.kit_name in _INACTIVE_KITS:
        return None
    return {
        "globalServiceConfigs": {
            "walletui": {
                network.ecosystem: {
                    "kitName": kit.kit_name,
                    "kitConfig": kit.kit_config,
                }
            }
        }
    }


async def _format(formatter: JsonFormatter, document: Dict[str, Any], label: str) -> str:
    raw = json.dumps(document, indent=2, ensure_ascii=False)
    try:
        return await run_formatter(formatter, raw)
    except Exception as exc:
        logger.warning("Failed to format %s, using raw JSON: %s", label, exc)
        return raw


async def generate_app_config(
    network: NetworkConfig,
    form: FormConfig,
    formatter: JsonFormatter | None = None,
) -> AppConfigFiles:
    formatter = formatter or StandardJsonFormatter()
    example = await _format(formatter, build_example_config(network), APP_CONFIG_EXAMPLE_PATH)
    active_document = build_active_config(network, form)
    active = None
    if active_document is not None:
        active = await _format(formatter, active_document, APP_CONFIG_PATH)
    return AppConfigFiles(example=example, active=active)


def _add_file(files: FileMap, path: str, content: str) -> bool:
    if path in files:
        logger.warning("Keeping existing %s; generated config not written", path)
        return False
    files[path] = content
    return True


async def generate_and_add_app_config(
    files: FileMap,
    network: NetworkConfig,
    form: FormConfig,
    formatter: JsonFormatter | None = None,
) -> AppConfigFiles:
    """Write the generated documents into ``files``, keeping entries already present."""
    generated = await generate_app_config(network, form, formatter)
    if _add_file(files, APP_CONFIG_EXAMPLE_PATH, generated.example):
        logger.info("Generated %s", APP_CONFIG_EXAMPLE_PATH)
    if generated.active is not None and _add_file(files, APP_CONFIG_PATH, generated.active):
        logger.info("Generated %s for UI kit %s", APP_CONFIG_PATH, form.ui_kit_config.kit_name)
    return generated


__all__ = [
    "APP_CONFIG_EXAMPLE_PATH",
    "APP_CONFIG_PATH",
    "AppConfigFiles",
    "RECOMMENDED_UI_KITS",
    "build_active_config",
    "build_example_config",
    "generate_and_add_app_config",
    "generate_app_config",
]

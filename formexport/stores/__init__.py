"""Process-lifetime stores used by the export pipeline."""

from .adapter_configs import AdapterConfigLoader

__all__ = ["AdapterConfigLoader"]

from __future__ import annotations

# Re-export loader helpers
from .config_loader import CONFIG_FILENAME, get_config_dir, load_config

# Re-export config models
from .config_models import AppConfig, OrderbookConfig, PairFormatConfig, VenueConfig

__all__ = [
    # models
    "AppConfig",
    "OrderbookConfig",
    "PairFormatConfig",
    "VenueConfig",
    # loader
    "CONFIG_FILENAME",
    "get_config_dir",
    "load_config",
]

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import appdirs  # type: ignore[import-untyped]
import yaml  # type: ignore[import-untyped]

from cryptofiend.config_models import (
    AppConfig,
    OrderbookConfig,
    PairFormatConfig,
    VenueConfig,
)
from cryptofiend.currency import pair_from_text

logger = logging.getLogger(__name__)

APP_NAME = "cryptofiend"
CONFIG_FILENAME = "config.yaml"


def get_config_dir() -> Path:
    """
    Returns the OS-specific configuration directory using appdirs.
    """
    return Path(appdirs.user_config_dir(APP_NAME))


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning(
            "Configuration file is not a mapping; ignoring it",
            extra={"event": "config_invalid_format", "config_path": str(path)},
        )
        return {}
    return data


def _deep_merge_dicts(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    merged = base.copy()
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(raw: Dict[str, Any], name: str, config_path: Path) -> Dict[str, Any]:
    data = raw.get(name) or {}
    if not isinstance(data, dict):
        logger.warning(
            "%s config is not a mapping; using defaults",
            name.capitalize(),
            extra={"event": f"config_invalid_{name}", "config_path": str(config_path)},
        )
        return {}
    return data


def _validated_number(value: Any, default, field_name: str, config_path: Path, min_value: float = 0):
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > min_value:
        return type(default)(value)

    logger.warning(
        "%s is invalid; using default",
        field_name,
        extra={"event": "config_invalid_value", "field": field_name, "config_path": str(config_path)},
    )
    return default


def _build_venue(data: Dict[str, Any], config_path: Path) -> VenueConfig:
    default = VenueConfig()

    format_data = data.get("request_pair_format") or {}
    if not isinstance(format_data, dict):
        logger.warning(
            "request_pair_format is not a mapping; using defaults",
            extra={"event": "config_invalid_pair_format", "config_path": str(config_path)},
        )
        format_data = {}
    pair_format = PairFormatConfig(
        delimiter=str(format_data.get("delimiter", default.request_pair_format.delimiter)),
        uppercase=bool(format_data.get("uppercase", default.request_pair_format.uppercase)),
    )

    quote_assets = data.get("quote_assets", default.quote_assets)
    if not isinstance(quote_assets, list):
        logger.warning(
            "quote_assets is not a list; using defaults",
            extra={"event": "config_invalid_quote_assets", "config_path": str(config_path)},
        )
        quote_assets = default.quote_assets

    return VenueConfig(
        name=str(data.get("name", default.name)),
        base_url=str(data.get("base_url", default.base_url)),
        recv_window_ms=_validated_number(
            data.get("recv_window_ms"), default.recv_window_ms, "venue.recv_window_ms", config_path
        ),
        request_timeout=_validated_number(
            data.get("request_timeout"), default.request_timeout, "venue.request_timeout", config_path
        ),
        rate_limit_window_seconds=_validated_number(
            data.get("rate_limit_window_seconds"),
            default.rate_limit_window_seconds,
            "venue.rate_limit_window_seconds",
            config_path,
        ),
        request_pair_format=pair_format,
        quote_assets=[str(asset) for asset in quote_assets],
    )


def _valid_pairs(pairs: List[Any], quote_assets: List[str], config_path: Path) -> List[str]:
    valid = []
    for entry in pairs:
        if isinstance(entry, str) and pair_from_text(entry, quote_assets) is not None:
            valid.append(entry)
            continue
        logger.warning(
            "Dropping unparseable orderbook pair %r",
            entry,
            extra={"event": "config_invalid_value", "field": "orderbook.pairs", "config_path": str(config_path)},
        )
    return valid


def _build_orderbook(data: Dict[str, Any], quote_assets: List[str], config_path: Path) -> OrderbookConfig:
    default = OrderbookConfig()

    pairs = data.get("pairs", default.pairs)
    if not isinstance(pairs, list):
        logger.warning(
            "orderbook.pairs is not a list; using defaults",
            extra={"event": "config_invalid_pairs", "config_path": str(config_path)},
        )
        pairs = default.pairs
    pairs = _valid_pairs(pairs, quote_assets, config_path)

    depth_limit = data.get("depth_limit")
    if depth_limit is not None and (
        isinstance(depth_limit, bool) or not isinstance(depth_limit, int) or depth_limit < 0
    ):
        logger.warning(
            "orderbook.depth_limit is invalid; using venue default",
            extra={"event": "config_invalid_value", "field": "orderbook.depth_limit", "config_path": str(config_path)},
        )
        depth_limit = None

    poll_workers = data.get("poll_workers")
    if poll_workers is not None:
        poll_workers = _validated_number(poll_workers, 1, "orderbook.poll_workers", config_path)

    return OrderbookConfig(
        pairs=[str(p) for p in pairs],
        book_type=str(data.get("book_type", default.book_type)),
        depth_limit=depth_limit,
        poll_workers=poll_workers,
    )


def load_config(config_path: Optional[Path] = None, env: Optional[str] = None) -> AppConfig:
    """
    Loads the configuration from the default location or a specified path.

    A ``config.<env>.yaml`` next to the main file is merged on top when present;
    ``env`` defaults to the ``CRYPTOFIEND_ENV`` variable. A missing file yields
    the defaults. Malformed sections are logged and replaced by their defaults.
    """
    if config_path is None:
        config_path = get_config_dir() / CONFIG_FILENAME
    config_path = Path(config_path).expanduser()

    if not config_path.exists():
        logger.warning(
            "Configuration file not found; using defaults",
            extra={"event": "config_missing_file", "config_path": str(config_path)},
        )
        raw_config: Dict[str, Any] = {}
    else:
        raw_config = _read_yaml(config_path)

    effective_env = env if env is not None else os.environ.get("CRYPTOFIEND_ENV")
    if effective_env:
        env_config_path = config_path.parent / f"config.{effective_env}.yaml"
        if env_config_path.exists():
            raw_config = _deep_merge_dicts(raw_config, _read_yaml(env_config_path))

    venue = _build_venue(_section(raw_config, "venue", config_path), config_path)
    return AppConfig(
        venue=venue,
        orderbook=_build_orderbook(_section(raw_config, "orderbook", config_path), venue.quote_assets, config_path),
    )

"""
Configuration loading for the cycle arbitrage bot.

Reads an optional YAML file, layers environment variable overrides on top
and validates the result against ``ArbitrageConfig``. Every failure surfaces
as ``ConfigurationError``.
"""

import copy
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from .config_schema import ArbitrageConfig, validate_config
from .exceptions import ConfigurationError
from .utils import parse_bool, parse_list


def _fee_list(value: str):
    return [int(item) for item in parse_list(value)]


# env var -> (section, field, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "ARB_BASES": ("scan", "base_symbols", parse_list),
    "ARB_TOKENS_ALLOWLIST": ("scan", "tokens", parse_list),
    "ARB_FEE_TIERS": ("scan", "fee_tiers", _fee_list),
    "ARB_MAX_HOPS": ("scan", "max_hops", int),
    "ARB_PROBE_USD": ("scan", "probe_amount", str),
    "ARB_MIN_PROFIT_BPS": ("scan", "min_profit_bps", str),
    "ARB_SCAN_INTERVAL_MS": ("scan", "interval_ms", int),
    "ARB_SCAN_ENABLED": ("scan", "enabled", parse_bool),
    "ARB_ROUTE_STRATEGY": ("scan", "route_strategy", str.lower),
    "ARB_SCAN_CONCURRENCY": ("scan", "concurrency", int),
    "ARB_LOG_SEARCHED_PAIRS": ("scan", "log_searched_pairs", parse_bool),
    "ARB_LOG_SEARCHED_MAX": ("scan", "log_searched_max", int),
    "STATUS_INTERVAL_MS": ("reporter", "interval_ms", int),
    "STATUS_BREAKDOWN_PER_BASE": ("reporter", "breakdown_per_base", parse_bool),
    "STATUS_BREAKDOWN_TOP": ("reporter", "breakdown_top", int),
    "ARB_EXECUTE": ("execution", "enabled", parse_bool),
    "ARB_TRADE_USD": ("execution", "trade_amount", str),
    "ARB_MAX_HOPS_EXEC": ("execution", "max_hops", int),
    "ARB_MAX_SLIPPAGE_BPS": ("execution", "max_slippage_bps", str),
    "ARB_COOLDOWN_MS": ("execution", "cooldown_ms", int),
    "ARB_DEDUPE_WINDOW_MS": ("execution", "dedupe_window_ms", int),
    "ARB_EXEC_POLICY": ("execution", "policy", str.lower),
    "WAIT_AFTER_SEND_MS": ("execution", "wait_after_send_ms", int),
    "WALLET_ADDRESS": ("execution", "wallet_address", str),
    "DEX_BASE_URL": ("quoting", "base_url", str),
    "LOG_LEVEL": ("logging", "level", str),
}


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}")

    if config_dict is None:
        return {}
    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
    return config_dict


def apply_env_overrides(
    config_dict: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Return a copy of ``config_dict`` with environment overrides applied.

    Empty variables are ignored.

    Raises:
        ConfigurationError: If a variable cannot be parsed
    """
    environ = os.environ if environ is None else environ
    result = copy.deepcopy(config_dict)

    for name, (section, key, parser) in ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or not raw.strip():
            continue
        try:
            value = parser(raw.strip())
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {name}: {raw!r} ({e})")
        section_dict = result.setdefault(section, {})
        if not isinstance(section_dict, dict):
            raise ConfigurationError(f"Configuration section '{section}' must be a mapping")
        section_dict[key] = value

    return result


def build_config(config_dict: Dict[str, Any]) -> ArbitrageConfig:
    """Validate a raw configuration dictionary."""
    try:
        return validate_config(config_dict)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(errors)}", {"errors": errors}
        )


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ArbitrageConfig:
    """
    Load the full configuration.

    Args:
        config_path: Optional YAML file; defaults apply when omitted
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        ConfigurationError: If the file or any value is invalid
    """
    config_dict = load_yaml_config(config_path) if config_path else {}
    return build_config(apply_env_overrides(config_dict, environ))

"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "https://fullnode.devnet.aptoslabs.com/v1"
DEFAULT_FAUCET_URL = "https://faucet.devnet.aptoslabs.com"
DEFAULT_PROGRAM_ADDRESS = (
    "0x2b3c332c6c95d3b717fdf3644a7633e8efa7b1451193891a504a6a292edc0039"
)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_url: str = DEFAULT_NODE_URL
    faucet_url: str = DEFAULT_FAUCET_URL
    rpc_timeout: int = 30


@dataclass(frozen=True)
class ProgramConfig:
    address: str = DEFAULT_PROGRAM_ADDRESS


@dataclass(frozen=True)
class GasConfig:
    max_gas_amount: int = 5000
    gas_unit_price: int = 1
    gas_currency_code: str = "XUS"


@dataclass(frozen=True)
class TransactionConfig:
    confirmation_timeout: float = 30.0
    confirmation_poll_interval: float = 1.0


@dataclass(frozen=True)
class EventsConfig:
    poll_interval_seconds: float = 1.0


@dataclass(frozen=True)
class AppConfig:
    chain: ChainConfig = field(default_factory=ChainConfig)
    program: ProgramConfig = field(default_factory=ProgramConfig)
    gas: GasConfig = field(default_factory=GasConfig)
    transactions: TransactionConfig = field(default_factory=TransactionConfig)
    events: EventsConfig = field(default_factory=EventsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    # Environment wins over the file, matching the node tooling convention.
    return ChainConfig(
        rpc_url=os.environ.get("APTOS_NODE_URL")
        or raw.get("rpc_url")
        or DEFAULT_NODE_URL,
        faucet_url=os.environ.get("APTOS_FAUCET_URL")
        or raw.get("faucet_url")
        or DEFAULT_FAUCET_URL,
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_program(raw: dict[str, Any]) -> ProgramConfig:
    return ProgramConfig(address=str(raw.get("address") or DEFAULT_PROGRAM_ADDRESS).lower())


def _build_gas(raw: dict[str, Any]) -> GasConfig:
    return GasConfig(
        max_gas_amount=int(raw.get("max_gas_amount", 5000)),
        gas_unit_price=int(raw.get("gas_unit_price", 1)),
        gas_currency_code=raw.get("gas_currency_code", "XUS"),
    )


def _build_transactions(raw: dict[str, Any]) -> TransactionConfig:
    return TransactionConfig(
        confirmation_timeout=float(raw.get("confirmation_timeout", 30.0)),
        confirmation_poll_interval=float(raw.get("confirmation_poll_interval", 1.0)),
    )


def _build_events(raw: dict[str, Any]) -> EventsConfig:
    return EventsConfig(
        poll_interval_seconds=float(raw.get("poll_interval_seconds", 1.0)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. When omitted, ``config.yaml`` in the
            project root is used if present, otherwise built-in defaults.
    """
    load_dotenv()

    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = Path(__file__).resolve().parent.parent / "config.yaml"
        if default_path.exists():
            config_path = default_path
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chain=_build_chain(raw.get("chain") or {}),
        program=_build_program(raw.get("program") or {}),
        gas=_build_gas(raw.get("gas") or {}),
        transactions=_build_transactions(raw.get("transactions") or {}),
        events=_build_events(raw.get("events") or {}),
    )

    _validate(cfg)
    if config_path is not None:
        logger.info("Configuration loaded from %s", config_path)
    else:
        logger.info("No config file found, using defaults")
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.chain.rpc_url:
        raise ValueError("chain.rpc_url must not be empty")
    if cfg.chain.rpc_timeout <= 0:
        raise ValueError("chain.rpc_timeout must be positive")
    if not _ADDRESS_RE.match(cfg.program.address):
        raise ValueError(f"Invalid program address '{cfg.program.address}'")
    if cfg.gas.max_gas_amount <= 0:
        raise ValueError("gas.max_gas_amount must be positive")
    if cfg.transactions.confirmation_timeout <= 0:
        raise ValueError("transactions.confirmation_timeout must be positive")
    if cfg.transactions.confirmation_poll_interval <= 0:
        raise ValueError("transactions.confirmation_poll_interval must be positive")
    if cfg.events.poll_interval_seconds <= 0:
        raise ValueError("events.poll_interval_seconds must be positive")

"""
Configuration schema validation using Pydantic
"""

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_CONFIG,
    DEFAULT_FEE_TIERS,
    MAX_HOPS,
    MIN_HOPS,
    NETWORK_CONFIG,
    ExecutionPolicy,
    RouteStrategy,
)
from .exceptions import InvalidIdentifierError
from .tokens import TokenIdentifier, normalize, normalize_all


def _check_tokens(values: List[str]) -> List[str]:
    for value in values:
        try:
            normalize(value)
        except InvalidIdentifierError as e:
            raise ValueError(str(e))
    return values


class ScanSettings(BaseModel):
    """Route scanning configuration"""

    enabled: bool = True
    base_symbols: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CONFIG["BASE_SYMBOLS"]),
        description="Seed tokens every cycle starts and ends at",
    )
    tokens: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CONFIG["TOKENS"]),
        description="Token universe for intermediate hops",
    )
    fee_tiers: List[int] = Field(default_factory=lambda: list(DEFAULT_FEE_TIERS))
    probe_amount: Decimal = Field(
        default=Decimal(DEFAULT_CONFIG["PROBE_AMOUNT"]),
        gt=0,
        description="Simulated input size used for quoting",
    )
    max_hops: int = Field(default=DEFAULT_CONFIG["MAX_HOPS"], ge=MIN_HOPS, le=MAX_HOPS)
    min_profit_bps: Decimal = Field(
        default=Decimal(DEFAULT_CONFIG["MIN_PROFIT_BPS"]), ge=-10000, le=10000
    )
    route_strategy: RouteStrategy = RouteStrategy.FULL
    concurrency: int = Field(default=1, ge=1, le=64, description="Cycles quoted at once")
    interval_ms: int = Field(default=DEFAULT_CONFIG["SCAN_INTERVAL_MS"], ge=0)
    log_searched_pairs: bool = False
    log_searched_max: int = Field(default=DEFAULT_CONFIG["LOG_SEARCHED_MAX"], ge=0)
    pair_diagnostics: bool = False

    @field_validator("base_symbols", "tokens")
    @classmethod
    def validate_tokens(cls, v):
        return _check_tokens(v)

    @field_validator("fee_tiers")
    @classmethod
    def validate_fee_tiers(cls, v):
        for fee in v:
            if fee <= 0:
                raise ValueError(f"Fee tier must be a positive integer: {fee}")
        return v

    @property
    def base_tokens(self) -> List[TokenIdentifier]:
        return normalize_all(self.base_symbols)

    @property
    def universe(self) -> List[TokenIdentifier]:
        return normalize_all(self.tokens)


class QuotingSettings(BaseModel):
    """Quote backend and retry configuration"""

    base_url: str = NETWORK_CONFIG["DEX_BASE_URL"]
    timeout_seconds: float = Field(default=NETWORK_CONFIG["DEFAULT_API_TIMEOUT"], gt=0, le=300)
    token_format: Literal["dollar", "pipe"] = "dollar"
    max_retries: int = Field(default=NETWORK_CONFIG["RETRY_MAX_ATTEMPTS"], ge=0, le=10)
    retry_delay_ms: int = Field(default=NETWORK_CONFIG["RETRY_DELAY_MS"], ge=0, le=60000)
    backoff_multiplier: float = Field(
        default=NETWORK_CONFIG["RETRY_BACKOFF_MULTIPLIER"], ge=1.0, le=10.0
    )
    max_in_flight: int = Field(default=NETWORK_CONFIG["MAX_IN_FLIGHT_QUOTES"], ge=1, le=64)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base URL format: {v}")
        return v.rstrip("/")


class ExecutionSettings(BaseModel):
    """Cycle execution configuration"""

    enabled: bool = False
    trade_amount: Decimal = Field(default=Decimal(DEFAULT_CONFIG["TRADE_AMOUNT"]), gt=0)
    max_hops: Optional[int] = Field(default=None, ge=MIN_HOPS, le=MAX_HOPS)
    max_slippage_bps: Decimal = Field(
        default=Decimal(DEFAULT_CONFIG["MAX_SLIPPAGE_BPS"]), ge=0, le=10000
    )
    cooldown_ms: int = Field(default=DEFAULT_CONFIG["COOLDOWN_MS"], ge=0)
    dedupe_window_ms: int = Field(default=DEFAULT_CONFIG["DEDUPE_WINDOW_MS"], ge=0)
    policy: ExecutionPolicy = ExecutionPolicy.SPECULATIVE
    wait_after_send_ms: int = Field(default=DEFAULT_CONFIG["WAIT_AFTER_SEND_MS"], ge=0)
    wallet_address: Optional[str] = None


class ReporterSettings(BaseModel):
    """Heartbeat reporter configuration"""

    enabled: bool = True
    interval_ms: int = Field(default=DEFAULT_CONFIG["STATUS_INTERVAL_MS"], ge=100)
    breakdown_per_base: bool = True
    breakdown_top: int = Field(default=DEFAULT_CONFIG["STATUS_BREAKDOWN_TOP"], ge=1)


class LoggingSettings(BaseModel):
    """Logging configuration"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class MetricsSettings(BaseModel):
    """Metrics server configuration"""

    enabled: bool = False
    port: int = Field(default=NETWORK_CONFIG["DEFAULT_PROMETHEUS_PORT"], ge=1024, le=65535)
    path: str = Field(default="/metrics", pattern=r"^/[a-zA-Z0-9_/-]*$")


class ArbitrageConfig(BaseModel):
    """Complete bot configuration schema"""

    scan: ScanSettings = Field(default_factory=ScanSettings)
    quoting: QuotingSettings = Field(default_factory=QuotingSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    reporter: ReporterSettings = Field(default_factory=ReporterSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)

    model_config = {
        "extra": "forbid",  # Disallow extra fields
    }

    @model_validator(mode="after")
    def default_execution_hops(self):
        if self.execution.max_hops is None:
            self.execution.max_hops = self.scan.max_hops
        return self


def validate_config(config_dict: dict) -> ArbitrageConfig:
    """
    Validate a configuration dictionary

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return ArbitrageConfig(**config_dict)

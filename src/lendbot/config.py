"""Configuration system using pydantic-settings and a YAML strategy file.

Process-level settings (log level, polling interval, exchange options) come
from environment variables. Strategy definitions live in a YAML document,
one named entry per lending strategy, each referencing a credential pair
resolved from the environment at load time.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lendbot.exceptions import ConfigurationError


class ExchangeSettings(BaseSettings):
    """Bitfinex connection options shared by every strategy client."""

    model_config = SettingsConfigDict(env_prefix="BITFINEX_")

    enable_rate_limit: bool = True
    timeout_ms: int = 10000


class RunnerSettings(BaseSettings):
    """Polling loop parameters."""

    model_config = SettingsConfigDict(env_prefix="RUNNER_")

    strategies_path: str = "config.yaml"
    poll_interval: float = 60.0  # seconds between ticks


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)


class StrategyConfig(BaseModel):
    """Parameters of a single lending strategy. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    name: str
    keys: str
    currency: str
    min_amount: Decimal = Field(gt=0)
    max_balance_percent_per_loan: Decimal = Field(gt=0, le=1)
    min_rate: Decimal = Field(ge=0)
    target_period: int = Field(ge=2, le=120)  # days
    monitored_window: int = Field(ge=1)  # hours
    nth_highest_candle: int = Field(ge=1)

    @field_validator(
        "min_amount", "max_balance_percent_per_loan", "min_rate", mode="before"
    )
    @classmethod
    def _float_to_decimal(cls, value: object) -> object:
        # YAML yields floats; go through str to keep the literal value
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper()


class ApiCredentials(BaseModel):
    """API key pair for one Bitfinex account."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    api_secret: SecretStr


@dataclass(frozen=True)
class StrategyEntry:
    """A strategy configuration paired with the credentials it runs with."""

    config: StrategyConfig
    credentials: ApiCredentials


def resolve_credentials(keys: str, environ: Mapping[str, str]) -> ApiCredentials:
    """Look up ``API_KEY_<keys>`` and ``SECRET_KEY_<keys>`` in the environment.

    Raises:
        ConfigurationError: If either variable is missing or empty.
    """
    api_key_env = f"API_KEY_{keys}"
    secret_key_env = f"SECRET_KEY_{keys}"

    api_key = environ.get(api_key_env)
    if not api_key:
        raise ConfigurationError(f"Missing {api_key_env} env variable")
    api_secret = environ.get(secret_key_env)
    if not api_secret:
        raise ConfigurationError(f"Missing {secret_key_env} env variable")

    return ApiCredentials(api_key=SecretStr(api_key), api_secret=SecretStr(api_secret))


def parse_strategies(
    document: Mapping, environ: Mapping[str, str] | None = None
) -> list[StrategyEntry]:
    """Validate a parsed YAML document into strategy entries.

    Entries keep the order in which they appear under ``simple_strategies``.

    Args:
        document: The mapping produced by ``yaml.safe_load``.
        environ: Environment used to resolve credentials (defaults to os.environ).

    Returns:
        One StrategyEntry per configured strategy.

    Raises:
        ConfigurationError: On a malformed document, invalid field values
            or missing credentials.
    """
    if environ is None:
        environ = os.environ

    if not isinstance(document, Mapping):
        raise ConfigurationError("Strategy configuration must be a mapping")

    strategies = document.get("simple_strategies")
    if not isinstance(strategies, Mapping) or not strategies:
        raise ConfigurationError("No simple_strategies defined")

    entries: list[StrategyEntry] = []
    for name, raw in strategies.items():
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Strategy {name} must be a mapping")
        bad_keys = [key for key in raw if not isinstance(key, str)]
        if bad_keys:
            raise ConfigurationError(f"Strategy {name} has non-string keys: {bad_keys}")
        if "name" in raw:
            raise ConfigurationError(
                f"Strategy {name} must not set 'name'; the entry key is its name"
            )
        try:
            config = StrategyConfig.model_validate({**raw, "name": str(name)})
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid strategy {name}: {e}") from e

        entries.append(
            StrategyEntry(
                config=config,
                credentials=resolve_credentials(config.keys, environ),
            )
        )

    return entries


def load_strategies(
    path: str | Path, environ: Mapping[str, str] | None = None
) -> list[StrategyEntry]:
    """Read and validate the YAML strategy file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read strategy file {path}: {e}") from e

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed strategy file {path}: {e}") from e

    return parse_strategies(document, environ)

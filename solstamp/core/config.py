"""solstamp.core.config

Two config surfaces only:
1) `<config_dir>/config.yaml` (endpoint list, retry and discovery knobs)
2) Environment variables (`SOLSTAMP_` prefix, `__` for nesting)

Everything else is derived.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from solstamp.core.exceptions import ConfigError
from solstamp.core.retry import DelayStrategy, ExponentialBackoff, FixedDelay
from solstamp.core.types import DiscoveryOptions

CONFIG_FILENAME = "config.yaml"


def default_config_dir() -> Path:
    """`$SOLANA_TIMESTAMP_CONFIG_DIR`, else a Docker or local home path."""

    override = os.getenv("SOLANA_TIMESTAMP_CONFIG_DIR")
    if override:
        return Path(override)

    in_docker = Path("/.dockerenv").exists() or os.getenv("RUNNING_IN_DOCKER") == "true"
    if in_docker:
        return Path.home() / ".config" / "solana-timestamp"
    return Path.home() / ".solana-timestamp"


def read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML file, as written (no defaults, no env)."""

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return raw


def write_yaml_mapping(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    content = "# Managed by `solana-timestamp rpc ...`\n" + yaml.safe_dump(data, sort_keys=False)
    path.write_text(content, encoding="utf-8")


class RpcConfig(BaseModel):
    urls: list[str] = Field(default_factory=list)
    default_url: str | None = None
    timeout_s: float = 30.0
    rate_limit_rps: float | None = 10.0


class RetryConfig(BaseModel):
    max_retries: int = 3
    retry_delay_ms: int = 1000
    backoff: Literal["fixed", "exponential"] = "fixed"
    max_delay_ms: int = 8000

    @field_validator("max_retries")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_retries must be >= 1")
        return v

    def delay_strategy(self) -> DelayStrategy:
        if self.backoff == "exponential":
            return ExponentialBackoff(base_ms=self.retry_delay_ms, max_ms=self.max_delay_ms)
        return FixedDelay(delay_ms=self.retry_delay_ms)


class DiscoveryConfig(BaseModel):
    page_limit: int = 1000
    strategy: Literal["combined", "pagination"] = "combined"
    min_coarse_height: int = 1024

    @field_validator("page_limit")
    @classmethod
    def page_limit_within_rpc_cap(cls, v: int) -> int:
        # getSignaturesForAddress rejects limit > 1000
        if not 1 <= v <= 1000:
            raise ValueError("page_limit must be within 1..1000")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    rpc: RpcConfig = Field(default_factory=RpcConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "SOLSTAMP_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        raw = read_yaml_mapping(path)
        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    @classmethod
    def load(cls, config_dir: Path | None = None) -> Config:
        """Read `config.yaml` from ``config_dir``; defaults (plus env) when it is absent."""

        path = (config_dir or default_config_dir()) / CONFIG_FILENAME
        if not path.exists():
            return cls()
        return cls.from_yaml(path)

    def save_yaml(self, path: Path) -> None:
        write_yaml_mapping(path, self.model_dump(mode="json"))

    def discovery_options(self) -> DiscoveryOptions:
        return DiscoveryOptions(
            max_retries=self.retry.max_retries,
            retry_delay_ms=self.retry.retry_delay_ms,
            page_limit=self.discovery.page_limit,
            strategy=self.discovery.strategy,
            min_coarse_height=self.discovery.min_coarse_height,
        )

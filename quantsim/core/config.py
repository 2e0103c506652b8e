"""quantsim.core.config

Two config surfaces only:
1) `config/default.yaml`
2) Environment variables (`QUANTSIM_` prefix, `__` for nesting); they win over
   values from the yaml file

Strategy objects are built from these specs by `quantsim.backtest.factory`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from quantsim.core.exceptions import ConfigError

StrategyKind = Literal[
    "ma_cross",
    "dual_ma",
    "rsi",
    "trend_following",
    "volatility_target",
    "buy_and_hold",
]


class StrategySpec(BaseModel):
    """A strategy kind plus its constructor parameters."""

    kind: StrategyKind
    params: dict[str, Any] = Field(default_factory=dict)


class AllocationSpec(BaseModel):
    strategy: StrategySpec
    weight: float


class BacktestSettings(BaseModel):
    initial_capital: float = 100_000.0
    commission: float = 0.001
    periods_per_year: int = 252
    risk_free_rate: float = 0.02
    max_workers: int | None = None

    @field_validator("initial_capital")
    @classmethod
    def capital_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("initial_capital must be > 0")
        return v

    @field_validator("commission")
    @classmethod
    def commission_cannot_be_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("commission must be >= 0")
        return v


def _default_allocations() -> list[AllocationSpec]:
    return [
        AllocationSpec(strategy=StrategySpec(kind="trend_following"), weight=0.4),
        AllocationSpec(strategy=StrategySpec(kind="volatility_target"), weight=0.4),
        AllocationSpec(strategy=StrategySpec(kind="buy_and_hold"), weight=0.2),
    ]


class CompositeSettings(BaseModel):
    allocations: list[AllocationSpec] = Field(default_factory=_default_allocations)
    slippage: float = 0.0005
    rebalance_threshold: float = 0.05

    @field_validator("allocations")
    @classmethod
    def allocations_cannot_be_empty(cls, v: list[AllocationSpec]) -> list[AllocationSpec]:
        if not v:
            raise ValueError("composite needs at least one allocation")
        return v


class RegimeSettings(BaseModel):
    low_threshold: float = 0.15
    high_threshold: float = 0.25
    volatility_period: int = 20
    slippage: float = 0.0005
    rebalance_threshold: float = 0.01

    low: StrategySpec = Field(default_factory=lambda: StrategySpec(kind="buy_and_hold"))
    medium: StrategySpec = Field(
        default_factory=lambda: StrategySpec(
            kind="trend_following", params={"short_period": 50, "long_period": 200, "slippage": 0.0005}
        )
    )
    high: StrategySpec = Field(
        default_factory=lambda: StrategySpec(
            kind="volatility_target",
            params={
                "period": 20,
                "target_volatility": 0.15,
                "max_weight": 1.0,
                "min_weight": 0.1,
                "slippage": 0.0005,
                "rebalance_threshold": 0.1,
            },
        )
    )

    @field_validator("high_threshold", mode="after")
    @classmethod
    def thresholds_must_be_ordered(cls, v: float, info) -> float:
        low = info.data.get("low_threshold")
        if low is not None and low >= v:
            raise ValueError(f"low_threshold ({low}) must be < high_threshold ({v})")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    backtest: BacktestSettings = Field(default_factory=BacktestSettings)
    strategies: list[StrategySpec] = Field(
        default_factory=lambda: [
            StrategySpec(kind="ma_cross"),
            StrategySpec(kind="dual_ma"),
            StrategySpec(kind="rsi"),
            StrategySpec(kind="trend_following"),
            StrategySpec(kind="volatility_target"),
            StrategySpec(kind="buy_and_hold"),
        ]
    )
    composite: CompositeSettings = Field(default_factory=CompositeSettings)
    regime: RegimeSettings = Field(default_factory=RegimeSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "QUANTSIM_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # env beats yaml; nested env keys merge into the yaml sections
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config root must be a mapping: {path}")

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")

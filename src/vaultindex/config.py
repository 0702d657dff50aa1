"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

SECONDS_PER_DAY = 86400


class VolatilitySettings(BaseSettings):
    """Pair volatility estimator parameters.

    The oracle reports prices in Q21.42 tick format:
    tick = log_{tick_base}(price) * 2^tick_scale_bits.
    """

    model_config = SettingsConfigDict(env_prefix="VOLATILITY_")

    half_life_days: Decimal = Decimal("30")
    tick_base: Decimal = Decimal("1.0001")
    tick_scale_bits: int = 42

    @property
    def half_life_seconds(self) -> Decimal:
        return self.half_life_days * SECONDS_PER_DAY


class YieldSettings(BaseSettings):
    """Smoothing windows for the LP fee yield and staking dividend yield."""

    model_config = SettingsConfigDict(env_prefix="YIELD_")

    lp_half_life_days: Decimal = Decimal("30")
    staking_half_life_days: Decimal = Decimal("30")

    @property
    def lp_half_life_seconds(self) -> Decimal:
        return self.lp_half_life_days * SECONDS_PER_DAY

    @property
    def staking_half_life_seconds(self) -> Decimal:
        return self.staking_half_life_days * SECONDS_PER_DAY


class VolumeSettings(BaseSettings):
    """Half-lives of the three trade volume horizons."""

    model_config = SettingsConfigDict(env_prefix="VOLUME_")

    short_half_life_days: Decimal = Decimal("1")
    medium_half_life_days: Decimal = Decimal("7")
    long_half_life_days: Decimal = Decimal("30")

    def half_lives_seconds(self) -> tuple[Decimal, Decimal, Decimal]:
        """Return (short, medium, long) half-lives in seconds."""
        return (
            self.short_half_life_days * SECONDS_PER_DAY,
            self.medium_half_life_days * SECONDS_PER_DAY,
            self.long_half_life_days * SECONDS_PER_DAY,
        )


class LockTreeSettings(BaseSettings):
    """Lock-weighted index parameters.

    reference_timestamp is subtracted from lock expiries so bucket indices
    fit a signed 32-bit range (~68 years).
    """

    model_config = SettingsConfigDict(env_prefix="LOCKS_")

    reference_timestamp: int = 1740000000  # ~Feb 19 2025


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    volatility: VolatilitySettings = VolatilitySettings()
    yields: YieldSettings = YieldSettings()
    volume: VolumeSettings = VolumeSettings()
    locks: LockTreeSettings = LockTreeSettings()

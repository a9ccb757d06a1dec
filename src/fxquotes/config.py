"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Per-source retry behaviour."""

    model_config = SettingsConfigDict(env_prefix="RETRY_", env_file=".env", extra="ignore")

    max_attempts: int = 3
    backoff_initial_seconds: float = 2.0  # doubles after each failed attempt: 2s, 4s, 8s
    attempt_timeout_seconds: float = 45.0  # outer guard around a single fetch


class BrowserSettings(BaseSettings):
    """Headless Chromium used by the page-scraping sources."""

    model_config = SettingsConfigDict(env_prefix="BROWSER_", env_file=".env", extra="ignore")

    headless: bool = True
    navigation_timeout_seconds: float = 30.0
    wait_timeout_seconds: float = 10.0
    launch_args: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
    ]


class SourceSettings(BaseSettings):
    """Which sources are queried and how each one is reached.

    Every source quotes BRL per USD (or per USDT), so they share the same
    plausibility envelope by default.
    """

    model_config = SettingsConfigDict(env_prefix="SOURCES_", env_file=".env", extra="ignore")

    enabled: list[str] = ["wise", "nubank", "nomad", "exchange"]

    # Plausibility envelope for "BRL per USD" quotes
    brl_per_usd_min: Decimal = Decimal("4.0")
    brl_per_usd_max: Decimal = Decimal("7.0")

    wise_url: str = "https://wise.com/es/currency-converter/usd-to-brl-rate?amount=1"
    wise_spread: Decimal = Decimal("0.005")  # 0.5% either side of mid-market

    nubank_url: str = "https://nubank.com.br/dados-abertos/taxas-conversao"

    nomad_url: str = "https://api.benomad.us/forex-rates-s3/v1/calculator"
    http_timeout_seconds: float = 15.0

    exchange_id: str = "binance"
    exchange_symbol: str = "USDT/BRL"


class CacheSettings(BaseSettings):
    """Optional time-boxed cache in front of the fan-out. Off unless enabled."""

    model_config = SettingsConfigDict(env_prefix="CACHE_", env_file=".env", extra="ignore")

    enabled: bool = False
    ttl_seconds: float = 60.0


class ServerSettings(BaseSettings):
    """HTTP server configuration.

    The listen port is read from PORT (or SERVER_PORT).
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVER_", env_file=".env", extra="ignore", populate_by_name=True
    )

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "SERVER_PORT"))


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings.

    Unknown keys in .env are ignored here: they belong to one of the groups
    (RETRY_*, SERVER_*, PORT, ...) or to another tool.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Each group reads its own prefixed keys from the environment and .env
    # when AppSettings is constructed, not at import.
    retry: RetrySettings = Field(default_factory=RetrySettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    sources: SourceSettings = Field(default_factory=SourceSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

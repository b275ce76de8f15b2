"""Default configuration parameters for the trading-journal client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ApiParams:
    """Backend API connection parameters."""
    base_url: str = "http://localhost:3000/api"
    timeout_seconds: int = 30
    user_agent: str = "mindtrade-app/0.1"


@dataclass(frozen=True)
class RuleParams:
    """Client-side daily rule status parameters."""
    default_account_size: float = 100000.0      # Used when no profile is loaded
    warning_ratio: float = 0.2                  # WARNING once remaining <= ratio * limit
    losing_trades_warning_remaining: int = 1    # WARNING once this many losses remain


@dataclass(frozen=True)
class FilterParams:
    """History filter parameters."""
    page_size: int = 20
    max_presets: int = 10
    preset_name_min_length: int = 3
    preset_name_max_length: int = 50
    export_limit: int = 999999


@dataclass(frozen=True)
class CoachParams:
    """AI coach stream parameters."""
    chunk_size: int = 1024
    done_sentinel: str = "[DONE]"


@dataclass(frozen=True)
class StorageParams:
    """Local storage parameters."""
    db_path: str = "~/.mindtrade/mindtrade.db"
    token_key: str = "mindtrade_token"
    presets_key: str = "mindful-trader-history-presets"


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "WARNING"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    api: ApiParams
    rules: RuleParams
    filters: FilterParams
    coach: CoachParams
    storage: StorageParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        api=ApiParams(),
        rules=RuleParams(),
        filters=FilterParams(),
        coach=CoachParams(),
        storage=StorageParams(),
        logging=LoggingParams(),
    )

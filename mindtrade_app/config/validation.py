"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_api_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate API connection parameters."""
        errors = []

        # Validate base_url
        if "base_url" in params:
            value = params["base_url"]
            parsed = urlparse(value) if isinstance(value, str) else None
            if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(ValidationError(
                    field="base_url",
                    message="Must be an http(s) URL",
                    value=value
                ))

        # Validate timeout_seconds
        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_rule_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate rule status parameters."""
        errors = []

        if "default_account_size" in params:
            value = params["default_account_size"]
            if not isinstance(value, (int, float)) or value <= 0:
                errors.append(ValidationError(
                    field="default_account_size",
                    message="Must be a positive number",
                    value=value
                ))

        if "warning_ratio" in params:
            value = params["warning_ratio"]
            if not isinstance(value, (int, float)) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="warning_ratio",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        if "losing_trades_warning_remaining" in params:
            value = params["losing_trades_warning_remaining"]
            if not isinstance(value, int) or value < 0:
                errors.append(ValidationError(
                    field="losing_trades_warning_remaining",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_filter_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate history filter parameters."""
        errors = []

        for field in ("page_size", "max_presets", "export_limit"):
            if field in params:
                value = params[field]
                if not isinstance(value, int) or value <= 0:
                    errors.append(ValidationError(
                        field=field,
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(sorted(VALID_LOG_LEVELS))}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "api" in config:
            errors.extend(ConfigValidator.validate_api_params(config["api"]))

        if "rules" in config:
            errors.extend(ConfigValidator.validate_rule_params(config["rules"]))

        if "filters" in config:
            errors.extend(ConfigValidator.validate_filter_params(config["filters"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors

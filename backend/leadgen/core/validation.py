"""
Configuration Validation Module
Validates required settings on startup
"""
import os
import logging
from typing import List, Optional, Tuple
from dataclasses import dataclass

from leadgen.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""
    provider: str
    setting: str
    is_valid: bool
    message: str


class ProviderValidator:
    """
    Validates configuration at startup.

    Ensures the data store credentials and phone settings are usable
    before the application starts accepting requests.
    """

    # Required environment variables by provider
    REQUIRED_ENV_VARS = {
        "database": [
            ("SUPABASE_URL", "Supabase database"),
            ("SUPABASE_SERVICE_KEY", "Supabase database"),
        ],
    }

    def __init__(self, strict: bool = False):
        """
        Initialize validator.

        Args:
            strict: If True, treat warnings as errors
        """
        self.strict = strict
        self.results: List[ValidationResult] = []

    def validate_all(self) -> Tuple[bool, List[ValidationResult]]:
        """
        Validate all configuration.

        Returns:
            Tuple of (all_valid, list of results)
        """
        self.results = []

        for provider, vars_list in self.REQUIRED_ENV_VARS.items():
            for env_var, description in vars_list:
                value = os.getenv(env_var)
                if not value:
                    self._add_error(provider, env_var,
                        f"{description} requires {env_var} to be set")
                elif "placeholder" in value:
                    self._add_warning(provider, env_var,
                        f"{description} uses a placeholder value")
                else:
                    self._add_success(provider, env_var, f"{description} configured")

        self._validate_phone_settings()

        errors = [r for r in self.results if not r.is_valid]
        all_valid = len(errors) == 0

        return all_valid, self.results

    def _validate_phone_settings(self) -> None:
        settings = get_settings()
        if not settings.country_code.isdigit():
            self._add_error("phone", "COUNTRY_CODE",
                f"Country code must be digits only, got '{settings.country_code}'")
        else:
            self._add_success("phone", "COUNTRY_CODE",
                f"Phone numbers canonicalize to +{settings.country_code}")

        if settings.trunk_prefix and not settings.trunk_prefix.isdigit():
            self._add_error("phone", "TRUNK_PREFIX",
                f"Trunk prefix must be digits only, got '{settings.trunk_prefix}'")

    def _add_success(self, provider: str, setting: str, message: str):
        """Add successful validation result."""
        self.results.append(ValidationResult(
            provider=provider,
            setting=setting,
            is_valid=True,
            message=message
        ))

    def _add_error(self, provider: str, setting: str, message: str):
        """Add error validation result."""
        self.results.append(ValidationResult(
            provider=provider,
            setting=setting,
            is_valid=False,
            message=message
        ))

    def _add_warning(self, provider: str, setting: str, message: str):
        """Add warning validation result."""
        self.results.append(ValidationResult(
            provider=provider,
            setting=setting,
            is_valid=not self.strict,  # Warnings become errors in strict mode
            message=f"WARNING: {message}"
        ))

    def log_results(self):
        """Log all validation results."""
        errors = [r for r in self.results if not r.is_valid]
        warnings = [r for r in self.results if r.is_valid and "WARNING" in r.message]
        successes = [r for r in self.results if r.is_valid and "WARNING" not in r.message]

        if successes:
            logger.info("Configuration validated:")
            for r in successes:
                logger.info(f"  ✓ [{r.provider}] {r.message}")

        if warnings:
            for r in warnings:
                logger.warning(f"  ⚠ [{r.provider}] {r.message}")

        if errors:
            logger.error("Configuration errors:")
            for r in errors:
                logger.error(f"  ✗ [{r.provider}] {r.message}")

    def get_error_summary(self) -> Optional[str]:
        """Get summary of errors for exception message."""
        errors = [r for r in self.results if not r.is_valid]
        if not errors:
            return None

        lines = ["Configuration errors:"]
        for r in errors:
            lines.append(f"  - {r.setting}: {r.message}")
        return "\n".join(lines)


def validate_config_on_startup(strict: bool = False) -> None:
    """
    Validate configuration at startup.

    Call this from the FastAPI lifespan.

    Args:
        strict: If True, fail on warnings too

    Raises:
        RuntimeError: If required configuration is missing
    """
    validator = ProviderValidator(strict=strict)
    all_valid, results = validator.validate_all()
    validator.log_results()

    if not all_valid:
        error_msg = validator.get_error_summary()
        raise RuntimeError(error_msg)

    logger.info("All configuration validated successfully")

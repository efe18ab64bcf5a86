"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no salts or keys in code)
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

from healthsignal.domain.emergency import default_advisories

# Load environment variables from .env file
load_dotenv()

PLACEHOLDER_SALT = "default-salt-change-in-production"

HashAlgorithm = Literal["sha256", "sha3_256"]

_DIGEST_LENGTHS: dict[str, int] = {"sha256": 64, "sha3_256": 64}


class PrivacyConfig(BaseModel):
    """Anonymization settings. The salt is a secret and never printed."""

    hash_salt: SecretStr = Field(..., description="Process-wide salt for subject id hashing")
    hash_algorithm: HashAlgorithm = Field(
        default="sha256", description="Digest used for subject id hashing"
    )

    @field_validator("hash_salt")
    def validate_salt(cls, v: SecretStr) -> SecretStr:
        salt = v.get_secret_value()
        if not salt or salt == PLACEHOLDER_SALT:
            raise ValueError("HASH_SALT must be set in environment or .env file")
        if len(salt) < 16:
            raise ValueError("HASH_SALT must be at least 16 characters long")
        return v

    @property
    def digest_length(self) -> int:
        """Length of a hashed subject id in hex characters."""
        return _DIGEST_LENGTHS[self.hash_algorithm]


class SafetyConfig(BaseModel):
    """Emergency screening settings."""

    default_language: str = Field(default="en", description="Language used when none is given")

    @field_validator("default_language")
    def validate_language(cls, v: str) -> str:
        code = v.strip().lower()
        if code not in default_advisories().languages:
            raise ValueError(f"No emergency advisory available for language {v!r}")
        return code


class StorageConfig(BaseModel):
    """Read/write policy for the symptom store collaborator."""

    table_name: str = Field(default="health-signals", description="Symptom table name")
    query_timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="Timeout for a single region query"
    )
    max_retries: int = Field(default=3, ge=0, description="Retries after a failed region query")
    retry_backoff_seconds: float = Field(
        default=0.2, ge=0.0, description="Base delay for exponential backoff"
    )
    max_backoff_seconds: float = Field(
        default=5.0, ge=0.0, description="Upper bound for a single backoff delay"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    privacy: PrivacyConfig
    safety: SafetyConfig = Field(default_factory=SafetyConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_safety_config_from_env() -> SafetyConfig:
    """Load the screening settings alone; screening needs no salt or storage."""
    return SafetyConfig(default_language=os.getenv("DEFAULT_LANGUAGE", "en"))


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _algorithm_to_literal(val: str) -> HashAlgorithm:
        v = val.strip().lower().replace("-", "_")
        return cast(HashAlgorithm, v if v in _DIGEST_LENGTHS else "sha256")

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    privacy_config = PrivacyConfig(
        hash_salt=SecretStr(os.getenv("HASH_SALT", "")),
        hash_algorithm=_algorithm_to_literal(os.getenv("HASH_ALGORITHM", "sha256")),
    )

    safety_config = load_safety_config_from_env()

    storage_config = StorageConfig(
        table_name=os.getenv("SYMPTOM_TABLE_NAME", "health-signals"),
        query_timeout_seconds=float(os.getenv("STORAGE_QUERY_TIMEOUT_SECONDS", "5.0")),
        max_retries=int(os.getenv("STORAGE_MAX_RETRIES", "3")),
        retry_backoff_seconds=float(os.getenv("STORAGE_RETRY_BACKOFF_SECONDS", "0.2")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        privacy=privacy_config,
        safety=safety_config,
        storage=storage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"Configuration loaded for {config.environment} environment")
        print(f"Subject ids hashed with {config.privacy.hash_algorithm}")
    except Exception as e:
        print(f"Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging. The salt is never shown."""
    config = get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level} ({config.logging.format})")

    print("\nPRIVACY")
    print(f"Hash Algorithm: {config.privacy.hash_algorithm}")
    print(f"Salt: {config.privacy.hash_salt}")

    print("\nSAFETY")
    print(f"Default Language: {config.safety.default_language}")

    print("\nSTORAGE")
    print(f"Table: {config.storage.table_name}")
    print(f"Query Timeout: {config.storage.query_timeout_seconds}s")
    print(f"Max Retries: {config.storage.max_retries}")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()

"""Configuration management for the account service.

This module provides utilities for loading and validating configuration
from environment variables.
"""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from jwt.algorithms import get_default_algorithms

from country_accounts.auth import PasswordHasher, SecurityManager

LOGGER = logging.getLogger(__name__)

_DEFAULT_DATABASE_PATH = "./country_accounts.db"
_DEFAULT_API_PREFIX = "/api/auth"
_DEFAULT_CORS_ORIGINS = "*"


def configure_logging(app_config: "AppConfig") -> None:
    """Configure logging based on the application configuration.

    :param app_config: The application configuration instance
    """
    if not app_config.logging_level:
        logging.basicConfig(level=logging.INFO)
        return

    numeric_level = getattr(logging, app_config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", app_config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level)


@dataclass
class AppConfig:
    """Holds application configuration loaded from environment variables."""

    database_path: str
    logging_level: str | None
    root_path: str
    api_prefix: str
    cors_origins: list[str]

    secret_key: str | None
    algorithm: str
    access_token_expire_minutes: int
    bcrypt_rounds: int

    security_manager: SecurityManager = field(init=False, repr=False)
    password_hasher: PasswordHasher = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize derived configuration attributes."""
        self.security_manager = SecurityManager(
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expire_minutes=self.access_token_expire_minutes,
        )
        self.password_hasher = PasswordHasher(rounds=self.bcrypt_rounds)


def get_env_str(
    var_name: str,
    default: str | None,
    value_checker: Callable[[str], bool] | None = None,
) -> str:
    """Get an environment variable as a string with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value
    :raises ValueError: If the value does not meet the constraints
    """
    value = os.getenv(var_name, default)
    if value is None:
        msg = f"Environment variable {var_name} is required"
        raise ValueError(msg)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_int(
    var_name: str,
    default: int,
    value_checker: Callable[[int], bool] | None = None,
) -> int:
    """Get an environment variable as an integer with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value as an integer
    :raises ValueError: If the value does not meet the constraints or is not an integer
    """
    value_str = os.getenv(var_name)
    if value_str is None or value_str == "":
        return default

    if not value_str.isnumeric():
        msg = f"Environment variable {var_name} must be an integer, got: {value_str}"
        raise ValueError(msg)

    value = int(value_str)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_list(var_name: str, default: str) -> list[str]:
    """Get a comma-separated environment variable as a list of strings.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :return: The non-empty, stripped items
    """
    value = get_env_str(var_name, default)
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config_from_env(env_file: str | Path | None) -> AppConfig:
    """Load application configuration from environment variables.

    :param env_file: Optional ``.env`` file loaded before reading the environment
    :return: An AppConfig instance populated with environment variable values
    """
    if env_file and Path(env_file).exists():
        LOGGER.info("Loading environment variables from %s", env_file)
        load_dotenv(dotenv_path=env_file)

    return AppConfig(
        database_path=get_env_str("DATABASE_PATH", _DEFAULT_DATABASE_PATH),
        logging_level=get_env_str("LOGGING_LEVEL", "INFO"),
        root_path=get_env_str("ROOT_PATH", ""),
        api_prefix=get_env_str(
            "API_PREFIX",
            _DEFAULT_API_PREFIX,
            lambda prefix: prefix == "" or prefix.startswith("/"),
        ),
        cors_origins=get_env_list("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS),
        secret_key=os.getenv("SECRET_KEY"),
        algorithm=get_env_str(
            "ALGORITHM",
            SecurityManager.DEFAULT_JWT_ALGORITHM,
            lambda algorithm: (
                algorithm.startswith("HS") and algorithm in get_default_algorithms()
            ),
        ),
        access_token_expire_minutes=get_env_int(
            "ACCESS_TOKEN_EXPIRE_MINUTES",
            SecurityManager.DEFAULT_TOKEN_EXPIRE_MINUTES,
            lambda minutes: minutes > 0,
        ),
        bcrypt_rounds=get_env_int(
            "BCRYPT_ROUNDS",
            PasswordHasher.DEFAULT_ROUNDS,
            lambda rounds: PasswordHasher.MIN_ROUNDS <= rounds <= PasswordHasher.MAX_ROUNDS,
        ),
    )

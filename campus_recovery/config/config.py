"""
Config classes that read the process environment, optionally seeded from a .env file.
"""
import os
import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


class BaseConfig():
    """
    Config class that loads a .env file and snapshots the environment.
    """
    def __init__(self):
        load_dotenv()
        # Get all environment variables and store them in a dictionary
        self.env_vars = {key: os.getenv(key) for key in os.environ}

    def get_env_vars(self) -> dict:
        """
        Return the dictionary containing all environment variables
        """
        return self.env_vars

    def get_env_var(self, var_name: str, default: Optional[str] = None):
        """
        Retrieve the value of the specified environment variable
        Args:
            var_name (str) : Name of the env var to fetch
            default (str) : Value returned when the var is not set
        """
        if var_name in self.env_vars.keys():
            return self.env_vars[var_name]
        if default is None:
            logger.warning("Variable %s not found.", var_name)
        return default

    def get_int(self, var_name: str, default: int) -> int:
        """
        Retrieve an integer environment variable, falling back to default
        """
        value = self.get_env_var(var_name, str(default))
        try:
            return int(value)
        except ValueError:
            logger.error("Variable %s is not an integer: %r. Using %s.", var_name, value, default)
            return default

    def get_bool(self, var_name: str, default: bool = False) -> bool:
        """
        Retrieve a boolean environment variable ("1", "true", "yes", "on" are true)
        """
        value = self.get_env_var(var_name, 'true' if default else 'false')
        return value.strip().lower() in TRUE_VALUES

    def get_var_as_list(self, var_name: str) -> Optional[List[str]]:
        """
        Returns a comma-delimited var as list
        """
        if var_name in self.env_vars.keys():
            return [env_var.strip() for env_var in self.env_vars[var_name].split(",") if env_var.strip()]
        logger.warning("Warning: var %s not found.", var_name)
        return None

    @abstractmethod
    def validate_env_vars(self):
        """
        Abstract method for validation of the env vars.
        """


@dataclass(frozen=True)
class RecoverySettings:
    """Resolved settings for the recovery flow."""
    environment: str = "development"
    secret_key: str = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"
    code_length: int = 6
    code_ttl_seconds: int = 600
    max_attempts: int = 5
    lock_seconds: int = 1800
    session_ttl_seconds: int = 7 * 24 * 3600
    bcrypt_rounds: int = 10
    dev_bypass: bool = False
    mongo_uri: Optional[str] = None
    mongo_database: str = "campus"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


class RecoveryConfig(BaseConfig):
    """
    Environment configuration for the recovery flow.
    """

    REQUIRED_IN_PRODUCTION = ('SECRET_KEY', 'MONGO_URI', 'CONFIG_FILEPATH')

    def validate_env_vars(self):
        """
        Raise ValueError listing every problem with the environment.
        """
        problems = []
        environment = (self.get_env_var('ENVIRONMENT', 'development') or '').lower()
        if environment == 'production':
            for var_name in self.REQUIRED_IN_PRODUCTION:
                if not self.env_vars.get(var_name):
                    problems.append(f"{var_name} must be set in production")
            if self.get_bool('RECOVERY_DEV_BYPASS'):
                problems.append("RECOVERY_DEV_BYPASS must not be enabled in production")
        for var_name in ('RECOVERY_CODE_LENGTH', 'RECOVERY_CODE_TTL_SECONDS', 'RECOVERY_MAX_ATTEMPTS',
                         'RECOVERY_LOCK_SECONDS', 'SESSION_TTL_SECONDS', 'BCRYPT_ROUNDS'):
            value = self.env_vars.get(var_name)
            if value is not None and (not value.isdigit() or int(value) < 1):
                problems.append(f"{var_name} must be a positive integer")
        if problems:
            raise ValueError("; ".join(problems))

    def get_settings(self) -> RecoverySettings:
        defaults = RecoverySettings()
        return RecoverySettings(
            environment=self.get_env_var('ENVIRONMENT', defaults.environment),
            secret_key=self.get_env_var('SECRET_KEY', defaults.secret_key),
            code_length=self.get_int('RECOVERY_CODE_LENGTH', defaults.code_length),
            code_ttl_seconds=self.get_int('RECOVERY_CODE_TTL_SECONDS', defaults.code_ttl_seconds),
            max_attempts=self.get_int('RECOVERY_MAX_ATTEMPTS', defaults.max_attempts),
            lock_seconds=self.get_int('RECOVERY_LOCK_SECONDS', defaults.lock_seconds),
            session_ttl_seconds=self.get_int('SESSION_TTL_SECONDS', defaults.session_ttl_seconds),
            bcrypt_rounds=self.get_int('BCRYPT_ROUNDS', defaults.bcrypt_rounds),
            dev_bypass=self.get_bool('RECOVERY_DEV_BYPASS'),
            mongo_uri=self.env_vars.get('MONGO_URI'),
            mongo_database=self.get_env_var('MONGO_DATABASE', defaults.mongo_database),
        )

from .config import BaseConfig, RecoveryConfig, RecoverySettings

"""
Models for campus_recovery
"""

from .base_model import BaseModel, ModelValidationError
from .account import Account, AccountRole, RecoveryState, normalize_identity

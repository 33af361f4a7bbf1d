from .clock import SystemClock, ManualClock
from .challenges import (
    ChallengeSource,
    PersistedChallengeSource,
    DevelopmentChallengeStore,
    build_challenge_sources,
)
from .service import AccountRecoveryService, RecoveryCompleted, RecoveryRequestAccepted
from .factory import build_recovery_service

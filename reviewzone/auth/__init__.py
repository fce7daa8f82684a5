"""Login throttling, sign-in, and the login form controller."""

from reviewzone.auth.limiter import (
    BLOCK_DURATION,
    DEFAULT_POLICY,
    MAX_ATTEMPTS,
    WINDOW_DURATION,
    AttemptLimiter,
    AttemptWindow,
    LimiterPolicy,
    LimiterStatus,
)
from reviewzone.auth.login import LoginForm, LoginResult, StatusPoller
from reviewzone.auth.storage import (
    AttemptStore,
    AttemptStoreError,
    MemoryAttemptStore,
    SqlAttemptStore,
)
from reviewzone.auth.supabase import (
    Authenticator,
    AuthResult,
    AuthSession,
    SupabaseAuthenticator,
)

__all__ = [
    "BLOCK_DURATION",
    "DEFAULT_POLICY",
    "MAX_ATTEMPTS",
    "WINDOW_DURATION",
    "AttemptLimiter",
    "AttemptWindow",
    "LimiterPolicy",
    "LimiterStatus",
    "LoginForm",
    "LoginResult",
    "StatusPoller",
    "AttemptStore",
    "AttemptStoreError",
    "MemoryAttemptStore",
    "SqlAttemptStore",
    "Authenticator",
    "AuthResult",
    "AuthSession",
    "SupabaseAuthenticator",
]

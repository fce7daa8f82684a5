"""
FastAPI dependencies for the login flow.

The store and authenticator are created once at application start and
hung off ``app.state``; a limiter is built per request for the caller's
client identifier.
"""

from typing import Annotated

from fastapi import Depends, Request

from reviewzone.auth.limiter import AttemptLimiter
from reviewzone.auth.login import LoginForm
from reviewzone.auth.storage import AttemptStore
from reviewzone.auth.supabase import Authenticator
from reviewzone.core import AuthServiceUnavailableError, utcnow


def get_attempt_store(request: Request) -> AttemptStore:
    return request.app.state.attempt_store


def get_limiter(
    request: Request,
    store: Annotated[AttemptStore, Depends(get_attempt_store)],
) -> AttemptLimiter:
    """Limiter keyed by the client identifier assigned in RequestContextMiddleware."""
    clock = getattr(request.app.state, "clock", utcnow)
    return AttemptLimiter(store, request.state.client_id, clock=clock)


def get_authenticator(request: Request) -> Authenticator:
    authenticator = getattr(request.app.state, "authenticator", None)
    if authenticator is None:
        raise AuthServiceUnavailableError("Authentication is not configured")
    return authenticator


def get_login_form(
    limiter: Annotated[AttemptLimiter, Depends(get_limiter)],
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> LoginForm:
    return LoginForm(limiter, authenticator)


RequireLimiter = Annotated[AttemptLimiter, Depends(get_limiter)]
RequireLoginForm = Annotated[LoginForm, Depends(get_login_form)]

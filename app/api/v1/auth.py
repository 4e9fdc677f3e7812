"""Signup, sign-in and session endpoints, plus the get_current_user dependency."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.identity import (
    IdentityError,
    IdentityProvider,
    IdentityValidationError,
    InvalidCredentialsError,
)
from app.api.deps import get_identity_provider, get_signup_service
from app.core.errors import AccountCreationError, AuthenticationError, InputValidationError
from app.core.log_context import get_logger
from app.schemas.auth import (
    AuthResult,
    CurrentUser,
    ProviderSignupRequest,
    SignInRequest,
    SignupRequest,
)
from app.services.signup import SignupService

logger = get_logger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def _client_info(request: Request) -> dict[str, str | None]:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/signup", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    request: Request,
    service: Annotated[SignupService, Depends(get_signup_service)],
) -> AuthResult:
    """
    Create an account and open a session. The role (ADMIN for the configured admin
    email, USER otherwise) is bound once the identity has been committed.

    Every failure returns the same 422 "Unable to create account".
    """
    result = service.signup(
        str(body.email), body.password, body.name, **_client_info(request)
    )
    logger.info("Signup successful", context={"action": "signup", "user_id": result.user.id})
    return result


@router.post("/sign-up/email", response_model=AuthResult)
def provider_sign_up(
    body: ProviderSignupRequest,
    request: Request,
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> AuthResult:
    """
    Identity provider's own signup path. Role binding runs in the provider's
    after-user-created hook; if that fails the user exists without a role and the
    response is a generic 500.
    """
    try:
        return identity.sign_up_email(
            name=body.name,
            email=body.email,
            password=body.password,
            **_client_info(request),
        )
    except IdentityValidationError as e:
        raise InputValidationError(e.message, error=e.code) from e
    except IdentityError as e:
        # Duplicate email and storage faults share one message.
        raise AccountCreationError() from e


@router.post("/sign-in/email", response_model=AuthResult)
def sign_in(
    body: SignInRequest,
    request: Request,
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> AuthResult:
    """
    Authenticate with email and password; returns a bearer session token.
    Include it in the Authorization header as: Bearer <token>
    """
    try:
        return identity.sign_in_email(
            email=body.email, password=body.password, **_client_info(request)
        )
    except InvalidCredentialsError as e:
        raise AuthenticationError(e.message, error=e.code) from e


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> CurrentUser:
    """Dependency: require a live bearer session and return its user. Raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    authenticated = identity.get_session(credentials.credentials)
    if authenticated is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = authenticated.user
    return CurrentUser(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role.name if user.role else None,
        session_id=authenticated.session.id,
    )


@router.get("/session", response_model=CurrentUser)
def get_session(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Return the user behind the bearer token."""
    return current_user


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Response:
    """Revoke the current session."""
    identity.sign_out(credentials.credentials)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

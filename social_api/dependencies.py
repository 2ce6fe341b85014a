"""Social API: request-scoped dependencies, including the token gate."""

import logging
from typing import Iterator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from social_api.config import Settings
from social_api.database import DBUser
from social_api.exceptions import AuthError, NotFoundError
from social_api.security import Identity, InvalidTokenError, TokenService

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    request: Request,
    x_auth_token: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    """
    Verify the token sent in the ``x-auth-token`` header.
    Returns the caller's identity; raises 401 if the token is missing or invalid,
    so the handler never runs for an unauthenticated request.
    """
    if not x_auth_token:
        raise AuthError("No Token Provided, Authentication Denied")

    token = x_auth_token[7:] if x_auth_token.startswith("Bearer ") else x_auth_token

    try:
        identity = tokens.verify(token)
    except InvalidTokenError as e:
        logger.info("Rejected token on %s %s: %s", request.method, request.url.path, e)
        raise AuthError("Invalid Token")

    request.state.user = identity
    return identity


def load_caller(db: Session, identity: Identity) -> DBUser:
    """Fetch the user behind a verified token. Tokens outlive deleted accounts, so this can 404."""
    user = db.get(DBUser, identity.id)
    if not user:
        raise NotFoundError("No User Found")
    return user

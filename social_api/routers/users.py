"""
Users: registration, login and the caller's own record.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from social_api.config import Settings
from social_api.database import DBUser, user_to_dict
from social_api.dependencies import get_current_user, get_db, get_settings, get_token_service
from social_api.exceptions import AuthError, ConflictError, InternalError, NotFoundError
from social_api.models import UserLogin, UserRegister
from social_api.security import Identity, TokenService, check_password, gravatar_url, hash_password
from social_api.validation import Rule, required, validate

logger = logging.getLogger(__name__)

router = APIRouter()

# bcrypt only hashes the first 72 bytes
MAX_PASSWORD_BYTES = 72

REGISTER_RULES = [
    required("name", "Name is Required"),
    required("email", "Email is Required"),
    required("password", "Password is Required"),
    Rule(
        "password",
        "Password must be at most 72 bytes",
        lambda v: not isinstance(v, str) or len(v.encode()) <= MAX_PASSWORD_BYTES,
    ),
]

LOGIN_RULES = [
    required("email", "Email is Required"),
    required("password", "Password is Required"),
]


def _user_exists_error() -> ConflictError:
    # clients of this API key off 401 for a taken email
    return ConflictError("User already exists", status_code=401)


@router.post("/register")
def register(
    body: Optional[UserRegister] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    data = validate(body.model_dump() if body else {}, REGISTER_RULES)
    email = data["email"].strip().lower()

    if db.query(DBUser).filter(DBUser.email == email).first():
        raise _user_exists_error()

    user = DBUser(
        name=data["name"].strip(),
        email=email,
        password=hash_password(data["password"], rounds=settings.bcrypt_rounds),
        avatar=gravatar_url(email),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        db.rollback()
        raise _user_exists_error()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Registration failed")
        raise InternalError()

    logger.info("Registered user %s", user.id)
    return {"msg": "Registration is Success"}


@router.post("/login")
def login(
    body: Optional[UserLogin] = None,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    data = validate(body.model_dump() if body else {}, LOGIN_RULES)
    email = data["email"].strip().lower()

    user = db.query(DBUser).filter(DBUser.email == email).first()
    if not user or not check_password(data["password"], user.password):
        logger.info("Failed login for %s", email)
        raise AuthError("Invalid Credentials")

    token = tokens.mint(Identity(id=user.id, name=user.name))
    return {"msg": "Login is Success", "token": token}


@router.get("/me")
def me(identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    user = db.get(DBUser, identity.id)
    if not user:
        raise NotFoundError("No User Found")
    return {"user": user_to_dict(user)}

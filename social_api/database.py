"""Social API: persistence: users, profiles and posts with embedded sub-documents."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, ForeignKey, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from social_api.exceptions import InternalError

logger = logging.getLogger(__name__)

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class DBUser(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    avatar = Column(String, nullable=False)
    created_at = Column(String, default=utcnow)
    updated_at = Column(String, default=utcnow, onupdate=utcnow)


class DBProfile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    company = Column(String, nullable=False)
    website = Column(String, nullable=False)
    designation = Column(String, nullable=False)
    location = Column(String, nullable=False)
    skills = Column(JSON, nullable=False, default=list)
    bio = Column(Text, nullable=False)
    github_username = Column(String, nullable=False)
    social = Column(JSON, nullable=False, default=dict)
    experience = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    created_at = Column(String, default=utcnow)
    updated_at = Column(String, default=utcnow, onupdate=utcnow)

    user = relationship(DBUser)


class DBPost(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    text = Column(Text, nullable=False)
    image = Column(String, nullable=False)
    name = Column(String, nullable=False)
    avatar = Column(String, nullable=False)
    likes = Column(JSON, nullable=False, default=list)
    comments = Column(JSON, nullable=False, default=list)
    created_at = Column(String, default=utcnow)
    updated_at = Column(String, default=utcnow, onupdate=utcnow)


def make_engine(database_url: str):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized.")


def commit(db: Session, action: str):
    """Commit the unit of work, turning driver failures into a 500 for the client."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s failed", action)
        raise InternalError()


# --------------- Serialization ---------------

def user_to_dict(user: DBUser) -> dict:
    """Public view of a user; the password hash never leaves this module."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "is_admin": bool(user.is_admin),
        "avatar": user.avatar,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def post_to_dict(post: DBPost) -> dict:
    return {
        "id": post.id,
        "user": post.user_id,
        "text": post.text,
        "image": post.image,
        "name": post.name,
        "avatar": post.avatar,
        "likes": list(post.likes or []),
        "comments": list(post.comments or []),
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def profile_to_dict(profile: DBProfile) -> dict:
    owner = profile.user
    return {
        "id": profile.id,
        "user": {"id": owner.id, "name": owner.name, "avatar": owner.avatar} if owner else profile.user_id,
        "company": profile.company,
        "website": profile.website,
        "designation": profile.designation,
        "location": profile.location,
        "skills": list(profile.skills or []),
        "bio": profile.bio,
        "github_username": profile.github_username,
        "social": dict(profile.social or {}),
        "experience": list(profile.experience or []),
        "education": list(profile.education or []),
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }

"""
Posts: create/list/delete posts, likes and comments.
Likes and comments are embedded in the post and kept newest first.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from social_api.database import DBPost, commit, new_id, post_to_dict, utcnow
from social_api.dependencies import get_current_user, get_db, load_caller
from social_api.exceptions import AuthError, ConflictError, NotFoundError
from social_api.models import CommentCreate, PostCreate
from social_api.security import Identity
from social_api.validation import required, validate

logger = logging.getLogger(__name__)

router = APIRouter()

POST_RULES = [
    required("text", "Text is Required"),
    required("image", "Image is Required"),
]

COMMENT_RULES = [
    required("text", "Text is Required"),
]


def _load_post(db: Session, post_id: str, for_update: bool = False) -> DBPost:
    query = db.query(DBPost).filter(DBPost.id == post_id)
    if for_update:
        query = query.with_for_update()
    post = query.first()
    if not post:
        raise NotFoundError("No Post Found")
    return post


def _liked_by(post: DBPost, user_id: str) -> bool:
    return any(like.get("user") == user_id for like in post.likes or [])


@router.post("")
def create_post(
    body: Optional[PostCreate] = None,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = validate(body.model_dump() if body else {}, POST_RULES)
    author = load_caller(db, identity)

    post = DBPost(
        user_id=author.id,
        text=data["text"],
        image=data["image"],
        name=author.name,
        avatar=author.avatar,
        likes=[],
        comments=[],
    )
    db.add(post)
    commit(db, "Create post")
    return {"post": post_to_dict(post)}


@router.get("")
def list_posts(identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    posts = db.query(DBPost).order_by(DBPost.created_at.desc()).all()
    return {"posts": [post_to_dict(p) for p in posts]}


@router.get("/{post_id}")
def get_post(post_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"post": post_to_dict(_load_post(db, post_id))}


@router.delete("/{post_id}")
def delete_post(post_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    post = _load_post(db, post_id)
    if post.user_id != identity.id:
        raise AuthError("User is not authorized")

    deleted = post_to_dict(post)
    db.delete(post)
    commit(db, "Delete post")
    logger.info("User %s deleted post %s", identity.id, post_id)
    return {"msg": "Post is Deleted", "post": deleted}


# --------------- Likes ---------------

@router.put("/like/{post_id}")
def like_post(post_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    load_caller(db, identity)
    post = _load_post(db, post_id, for_update=True)
    if _liked_by(post, identity.id):
        raise ConflictError("Post has already been liked")

    post.likes = [{"user": identity.id}] + list(post.likes or [])
    commit(db, "Like post")
    return {"post": post_to_dict(post)}


@router.put("/unlike/{post_id}")
def unlike_post(post_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    load_caller(db, identity)
    post = _load_post(db, post_id, for_update=True)
    if not _liked_by(post, identity.id):
        raise ConflictError("Post has not been liked")

    post.likes = [like for like in post.likes if like.get("user") != identity.id]
    commit(db, "Unlike post")
    return {"post": post_to_dict(post)}


# --------------- Comments ---------------

@router.post("/comment/{post_id}")
def add_comment(
    post_id: str,
    body: Optional[CommentCreate] = None,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = validate(body.model_dump() if body else {}, COMMENT_RULES)
    author = load_caller(db, identity)
    post = _load_post(db, post_id)

    comment = {
        "id": new_id(),
        "user": author.id,
        "text": data["text"],
        "name": author.name,
        "avatar": author.avatar,
        "date": utcnow(),
    }
    post.comments = [comment] + list(post.comments or [])
    commit(db, "Add comment")
    return {"post": post_to_dict(post)}


@router.delete("/comment/{post_id}/{comment_id}")
def delete_comment(
    post_id: str,
    comment_id: str,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    post = _load_post(db, post_id)

    comment = next((c for c in post.comments or [] if c.get("id") == comment_id), None)
    if not comment:
        raise NotFoundError("Comment not exists")
    if comment.get("user") != identity.id:
        raise AuthError("User is not authorized")

    post.comments = [c for c in post.comments if c.get("id") != comment_id]
    commit(db, "Delete comment")
    return {"post": post_to_dict(post)}

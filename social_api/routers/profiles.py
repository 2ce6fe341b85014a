"""
Profiles: one per user, with experience and education entries.
Reads are public; writes act on the caller's own profile.
"""

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from social_api.database import DBPost, DBProfile, DBUser, commit, new_id, profile_to_dict
from social_api.dependencies import get_current_user, get_db, load_caller
from social_api.exceptions import AuthError, ConflictError, InternalError, NotFoundError, ValidationError
from social_api.models import EducationForm, ExperienceForm, ProfileForm
from social_api.security import Identity
from social_api.validation import field_error, required, validate

logger = logging.getLogger(__name__)

router = APIRouter()

SOCIAL_FIELDS = ("youtube", "facebook", "twitter", "linkedin", "instagram")

PROFILE_RULES = [
    required("company", "Company is Required"),
    required("website", "Website is Required"),
    required("location", "Location is Required"),
    required("designation", "Designation is Required"),
    required("skills", "Skills is Required"),
    required("bio", "Bio is Required"),
    required("github_username", "GithubUsername is Required"),
    required("youtube", "Youtube is Required"),
    required("facebook", "Facebook is Required"),
    required("linkedin", "Linkedin is Required"),
    required("twitter", "Twitter is Required"),
    required("instagram", "Instagram is Required"),
]

EXPERIENCE_RULES = [
    required("title", "Title is Required"),
    required("company", "Company is Required"),
    required("location", "Location is Required"),
    required("from", "From is Required"),
    required("description", "Description is Required"),
]

EDUCATION_RULES = [
    required("school", "School is Required"),
    required("degree", "Degree is Required"),
    required("field_of_study", "FieldOfStudy is Required"),
    required("from", "From is Required"),
    required("description", "Description is Required"),
]


def parse_skills(skills: Union[str, List[str]]) -> List[str]:
    """Accept "python, sql" or ["python", "sql"]; return trimmed, non-empty entries."""
    if isinstance(skills, (list, tuple)):
        skills = ",".join(str(s) for s in skills)
    return [skill.strip() for skill in skills.split(",") if skill.strip()]


def _parsed_skills(data: dict) -> List[str]:
    skills = parse_skills(data["skills"])
    if not skills:
        raise ValidationError([field_error("skills", "Skills is Required", data["skills"])])
    return skills


def _apply_form(profile: DBProfile, data: dict, skills: List[str]):
    profile.company = data["company"]
    profile.website = data["website"]
    profile.location = data["location"]
    profile.designation = data["designation"]
    profile.skills = skills
    profile.bio = data["bio"]
    profile.github_username = data["github_username"]
    profile.social = {field: data[field] for field in SOCIAL_FIELDS}


def _own_profile(db: Session, identity: Identity) -> DBProfile:
    profile = db.query(DBProfile).filter(DBProfile.user_id == identity.id).first()
    if not profile:
        raise NotFoundError("No Profile Found")
    return profile


def _entry(data: dict, fields: tuple) -> dict:
    entry = {"id": new_id()}
    entry.update({field: data[field] for field in fields})
    entry["to"] = data.get("to") or ""
    entry["current"] = bool(data.get("current"))
    return entry


# --------------- Profile ---------------

@router.get("/me")
def my_profile(identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"profile": profile_to_dict(_own_profile(db, identity))}


@router.post("")
def create_profile(
    body: Optional[ProfileForm] = None,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = validate(body.model_dump() if body else {}, PROFILE_RULES)
    skills = _parsed_skills(data)
    owner = load_caller(db, identity)

    if db.query(DBProfile).filter(DBProfile.user_id == owner.id).first():
        raise ConflictError("Profile already exists")

    profile = DBProfile(user_id=owner.id, experience=[], education=[])
    _apply_form(profile, data, skills)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent create for the same user got there first
        db.rollback()
        raise ConflictError("Profile already exists")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Create profile failed")
        raise InternalError()
    return {"msg": "Profile is Created Successfully", "profile": profile_to_dict(profile)}


@router.put("")
def update_profile(
    body: Optional[ProfileForm] = None,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = validate(body.model_dump() if body else {}, PROFILE_RULES)
    skills = _parsed_skills(data)
    profile = _own_profile(db, identity)

    _apply_form(profile, data, skills)
    commit(db, "Update profile")
    return {"msg": "Profile is Updated Successfully", "profile": profile_to_dict(profile)}


@router.get("/all")
def list_profiles(db: Session = Depends(get_db)):
    profiles = db.query(DBProfile).order_by(DBProfile.created_at.desc()).all()
    return {"profiles": [profile_to_dict(p) for p in profiles]}


@router.get("/users/{user_id}")
def profile_of_user(user_id: str, db: Session = Depends(get_db)):
    profile = db.query(DBProfile).filter(DBProfile.user_id == user_id).first()
    if not profile:
        raise NotFoundError("No Profile Found for this user")
    return {"profile": profile_to_dict(profile)}


@router.delete("/users/{user_id}")
def delete_account(user_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a user together with their profile and posts. Allowed for the user and for admins."""
    if identity.id != user_id:
        caller = db.get(DBUser, identity.id)
        if not caller or not caller.is_admin:
            raise AuthError("User is not authorized")

    user = db.get(DBUser, user_id)
    if not user:
        raise NotFoundError("No User Found")

    db.query(DBProfile).filter(DBProfile.user_id == user_id).delete(synchronize_session=False)
    removed_posts = db.query(DBPost).filter(DBPost.user_id == user_id).delete(synchronize_session=False)
    db.delete(user)
    commit(db, "Delete account")

    logger.info("Account %s deleted by %s (%d posts removed)", user_id, identity.id, removed_posts)
    return {"msg": "Account is Deleted"}


# --------------- Experience ---------------

@router.put("/experience")
def add_experience(
    body: Optional[ExperienceForm] = None,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = validate(body.model_dump(by_alias=True) if body else {}, EXPERIENCE_RULES)
    profile = _own_profile(db, identity)

    entry = _entry(data, ("title", "company", "location", "from", "description"))
    profile.experience = [entry] + list(profile.experience or [])
    commit(db, "Add experience")
    return {"profile": profile_to_dict(profile)}


@router.delete("/experience/{exp_id}")
def delete_experience(exp_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = _own_profile(db, identity)

    remaining = [exp for exp in profile.experience or [] if exp.get("id") != exp_id]
    if len(remaining) == len(profile.experience or []):
        raise NotFoundError("Experience not exists")

    profile.experience = remaining
    commit(db, "Delete experience")
    return {"msg": "Experience is Deleted", "profile": profile_to_dict(profile)}


# --------------- Education ---------------

@router.put("/education")
def add_education(
    body: Optional[EducationForm] = None,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = validate(body.model_dump(by_alias=True) if body else {}, EDUCATION_RULES)
    profile = _own_profile(db, identity)

    entry = _entry(data, ("school", "degree", "field_of_study", "from", "description"))
    profile.education = [entry] + list(profile.education or [])
    commit(db, "Add education")
    return {"profile": profile_to_dict(profile)}


@router.delete("/education/{edu_id}")
def delete_education(edu_id: str, identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = _own_profile(db, identity)

    remaining = [edu for edu in profile.education or [] if edu.get("id") != edu_id]
    if len(remaining) == len(profile.education or []):
        raise NotFoundError("Education not exists")

    profile.education = remaining
    commit(db, "Delete education")
    return {"msg": "Education is Deleted", "profile": profile_to_dict(profile)}


@router.get("/{profile_id}")
def get_profile(profile_id: str, db: Session = Depends(get_db)):
    profile = db.get(DBProfile, profile_id)
    if not profile:
        raise NotFoundError("No Profile Found")
    return {"profile": profile_to_dict(profile)}

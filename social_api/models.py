"""Social API: request models.

Every field is optional at the schema level: presence and emptiness are
checked by the per-endpoint rules in ``validation`` so that all missing fields
are reported together.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class UserRegister(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PostCreate(BaseModel):
    text: Optional[str] = None
    image: Optional[str] = None


class CommentCreate(BaseModel):
    text: Optional[str] = None


class ProfileForm(BaseModel):
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    designation: Optional[str] = None
    skills: Optional[Union[str, List[str]]] = None
    bio: Optional[str] = None
    github_username: Optional[str] = None
    youtube: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


class ExperienceForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    current: Optional[bool] = None
    description: Optional[str] = None


class EducationForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    school: Optional[str] = None
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    current: Optional[bool] = None
    description: Optional[str] = None

from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContactInfo(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    linkedin: Optional[str] = None
    location: Optional[str] = None


class ExperienceEntry(BaseModel):
    company: Optional[str] = None
    location: Optional[str] = None
    dates: Optional[str] = None
    title: Optional[str] = None
    accomplishments: List[str] = Field(default_factory=list)

    @field_validator("accomplishments", mode="before")
    @classmethod
    def keep_string_accomplishments(cls, v):
        """Drop nulls and non-string entries the model sometimes emits."""
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, str)]


class EducationEntry(BaseModel):
    degree: Optional[str] = None
    institution: Optional[str] = None
    date: Optional[str] = None


Skills = Union[List[str], Dict[str, List[str]]]


class StructuredResumeModel(BaseModel):
    name: str
    contact_info: Optional[ContactInfo] = Field(None, alias="contactInfo")
    summary: Optional[str] = None
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: Optional[Skills] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name")
    @classmethod
    def name_must_be_present(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name must not be empty")
        return v

    @field_validator("experience", "education", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return v if v is not None else []

    @field_validator("skills", mode="before")
    @classmethod
    def normalize_skills(cls, v):
        if v is None or isinstance(v, list):
            return v
        if isinstance(v, dict):
            return {
                str(category): [s for s in (values or []) if isinstance(s, str)]
                for category, values in v.items()
                if isinstance(values, list) or values is None
            }
        return None

    def to_document(self) -> dict:
        """camelCase representation, as exchanged with clients."""
        return self.model_dump(by_alias=True)

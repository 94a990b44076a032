from typing import List, Literal, Optional
from pydantic import BaseModel, EmailStr, Field

Gender = Literal["male", "female", "other"]
Education = Literal["low", "medium", "high"]
Occupation = Literal["manual", "desk", "unemployed", "retired", "student", "other"]
Frequency = Literal["never", "rarely", "occasionally", "weekly", "daily"]
FamilyDisease = Literal[
    "dementia", "alzheimers", "parkinsons", "stroke",
    "diabetes", "hypertension", "depression", "other",
]
Relationship = Literal["mother", "father", "grandparent", "sibling", "other", "unknown"]


class FamilyHistoryEntry(BaseModel):
    disease: FamilyDisease
    hasDisease: Literal["yes", "no", "unknown"] = "unknown"
    relationship: Relationship = "unknown"


class Smoking(BaseModel):
    type: Optional[str] = "never"
    frequency: Frequency = "never"


class AlcoholUse(BaseModel):
    frequency: Frequency = "never"


class Sleep(BaseModel):
    durationHours: Optional[float] = Field(default=None, ge=0, le=24)
    quality: Literal["poor", "fair", "good", "excellent"] = "fair"


class Lifestyle(BaseModel):
    smoking: Smoking = Field(default_factory=Smoking)
    alcoholUse: AlcoholUse = Field(default_factory=AlcoholUse)
    physicalActivity: Literal["low", "moderate", "high"] = "low"
    sleep: Sleep = Field(default_factory=Sleep)


class MedicalHistory(BaseModel):
    hypertension: bool = False
    diabetes: bool = False
    depression: bool = False
    stroke: bool = False
    headTrauma: bool = False
    otherConditions: List[str] = Field(default_factory=list)


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(min_length=6)

    age: float
    gender: Gender

    education: Education = "low"
    occupation: Occupation = "other"

    familyHistory: List[FamilyHistoryEntry] = Field(default_factory=list)
    lifestyle: Lifestyle = Field(default_factory=Lifestyle)
    medicalHistory: MedicalHistory = Field(default_factory=MedicalHistory)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refreshToken: str


class ProfileUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""
    age: Optional[float] = Field(default=None, ge=1, le=150)
    gender: Optional[Gender] = None
    education: Optional[Education] = None
    occupation: Optional[Occupation] = None
    familyHistory: Optional[List[FamilyHistoryEntry]] = None
    lifestyle: Optional[Lifestyle] = None
    medicalHistory: Optional[MedicalHistory] = None

    def changes(self) -> dict:
        # nested sections are written whole, with their defaults filled in
        dumped = self.model_dump()
        return {field: dumped[field] for field in self.model_fields_set}


PROFILE_FIELDS = [
    "email", "name", "age", "gender", "education", "occupation",
    "familyHistory", "lifestyle", "medicalHistory",
]


def public_user(doc: dict) -> dict:
    """User document without the password hash."""
    user = {"id": str(doc["_id"])}
    for field in PROFILE_FIELDS:
        user[field] = doc.get(field)
    return user

"""
Data models for the Portal Service.
"""

from typing import Any, Dict, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """Portal user roles."""
    TEACHER = "teacher"
    STAFF = "staff"
    STUDENT = "student"
    GUEST = "guest"


class UserStatus(str, Enum):
    """Account status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class UserProfile(BaseModel):
    """A row of the ``profiles`` table."""
    model_config = ConfigDict(extra="allow")

    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: Optional[UserRole] = None

    # Personal
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None

    # Professional
    position: Optional[str] = None
    department: Optional[str] = None
    specialization: Optional[str] = None

    # Business
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_registration: Optional[str] = None
    tax_id: Optional[str] = None

    website: Optional[str] = None
    linkedin: Optional[str] = None

    status: Optional[UserStatus] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    last_login: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    specialization: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_registration: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None


class RoleUpdateRequest(BaseModel):
    """Admin request to change a user's role."""
    role: UserRole = Field(..., description="New role")


class News(BaseModel):
    """A row of the ``news`` table."""
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    excerpt: str
    content: str
    category: str
    date: str
    image: Optional[str] = None


class NewsCreate(BaseModel):
    title: str = Field(..., min_length=1)
    excerpt: str
    content: str
    category: str
    date: str
    image: Optional[str] = None


class NewsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    image: Optional[str] = None


class Training(BaseModel):
    """A row of the ``trainings`` table."""
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    description: str
    category: str
    duration: str
    trainer: str
    price: str
    date: str
    image: Optional[str] = None


class TrainingCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str
    category: str
    duration: str
    trainer: str
    price: str
    date: str
    image: Optional[str] = None


class TrainingUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[str] = None
    trainer: Optional[str] = None
    price: Optional[str] = None
    date: Optional[str] = None
    image: Optional[str] = None


class InvalidateRequest(BaseModel):
    """Admin request to drop cache entries by pattern."""
    pattern: str = Field(..., min_length=1, description="Regular expression matched against cache keys")

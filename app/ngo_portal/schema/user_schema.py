from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    ngo: Optional[str] = None

    class Config:
        extra = "ignore"


class LoginRequest(BaseModel):
    # plain str: an unknown or odd address is just a failed login
    email: str
    password: str


class RejectRequest(BaseModel):
    # left optional so a missing reason reaches the workflow and is reported as a validation error
    rejectionReason: Optional[str] = None


class RoleUpdate(BaseModel):
    role: str


class ParticipantSummary(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: Optional[str] = None

    class Config:
        from_attributes = True


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    ngo: Optional[str] = None
    image_url: Optional[str] = None
    documents: List[str] = []
    is_approved: Optional[bool] = None
    approval_status: Optional[str] = None
    rejection_reason: Optional[str] = None
    approval_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

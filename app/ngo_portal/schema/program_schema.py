from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from ngo_portal.schema.user_schema import ParticipantSummary

class ProgramUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    starting_date: Optional[datetime] = None
    ending_date: Optional[datetime] = None
    day: Optional[str] = None
    time: Optional[str] = None

    class Config:
        extra = "ignore"


class CompanySummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class ProgramOut(BaseModel):
    id: int
    title: str
    description: str
    starting_date: datetime
    ending_date: datetime
    day: str
    time: str
    image_url: Optional[str] = None
    company_id: Optional[int] = None
    company_owner: Optional[CompanySummary] = None
    participants: List[ParticipantSummary] = []

    class Config:
        from_attributes = True

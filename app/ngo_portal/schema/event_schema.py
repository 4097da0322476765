from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from ngo_portal.schema.user_schema import ParticipantSummary

class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    day: Optional[str] = None
    time: Optional[str] = None
    is_published: Optional[bool] = None

    class Config:
        extra = "ignore"


class EventOut(BaseModel):
    id: int
    title: str
    description: str
    date: datetime
    day: str
    time: str
    image_url: Optional[str] = None
    is_published: bool = False
    created_at: Optional[datetime] = None
    participants: List[ParticipantSummary] = []

    class Config:
        from_attributes = True

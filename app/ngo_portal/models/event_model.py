from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from ngo_portal.database import Base
from ngo_portal.models.participant_model import event_participants

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False)
    day = Column(String, nullable=False)
    time = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    participants = relationship(
        "User", secondary=event_participants, back_populates="events", order_by="User.id"
    )

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from ngo_portal.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="member", index=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    company = Column(String, nullable=True)
    ngo = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    documents = Column(JSON, nullable=False, default=list)

    # Only used for company / ngo accounts, NULL otherwise
    is_approved = Column(Boolean, nullable=True)
    approval_status = Column(String, nullable=True, index=True)  # pending, approved, rejected
    rejection_reason = Column(Text, nullable=True)
    approval_date = Column(DateTime, nullable=True)
    approved_by = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    events = relationship("Event", secondary="event_participants", back_populates="participants")
    programs = relationship("Program", secondary="program_participants", back_populates="participants")
    owned_programs = relationship("Program", back_populates="company_owner")

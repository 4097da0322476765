from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from ngo_portal.database import Base
from ngo_portal.models.participant_model import program_participants

class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)

    # NULL for programs created by an admin
    company_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    starting_date = Column(DateTime, nullable=False)
    ending_date = Column(DateTime, nullable=False)
    day = Column(String, nullable=False)
    time = Column(String, nullable=False)
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    company_owner = relationship("User", back_populates="owned_programs")
    participants = relationship(
        "User", secondary=program_participants, back_populates="programs", order_by="User.id"
    )

from sqlalchemy import Table, Column, Integer, DateTime, ForeignKey
from datetime import datetime
from ngo_portal.database import Base

# The composite primary keys are what keep an account from being enrolled twice:
# a second INSERT for the same pair fails inside the database.

event_participants = Table(
    "event_participants",
    Base.metadata,
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("joined_at", DateTime, default=datetime.utcnow, nullable=False),
)

program_participants = Table(
    "program_participants",
    Base.metadata,
    Column("program_id", Integer, ForeignKey("programs.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("joined_at", DateTime, default=datetime.utcnow, nullable=False),
)

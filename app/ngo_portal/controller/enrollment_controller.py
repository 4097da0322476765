"""
Joining and leaving Events and Programs.

Both resources keep their participants in an association table whose primary
key is (resource id, user id). Joining is one INSERT: if the pair is already
there the database refuses it, so two concurrent joins can never both land.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict
import logging

from sqlalchemy import Table, delete, insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ngo_portal.approval import requires_approval
from ngo_portal.controller.ws_manager import participant_manager
from ngo_portal.exceptions import AuthorizationError, ConflictError, NotFoundError
from ngo_portal.models.event_model import Event
from ngo_portal.models.participant_model import event_participants, program_participants
from ngo_portal.models.program_model import Program
from ngo_portal.models.user_model import User
from ngo_portal.schema.event_schema import EventOut
from ngo_portal.schema.program_schema import ProgramOut
from ngo_portal.schema.user_schema import ParticipantSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentTarget:
    label: str
    model: Any
    table: Table
    fk_column: str
    schema: Any
    # companies and NGOs may not sign up as participants
    members_only: bool = False

    def serialize(self, resource) -> Dict[str, Any]:
        return self.schema.model_validate(resource).model_dump()


EVENTS = EnrollmentTarget("event", Event, event_participants, "event_id", EventOut)
PROGRAMS = EnrollmentTarget("program", Program, program_participants, "program_id", ProgramOut, members_only=True)


def get_resource(db: Session, target: EnrollmentTarget, resource_id: int):
    resource = db.query(target.model).filter(target.model.id == resource_id).first()
    if not resource:
        raise NotFoundError(target.label.capitalize(), resource_id)
    return resource


# ------------------ Join ------------------
async def join_controller(db: Session, target: EnrollmentTarget, resource_id: int, user: User):
    get_resource(db, target, resource_id)

    if target.members_only and requires_approval(user.role):
        raise AuthorizationError("Companies and NGOs cannot register as participants")

    fk = getattr(target.table.c, target.fk_column)
    try:
        db.execute(insert(target.table).values({fk: resource_id, target.table.c.user_id: user.id}))
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("User %s already in %s %s", user.id, target.label, resource_id)
        raise ConflictError(
            f"You are already registered for this {target.label}",
            details={f"{target.label}Id": resource_id, "userId": user.id},
        )

    logger.info("User %s joined %s %s", user.id, target.label, resource_id)
    resource = get_resource(db, target, resource_id)
    db.refresh(resource)

    await participant_manager.broadcast({
        "event": "participant_joined",
        "data": {"resource": target.label, "resource_id": resource_id, "user_id": user.id},
    })
    return target.serialize(resource)


# ------------------ Remove ------------------
async def remove_participant_controller(db: Session, target: EnrollmentTarget, resource_id: int, user_id: int):
    get_resource(db, target, resource_id)

    fk = getattr(target.table.c, target.fk_column)
    result = db.execute(
        delete(target.table).where(fk == resource_id, target.table.c.user_id == user_id)
    )
    db.commit()
    if result.rowcount:
        logger.info("Removed user %s from %s %s", user_id, target.label, resource_id)

    resource = get_resource(db, target, resource_id)
    db.refresh(resource)
    return target.serialize(resource)


# ------------------ List participants ------------------
async def list_participants_controller(db: Session, target: EnrollmentTarget, resource_id: int):
    resource = get_resource(db, target, resource_id)
    participants = [ParticipantSummary.model_validate(p).model_dump() for p in resource.participants]
    return {
        "participants": participants,
        "totalParticipants": len(participants),
        f"{target.label}Title": resource.title,
    }


# ------------------ Cascade on account delete ------------------
def purge_account_participation(db: Session, user_id: int):
    """Drop an account from every participant list and release its programs.

    Does not commit; the caller deletes the account in the same transaction.
    """
    events_removed = db.execute(
        delete(event_participants).where(event_participants.c.user_id == user_id)
    ).rowcount
    programs_removed = db.execute(
        delete(program_participants).where(program_participants.c.user_id == user_id)
    ).rowcount
    db.execute(update(Program).where(Program.company_id == user_id).values(company_id=None))
    logger.info(
        "Cleared user %s from %s event(s) and %s program(s)", user_id, events_removed, programs_removed
    )


# ------------------ Account participation ------------------
async def retrieve_user_events(db: Session, user_id: int):
    events = (
        db.query(Event)
        .join(event_participants, event_participants.c.event_id == Event.id)
        .filter(event_participants.c.user_id == user_id)
        .order_by(Event.date)
        .all()
    )
    return [EVENTS.serialize(e) for e in events]


async def retrieve_user_programs(db: Session, user_id: int):
    programs = (
        db.query(Program)
        .join(program_participants, program_participants.c.program_id == Program.id)
        .filter(program_participants.c.user_id == user_id)
        .order_by(Program.starting_date)
        .all()
    )
    return [PROGRAMS.serialize(p) for p in programs]


# ------------------ Participation statistics ------------------
async def participation_stats_controller(db: Session):
    events = db.query(Event).all()
    programs = db.query(Program).all()

    event_ids = [p.id for e in events for p in e.participants]
    program_ids = [p.id for pr in programs for p in pr.participants]
    counts = Counter(event_ids + program_ids)

    total_events = len(events)
    total_programs = len(programs)

    return {
        "statistics": {
            "totalEvents": total_events,
            "totalPrograms": total_programs,
            "totalParticipantsInEvents": len(event_ids),
            "totalParticipantsInPrograms": len(program_ids),
            "totalUniqueParticipants": len(counts),
            "averageParticipantsPerEvent": round(len(event_ids) / total_events, 2) if total_events else 0,
            "averageParticipantsPerProgram": round(len(program_ids) / total_programs, 2) if total_programs else 0,
        },
        "events": [
            {"id": e.id, "title": e.title, "totalParticipants": len(e.participants)} for e in events
        ],
        "programs": [
            {"id": p.id, "title": p.title, "totalParticipants": len(p.participants)} for p in programs
        ],
        "topParticipants": [
            {"userId": user_id, "participationCount": count} for user_id, count in counts.most_common(10)
        ],
    }

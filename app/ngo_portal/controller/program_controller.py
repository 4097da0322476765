from datetime import datetime, timedelta
from sqlalchemy.orm import Session, selectinload
import logging

from ngo_portal.constant_file import ROLE_COMPANY
from ngo_portal.controller.enrollment_controller import PROGRAMS, get_resource
from ngo_portal.exceptions import AuthorizationError, ValidationError
from ngo_portal.models.participant_model import program_participants
from ngo_portal.models.program_model import Program
from ngo_portal.models.user_model import User

logger = logging.getLogger(__name__)


def _check_dates(starting_date, ending_date):
    if starting_date and ending_date and ending_date < starting_date:
        raise ValidationError("Ending date cannot be before starting date")


def _check_owner(program: Program, user: User, action: str):
    # admins manage every program, companies only their own
    if user.role == ROLE_COMPANY and program.company_id != user.id:
        raise AuthorizationError(f"Access denied. You can only {action} your own programs.")


def _with_stats(program: Program):
    data = PROGRAMS.serialize(program)
    data["companyName"] = program.company_owner.name if program.company_owner else "Admin Created"
    data["totalParticipants"] = len(program.participants)
    return data

# ------------------ Add New Program ------------------
async def add_program_controller(db: Session, program_data: dict, creator: User):
    _check_dates(program_data.get("starting_date"), program_data.get("ending_date"))
    new_program = Program(**program_data)
    if creator.role == ROLE_COMPANY:
        new_program.company_id = creator.id
    db.add(new_program)
    db.commit()
    db.refresh(new_program)
    logger.info("User %s created program %s", creator.id, new_program.id)
    return PROGRAMS.serialize(new_program)

# ------------------ Retrieve Programs ------------------
async def retrieve_programs_controller(db: Session, company_id: int = None):
    query = db.query(Program).options(selectinload(Program.company_owner))
    if company_id is not None:
        query = query.filter(Program.company_id == company_id)
    return [PROGRAMS.serialize(p) for p in query.order_by(Program.starting_date).all()]

async def retrieve_programs_with_participants_controller(db: Session, company_id: int = None):
    query = db.query(Program).options(
        selectinload(Program.participants), selectinload(Program.company_owner)
    )
    if company_id is not None:
        query = query.filter(Program.company_id == company_id)
    programs = [_with_stats(p) for p in query.order_by(Program.starting_date).all()]
    return {
        "programs": programs,
        "totalPrograms": len(programs),
        "totalParticipantsAcrossAllPrograms": sum(p["totalParticipants"] for p in programs),
    }

async def retrieve_program_controller(db: Session, program_id: int):
    return PROGRAMS.serialize(get_resource(db, PROGRAMS, program_id))

# ------------------ Update Program ------------------
async def update_program_controller(db: Session, program_id: int, update_data: dict, user: User):
    program = get_resource(db, PROGRAMS, program_id)
    _check_owner(program, user, "update")
    _check_dates(
        update_data.get("starting_date", program.starting_date),
        update_data.get("ending_date", program.ending_date),
    )
    for key, val in update_data.items():
        setattr(program, key, val)

    db.commit()
    db.refresh(program)
    logger.info("User %s updated program %s", user.id, program_id)
    return PROGRAMS.serialize(program)

# ------------------ Delete Program ------------------
async def delete_program_controller(db: Session, program_id: int, user: User):
    program = get_resource(db, PROGRAMS, program_id)
    _check_owner(program, user, "delete")
    db.delete(program)
    db.commit()
    logger.info("User %s deleted program %s", user.id, program_id)
    return {"id": program_id}

# ------------------ Company dashboard ------------------
async def company_dashboard_controller(db: Session, company: User):
    programs = (
        db.query(Program)
        .options(selectinload(Program.participants))
        .filter(Program.company_id == company.id)
        .order_by(Program.starting_date.desc())
        .all()
    )
    now = datetime.utcnow()
    week_ago = now - timedelta(days=7)
    program_ids = [p.id for p in programs]

    recent = 0
    if program_ids:
        recent = (
            db.query(program_participants)
            .filter(
                program_participants.c.program_id.in_(program_ids),
                program_participants.c.joined_at > week_ago,
            )
            .count()
        )

    return {
        "stats": {
            "totalPrograms": len(programs),
            "totalParticipants": sum(len(p.participants) for p in programs),
            "activePrograms": len([p for p in programs if p.ending_date > now]),
            "recentRegistrations": recent,
        },
        "programs": [PROGRAMS.serialize(p) for p in programs[:5]],
    }

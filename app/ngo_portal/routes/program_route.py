from fastapi import (
    APIRouter, status,
    Form, File, UploadFile, Depends, Body
)
from typing import Optional
from sqlalchemy.orm import Session
from ngo_portal.database import get_db
from ngo_portal.controller.program_controller import *
from ngo_portal.controller.enrollment_controller import (
    PROGRAMS,
    join_controller,
    list_participants_controller,
    remove_participant_controller,
)
from ngo_portal.models.user_model import User
from ngo_portal.response_model import ResponseModel
from ngo_portal.routes.parsing import parse_date
from ngo_portal.schema.participant_schema import ParticipantRemove
from ngo_portal.schema.program_schema import ProgramUpdate
from ngo_portal.security import get_current_user, require_admin, require_admin_or_company, require_company
from ngo_portal.uploads import IMAGE, has_file, save_upload

router = APIRouter()

# ----------------------- ADD Program -----------------------
@router.post("/create/program", response_description="Create a new program", status_code=status.HTTP_201_CREATED)
async def add_program_data(
    title: str = Form(...),
    description: str = Form(...),
    startingDate: str = Form(...),
    endingDate: str = Form(...),
    day: str = Form(...),
    time: str = Form(...),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_admin_or_company),
    db: Session = Depends(get_db)
):
    program_data = {
        "title": title.strip(),
        "description": description.strip(),
        "starting_date": parse_date(startingDate, "startingDate"),
        "ending_date": parse_date(endingDate, "endingDate"),
        "day": day,
        "time": time,
    }
    if has_file(image):
        program_data["image_url"] = save_upload(image, IMAGE)

    new_program = await add_program_controller(db, program_data, current_user)
    return ResponseModel(new_program, "Program created successfully")


# ----------------------- GET Programs -----------------------
@router.get("/getallprogram", response_description="Retrieve all programs")
async def get_programs(db: Session = Depends(get_db)):
    programs = await retrieve_programs_controller(db)
    return ResponseModel(programs, "Programs retrieved successfully")


@router.get("/getallprogramwithparticipants", response_description="Retrieve programs with participants")
async def get_programs_with_participants(db: Session = Depends(get_db)):
    programs = await retrieve_programs_with_participants_controller(db)
    return ResponseModel(programs, "Programs retrieved successfully")


@router.get("/admin/getallprograms", response_description="Retrieve all programs for admin")
async def get_programs_for_admin(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    programs = await retrieve_programs_with_participants_controller(db)
    return ResponseModel(programs, "Programs retrieved successfully")


@router.get("/company/programs", response_description="Programs owned by the current company")
async def get_company_programs(company: User = Depends(require_company), db: Session = Depends(get_db)):
    programs = await retrieve_programs_with_participants_controller(db, company_id=company.id)
    return ResponseModel(programs, "Programs retrieved successfully")


@router.get("/company/dashboard", response_description="Company dashboard statistics")
async def get_company_dashboard(company: User = Depends(require_company), db: Session = Depends(get_db)):
    stats = await company_dashboard_controller(db, company)
    return ResponseModel(stats, "Dashboard retrieved successfully")


@router.get("/getprogram/{program_id}", response_description="Retrieve one program")
async def get_program(program_id: int, db: Session = Depends(get_db)):
    program = await retrieve_program_controller(db, program_id)
    return ResponseModel(program, "Program found")


# ------------------ Update Program ------------------
@router.put("/update/{program_id}", response_description="Program updated successfully")
async def update_program(
    program_id: int,
    update_data: ProgramUpdate = Body(...),
    current_user: User = Depends(require_admin_or_company),
    db: Session = Depends(get_db)
):
    updated = await update_program_controller(
        db, program_id, update_data.model_dump(exclude_none=True), current_user
    )
    return ResponseModel(updated, "Program updated successfully")


# ------------------ Delete Program ------------------
@router.delete("/delete/{program_id}", response_description="Program deleted successfully")
async def delete_program(
    program_id: int,
    current_user: User = Depends(require_admin_or_company),
    db: Session = Depends(get_db)
):
    deleted = await delete_program_controller(db, program_id, current_user)
    return ResponseModel(deleted, "Program deleted successfully")


# ------------------ Participants ------------------
@router.post("/add/{program_id}/participants", response_description="Join a program")
async def join_program(program_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    program = await join_controller(db, PROGRAMS, program_id, current_user)
    return ResponseModel(program, "Successfully registered")


@router.delete("/{program_id}/deleteparticipants", response_description="Remove a participant")
async def remove_program_participant(
    program_id: int,
    body: ParticipantRemove = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    program = await remove_participant_controller(db, PROGRAMS, program_id, body.userId)
    return ResponseModel(program, "Participant removed successfully")


@router.get("/{program_id}/participants", response_description="List program participants")
async def get_program_participants(program_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    participants = await list_participants_controller(db, PROGRAMS, program_id)
    return ResponseModel(participants, "Participants retrieved successfully")


__all__ = ["router"]

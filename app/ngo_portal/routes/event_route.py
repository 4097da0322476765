from fastapi import (
    APIRouter, status,
    Form, File, UploadFile, Depends, Body
)
from typing import Optional
from sqlalchemy.orm import Session
from ngo_portal.database import get_db
from ngo_portal.controller.event_controller import *
from ngo_portal.controller.enrollment_controller import (
    EVENTS,
    join_controller,
    list_participants_controller,
    remove_participant_controller,
)
from ngo_portal.models.user_model import User
from ngo_portal.response_model import ResponseModel
from ngo_portal.routes.parsing import parse_date
from ngo_portal.schema.event_schema import EventUpdate
from ngo_portal.schema.participant_schema import ParticipantRemove
from ngo_portal.security import get_current_user, require_admin
from ngo_portal.uploads import IMAGE, has_file, save_upload

router = APIRouter()

# ----------------------- ADD Event -----------------------
@router.post("/create/event", response_description="Create a new event", status_code=status.HTTP_201_CREATED)
async def add_event_data(
    title: str = Form(...),
    description: str = Form(...),
    date: str = Form(..., description="Date of the event (e.g., 'YYYY-MM-DD')."),
    day: str = Form(...),
    time: str = Form(..., description="Time of the event (e.g., 'HH:MM AM/PM')."),
    is_published: bool = Form(False),
    image: Optional[UploadFile] = File(None, description="Optional banner image for the event."),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    event_data = {
        "title": title.strip(),
        "description": description.strip(),
        "date": parse_date(date, "date"),
        "day": day,
        "time": time,
        "is_published": is_published,
    }
    if has_file(image):
        event_data["image_url"] = save_upload(image, IMAGE)

    new_event = await add_event_controller(db, event_data)
    return ResponseModel(new_event, "Event created successfully")


# ----------------------- GET ALL Events -----------------------
@router.get("/getallevent", response_description="Retrieve all events")
async def get_events(published_only: bool = False, db: Session = Depends(get_db)):
    events = await retrieve_events_controller(db, published_only)
    return ResponseModel(events, "Events retrieved successfully")


@router.get("/getalleventwithparticipants", response_description="Retrieve events with participants")
async def get_events_with_participants(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    events = await retrieve_events_with_participants_controller(db)
    return ResponseModel(events, "Events retrieved successfully")


@router.get("/getevent/{event_id}", response_description="Retrieve one event")
async def get_event(event_id: int, db: Session = Depends(get_db)):
    event = await retrieve_event_controller(db, event_id)
    return ResponseModel(event, "Event found")


# ------------------ Update Event ------------------
@router.put("/update/{event_id}", response_description="updated event successfully")
async def update_event(
    event_id: int,
    update_data: EventUpdate = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    updated_event = await update_event_controller(db, event_id, update_data.model_dump(exclude_none=True))
    return ResponseModel(updated_event, "Event updated successfully")


# ------------------ Delete Event ------------------
@router.delete("/delete/{event_id}", response_description="deleted event successfully")
async def delete_event(event_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    deleted_event = await delete_event_controller(db, event_id)
    return ResponseModel(deleted_event, "Event deleted successfully")


# ------------------ Participants ------------------
@router.post("/{event_id}/participants", response_description="Join an event")
async def join_event(event_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    event = await join_controller(db, EVENTS, event_id, current_user)
    return ResponseModel(event, "Successfully registered")


@router.delete("/{event_id}/participants", response_description="Remove a participant")
async def remove_event_participant(
    event_id: int,
    body: ParticipantRemove = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    event = await remove_participant_controller(db, EVENTS, event_id, body.userId)
    return ResponseModel(event, "Participant removed successfully")


@router.get("/{event_id}/getallparticipants", response_description="List event participants")
async def get_event_participants(event_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    participants = await list_participants_controller(db, EVENTS, event_id)
    return ResponseModel(participants, "Participants retrieved successfully")


__all__ = ["router"]

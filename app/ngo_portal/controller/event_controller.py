from sqlalchemy.orm import Session, selectinload
import logging

from ngo_portal.controller.enrollment_controller import EVENTS, get_resource
from ngo_portal.models.event_model import Event

logger = logging.getLogger(__name__)

# ------------------ Add New Event ------------------
async def add_event_controller(db: Session, event_data: dict):
    new_event = Event(**event_data)
    db.add(new_event)
    db.commit()
    db.refresh(new_event)
    logger.info("Created event %s", new_event.id)
    return EVENTS.serialize(new_event)

# ------------------ Retrieve ALL Events ------------------
async def retrieve_events_controller(db: Session, published_only: bool = False):
    query = db.query(Event).options(selectinload(Event.participants))
    if published_only:
        query = query.filter(Event.is_published.is_(True))
    return [EVENTS.serialize(e) for e in query.order_by(Event.date).all()]

# ------------------ Retrieve Events with participant counts ------------------
async def retrieve_events_with_participants_controller(db: Session):
    events = db.query(Event).options(selectinload(Event.participants)).order_by(Event.date).all()
    result = []
    for event in events:
        data = EVENTS.serialize(event)
        data["totalParticipants"] = len(event.participants)
        result.append(data)
    return {
        "events": result,
        "totalEvents": len(result),
        "totalParticipantsAcrossAllEvents": sum(e["totalParticipants"] for e in result),
    }

# ------------------ Retrieve Event by id ------------------
async def retrieve_event_controller(db: Session, event_id: int):
    return EVENTS.serialize(get_resource(db, EVENTS, event_id))

# ------------------ Update Event ------------------
async def update_event_controller(db: Session, event_id: int, update_data: dict):
    event = get_resource(db, EVENTS, event_id)
    for key, val in update_data.items():
        setattr(event, key, val)

    db.commit()
    db.refresh(event)
    logger.info("Updated event %s", event_id)
    return EVENTS.serialize(event)

# ------------------ Delete Event ------------------
async def delete_event_controller(db: Session, event_id: int):
    event = get_resource(db, EVENTS, event_id)
    db.delete(event)
    db.commit()
    logger.info("Deleted event %s", event_id)
    return {"id": event_id}

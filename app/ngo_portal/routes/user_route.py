from fastapi import (
    APIRouter, WebSocket, WebSocketDisconnect, status,
    Form, File, UploadFile, Depends, Body
)
from typing import List, Optional
from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError
import re
from sqlalchemy.orm import Session
from ngo_portal.database import get_db
from ngo_portal.controller.user_controller import *
from ngo_portal.controller.enrollment_controller import (
    participation_stats_controller,
    retrieve_user_events,
    retrieve_user_programs,
)
from ngo_portal.controller.ws_manager import admin_manager
from ngo_portal.exceptions import AuthenticationError, ValidationError
from ngo_portal.models.user_model import User
from ngo_portal.response_model import ResponseModel
from ngo_portal.schema.user_schema import LoginRequest, RejectRequest, RoleUpdate, UserUpdate
from ngo_portal.constant_file import ROLE_ADMIN
from ngo_portal.security import get_current_user, require_admin, resolve_token_user

router = APIRouter()

# same rules pydantic applies to EmailStr fields
email_address = TypeAdapter(EmailStr)

# ----------------------- REGISTER -----------------------
@router.post("/register", response_description="Register account", status_code=status.HTTP_201_CREATED)
async def register(
    name: str = Form(None),
    email: str = Form(None),
    password: str = Form(None),
    role: str = Form("member"),
    phone: str = Form(None),
    address: str = Form(None),
    company: str = Form(None),
    ngo: str = Form(None),
    image: Optional[UploadFile] = File(None),
    documents: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db)
):
    if email:
        try:
            email_address.validate_python(email.strip())
        except PydanticValidationError:
            raise ValidationError(f"Invalid email: {email}")
    if name and re.match(r"[^@]+@[^@]+\.[^@]+", name):
        raise ValidationError(f"Invalid name: {name}", details={"hint": "Full name should not be an email"})

    user_data = {
        "name": name,
        "email": email,
        "password": password,
        "role": role,
        "phone": phone,
        "address": address,
        "company": company,
        "ngo": ngo,
    }
    new_user = await register_user(db, user_data, image, documents)
    return ResponseModel(new_user, "User registered successfully")


# ----------------------- LOGIN -----------------------
@router.post("/login", response_description="User login")
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    result = await user_login(db, credentials.email, credentials.password)
    return ResponseModel(result, "Login successful")


# ----------------------- PROFILE -----------------------
@router.get("/profile", response_description="Current user profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return ResponseModel(serialize_user(current_user), "Profile retrieved successfully")


@router.put("/profile", response_description="Update current user profile")
async def update_profile_data(
    name: str = Form(None),
    phone: str = Form(None),
    address: str = Form(None),
    company: str = Form(None),
    ngo: str = Form(None),
    image: Optional[UploadFile] = File(None),
    documents: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    update_data = UserUpdate(name=name, phone=phone, address=address, company=company, ngo=ngo)
    updated = await update_profile(db, current_user, update_data.model_dump(exclude_none=True), image, documents)
    return ResponseModel(updated, "User updated successfully")


# ----------------------- MY PARTICIPATION -----------------------
@router.get("/events", response_description="Events the current user joined")
async def get_my_events(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    events = await retrieve_user_events(db, current_user.id)
    return ResponseModel(events, "Events retrieved successfully")


@router.get("/programs", response_description="Programs the current user joined")
async def get_my_programs(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    programs = await retrieve_user_programs(db, current_user.id)
    return ResponseModel(programs, "Programs retrieved successfully")


# ----------------------- ADMIN: USERS -----------------------
@router.get("/getalluser", response_description="Retrieve all users")
async def get_users(role: Optional[str] = None, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    users = await retrieve_users(db, role)
    return ResponseModel(users, "Users retrieved successfully")


@router.get("/companies", response_description="Retrieve companies with program stats")
async def get_companies(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    companies = await retrieve_companies(db)
    return ResponseModel(companies, "Companies retrieved successfully")


@router.put("/update/{user_id}/role", response_description="Change a user's role")
async def change_role(
    user_id: int,
    update_data: RoleUpdate = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    updated = await update_user_role(db, user_id, update_data.role)
    return ResponseModel(updated, "User role updated")


@router.delete("/delete/{user_id}", response_description="Delete a user")
async def delete_user_data(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    deleted = await delete_user(db, user_id)
    return ResponseModel(deleted, "User deleted")


@router.get("/participation-stats", response_description="Participation statistics")
async def get_participation_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    stats = await participation_stats_controller(db)
    return ResponseModel(stats, "Participation statistics retrieved successfully")


# ----------------------- ADMIN: APPROVALS -----------------------
@router.get("/pending-approvals", response_description="Companies and NGOs awaiting approval")
async def get_pending_approvals(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    pending = await retrieve_pending_approvals(db)
    return ResponseModel(pending, "Pending approvals retrieved successfully")


@router.put("/approve/{user_id}", response_description="Approve a company or NGO")
async def approve(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    approved = await approve_user(db, user_id, admin)
    return ResponseModel(approved, f"{approved['role']} approved successfully")


@router.put("/reject/{user_id}", response_description="Reject a company or NGO")
async def reject(
    user_id: int,
    body: Optional[RejectRequest] = Body(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    reason = body.rejectionReason if body else None
    rejected = await reject_user(db, user_id, reason, admin)
    return ResponseModel(rejected, f"{rejected['role']} rejected successfully")


# ----------------------- WEBSOCKET -----------------------
@router.websocket("/ws/admin")
async def websocket_admin(websocket: WebSocket, token: str, db: Session = Depends(get_db)):
    # reload the account so a deleted or demoted admin is refused
    try:
        user = resolve_token_user(db, token)
    except AuthenticationError:
        await websocket.close(code=1008)
        return
    if user.role != ROLE_ADMIN:
        await websocket.close(code=1008)
        return

    await admin_manager.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        admin_manager.disconnect(websocket)


__all__ = ["router"]

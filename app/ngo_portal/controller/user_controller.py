from typing import List, Optional
import logging

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ngo_portal import approval
from ngo_portal.constant_file import ALL_ROLES, ROLE_ADMIN, ROLE_COMPANY, ROLE_MEMBER, ROLE_NGO, max_documents
from ngo_portal.controller.enrollment_controller import purge_account_participation
from ngo_portal.controller.ws_manager import admin_manager
from ngo_portal.cryptography import encrypt_password, verify_password
from ngo_portal.exceptions import (
    AccountNotApprovedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ngo_portal.models.participant_model import program_participants
from ngo_portal.models.program_model import Program
from ngo_portal.models.user_model import User
from ngo_portal.schema.user_schema import UserOut
from ngo_portal.security import create_access_token
from ngo_portal.uploads import DOCUMENT, IMAGE, check_extension, has_file, save_upload

logger = logging.getLogger(__name__)


def serialize_user(user: User):
    return UserOut.model_validate(user).model_dump()


def _check_role(role: str):
    if role not in ALL_ROLES:
        raise ValidationError(f"Invalid role: {role}", details={"allowed": list(ALL_ROLES)})


async def retrieve_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


async def retrieve_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    return user


# ------------------ Register ------------------
async def register_user(
    db: Session,
    user_data: dict,
    image: Optional[UploadFile] = None,
    documents: Optional[List[UploadFile]] = None,
):
    name = (user_data.get("name") or "").strip()
    email = (user_data.get("email") or "").strip().lower()
    password = user_data.get("password") or ""
    if not name or not email or not password:
        raise ValidationError("Name, email, and password are required")

    role = user_data.get("role") or ROLE_MEMBER
    _check_role(role)
    if role == ROLE_ADMIN:
        raise ValidationError("Admin accounts cannot be self-registered")

    documents = [doc for doc in (documents or []) if has_file(doc)]
    if role == ROLE_NGO and not documents:
        raise ValidationError("Documents are required for NGO registration")
    if len(documents) > max_documents:
        raise ValidationError(f"At most {max_documents} documents can be uploaded")

    if await retrieve_user_by_email(db, email):
        raise ConflictError("User already exists", details={"email": email})

    # reject bad files before anything is written to disk
    if has_file(image):
        check_extension(image, IMAGE)
    for doc in documents:
        check_extension(doc, DOCUMENT)

    new_user = User(
        name=name,
        email=email,
        password=encrypt_password(password),
        role=role,
        phone=user_data.get("phone") or "",
        address=user_data.get("address") or "",
        company=user_data.get("company"),
        ngo=user_data.get("ngo"),
        documents=[],
    )
    approval.write_state(new_user, approval.initial_state(role))
    if has_file(image):
        new_user.image_url = save_upload(image, IMAGE)
    if documents:
        new_user.documents = [save_upload(doc, DOCUMENT) for doc in documents]

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists", details={"email": email})
    db.refresh(new_user)
    logger.info("Registered user %s (role=%s)", new_user.id, new_user.role)

    if approval.requires_approval(new_user.role):
        await admin_manager.broadcast({
            "event": "new_registration",
            "data": {
                "id": new_user.id,
                "name": new_user.name,
                "email": new_user.email,
                "role": new_user.role,
                "approval_status": new_user.approval_status,
            },
        })
    return serialize_user(new_user)


# -------------------- Login -----------------
async def user_login(db: Session, email: str, password: str):
    user = await retrieve_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError("Invalid credentials")

    # identity is confirmed at this point; the gate below only decides whether the account may be used
    state = approval.read_state(user)
    if not approval.can_use_account(user):
        logger.info("Login by unapproved %s %s (status=%s)", user.role, user.id, state.status.value)
        raise AccountNotApprovedError(state.status.value, state.reason)

    result = {
        "token": create_access_token(user),
        "role": user.role,
        "user": serialize_user(user),
    }
    if state is not None:
        result["isApproved"] = user.is_approved
        result["approvalStatus"] = user.approval_status
        result["rejectionReason"] = user.rejection_reason
    logger.info("User %s logged in", user.id)
    return result


# ------------------ Profile ------------------
async def update_profile(
    db: Session,
    user: User,
    update_data: dict,
    image: Optional[UploadFile] = None,
    documents: Optional[List[UploadFile]] = None,
):
    documents = [doc for doc in (documents or []) if has_file(doc)]
    if len(documents) > max_documents:
        raise ValidationError(f"At most {max_documents} documents can be uploaded")
    if has_file(image):
        check_extension(image, IMAGE)
    for doc in documents:
        check_extension(doc, DOCUMENT)

    for key, val in update_data.items():
        setattr(user, key, val)
    if has_file(image):
        user.image_url = save_upload(image, IMAGE)
    if documents:
        user.documents = [save_upload(doc, DOCUMENT) for doc in documents]

    db.commit()
    db.refresh(user)
    return serialize_user(user)


# ------------------ Admin: users ------------------
async def retrieve_users(db: Session, role: Optional[str] = None):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return [serialize_user(u) for u in query.order_by(User.id).all()]


async def retrieve_companies(db: Session):
    companies = db.query(User).filter(User.role == ROLE_COMPANY).order_by(User.id).all()
    result = []
    for company in companies:
        program_count = db.query(func.count(Program.id)).filter(Program.company_id == company.id).scalar()
        participant_count = (
            db.query(func.count(program_participants.c.user_id))
            .join(Program, Program.id == program_participants.c.program_id)
            .filter(Program.company_id == company.id)
            .scalar()
        )
        data = serialize_user(company)
        data["programCount"] = program_count or 0
        data["participantCount"] = participant_count or 0
        result.append(data)
    return {"companies": result, "totalCompanies": len(result)}


async def update_user_role(db: Session, user_id: int, role: str):
    _check_role(role)
    user = await retrieve_user(db, user_id)
    if user.role == role:
        return serialize_user(user)

    was_in_workflow = approval.requires_approval(user.role)
    user.role = role
    if not approval.requires_approval(role):
        approval.write_state(user, None)
    elif not was_in_workflow:
        approval.write_state(user, approval.initial_state(role))
    db.commit()
    db.refresh(user)
    logger.info("User %s role changed to %s", user.id, role)
    return serialize_user(user)


async def delete_user(db: Session, user_id: int):
    user = await retrieve_user(db, user_id)
    try:
        purge_account_participation(db, user.id)
        db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted user %s", user_id)
    return {"id": user_id}


# ------------------ Approval workflow ------------------
async def retrieve_pending_approvals(db: Session):
    pending = (
        db.query(User)
        .filter(
            User.role.in_(approval.APPROVAL_ROLES),
            User.approval_status == approval.ApprovalStatus.PENDING.value,
        )
        .order_by(User.created_at)
        .all()
    )
    return [serialize_user(u) for u in pending]


async def approve_user(db: Session, user_id: int, admin: User):
    user = await retrieve_user(db, user_id)
    approval.approve(user, admin.id)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s approved %s %s", admin.id, user.role, user.id)

    await admin_manager.broadcast({
        "event": "account_approved",
        "data": {"id": user.id, "role": user.role},
    })
    return serialize_user(user)


async def reject_user(db: Session, user_id: int, reason: Optional[str], admin: User):
    if not (reason or "").strip():
        raise ValidationError("Rejection reason is required")
    user = await retrieve_user(db, user_id)
    approval.reject(user, reason, admin.id)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s rejected %s %s", admin.id, user.role, user.id)

    await admin_manager.broadcast({
        "event": "account_rejected",
        "data": {"id": user.id, "role": user.role, "rejection_reason": user.rejection_reason},
    })
    return serialize_user(user)

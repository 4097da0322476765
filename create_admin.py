#!/usr/bin/env python3
"""
Bootstrap the first admin account.

Admins cannot register through the API, so the first one is created here
from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME. Does nothing if an admin
already exists.
"""
import logging
import os
import sys

from dotenv import load_dotenv

from ngo_portal.constant_file import ROLE_ADMIN
from ngo_portal.cryptography import encrypt_password
from ngo_portal.database import Base, SessionLocal, engine
from ngo_portal.models.user_model import User
from ngo_portal.models.event_model import Event
from ngo_portal.models.program_model import Program

load_dotenv()

logger = logging.getLogger("create_admin")

def create_admin_user():
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    name = os.getenv("ADMIN_NAME", "Admin User")
    if not email or not password:
        raise ValueError("ADMIN_EMAIL and ADMIN_PASSWORD must be set")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.role == ROLE_ADMIN).first()
        if existing:
            logger.info("Admin user already exists: %s", existing.email)
            return existing.id

        admin = User(
            name=name,
            email=email.strip().lower(),
            password=encrypt_password(password),
            role=ROLE_ADMIN,
            documents=[],
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Admin user created: %s", admin.email)
        return admin.id
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        create_admin_user()
    except Exception as e:
        logger.error("Failed to create admin user: %s", e)
        sys.exit(1)

#!/usr/bin/env python3
"""
Script to create database tables
Run this after the database is created to set up all tables
"""
import logging

from ngo_portal.database import Base, engine
from ngo_portal.models.user_model import User
from ngo_portal.models.event_model import Event
from ngo_portal.models.program_model import Program

logger = logging.getLogger("create_tables")

def create_tables():
    """Create all database tables"""
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
        return True
    except Exception:
        logger.exception("Error creating tables")
        return False

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()

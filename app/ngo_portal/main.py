from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import logging
import os

from ngo_portal.constant_file import log_level, upload_root
from ngo_portal.exceptions import PortalError
from ngo_portal.response_model import ErrorResponseModel

from ngo_portal.routes.user_route import router as UserRouter
from ngo_portal.routes.event_route import router as EventRouter
from ngo_portal.routes.program_route import router as ProgramRouter

from ngo_portal.database import Base, engine
from ngo_portal.models.user_model import User
from ngo_portal.models.event_model import Event
from ngo_portal.models.program_model import Program

logging.basicConfig(
    level=log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("ngo_portal")

app = FastAPI(title="NGO Portal API")


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    content = ErrorResponseModel(exc.code, exc.status_code, exc.message)
    content.update(exc.details)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    content = ErrorResponseModel("VALIDATION_ERROR", 400, "Invalid request")
    content["errors"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponseModel("INTERNAL_ERROR", 500, "Server error"),
    )


# Serve uploaded images and documents
os.makedirs(upload_root, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=upload_root), name="uploads")

app.include_router(UserRouter, tags=["User"], prefix="/users")
app.include_router(EventRouter, tags=["Event"], prefix="/events")
app.include_router(ProgramRouter, tags=["Program"], prefix="/programs")

# Create all tables (must be after importing all models)
# The server still starts if the database is not reachable yet
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
except Exception as e:
    logger.warning("Could not create database tables: %s", e)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*", "http://localhost:3000", "http://localhost:3001"],
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS", "DELETE", "PUT"],
    allow_headers=["*"],
)

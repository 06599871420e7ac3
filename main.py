"""Main application entry point for the House Rent API."""
import logging
import os
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError

import models
from config import settings
from database import engine
from errors import ApiError, UnauthorizedError
from routers import auth, users, properties, favorites, applications, visit_requests, chat, reviews, admin

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

models.Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(f"/{settings.UPLOAD_DIR}", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(properties.router)
app.include_router(favorites.router)
app.include_router(applications.router)
app.include_router(visit_requests.router)
app.include_router(chat.router)
app.include_router(reviews.router)
app.include_router(admin.router)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Translates rule violations into HTTP responses."""
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


def _is_unique_violation(exc: IntegrityError) -> bool:
    code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if code:
        return code == "23505"
    return "unique" in str(exc.orig).lower()


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Unique violations lost a race with a concurrent request; other constraint failures are bad input."""
    if _is_unique_violation(exc):
        status_code, detail = 409, "Resource already exists"
    else:
        status_code, detail = 400, "Request violates a data constraint"
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, status_code, exc.orig)
    return JSONResponse(status_code=status_code, content={"detail": detail})


@app.get("/health", tags=["System"])
def health_check():
    return {
        "success": True,
        "message": "House Rent API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)

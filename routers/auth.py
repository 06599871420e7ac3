"""Authentication routes for user registration, login, and logout."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from passlib.context import CryptContext
from starlette.responses import JSONResponse
import models
import schemas
from config import settings
from database import get_db
from errors import ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "access_token"


def create_access_token(user: models.User) -> str:
    """Signs a JWT carrying the user's id, email and role."""
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")


def get_current_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        db: Session = Depends(get_db)
):
    """Resolves the caller from a Bearer token or the session cookie.

    The role is read from the database, not the token, so a role change
    applies to tokens issued before it.
    """
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise UnauthorizedError("No token provided")

    payload = decode_access_token(token)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token")

    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise UnauthorizedError("User no longer exists")

    return user


def _auth_response(user: models.User, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    token = create_access_token(user)
    body = schemas.AuthResponse(user=schemas.UserResponse.model_validate(user), token=token)
    response = JSONResponse(content=body.model_dump(mode="json"), status_code=status_code)
    response.set_cookie(key=TOKEN_COOKIE, value=token, httponly=True)
    return response


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, db: Session = Depends(get_db)):
    """Register a new tenant or owner account."""
    email = user.email.lower()
    if db.query(models.User).filter(models.User.email == email).first():
        raise ConflictError("Email already registered")

    new_user = models.User(
        name=user.name,
        email=email,
        phone=user.phone,
        hashed_password=pwd_context.hash(user.password),
        role=user.role,
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("Registered user %s as %s", new_user.id, new_user.role)
    return _auth_response(new_user, status.HTTP_201_CREATED)


@router.post("/login", response_model=schemas.AuthResponse)
def login(login_data: schemas.UserLogin, db: Session = Depends(get_db)):
    """Authenticates by email and password; returns a token and sets it as an HTTP-only cookie."""
    user = db.query(models.User).filter(models.User.email == login_data.email.lower()).first()

    if not user or not pwd_context.verify(login_data.password, user.hashed_password):
        raise UnauthorizedError("Invalid email or password")

    return _auth_response(user)


@router.get("/logout")
def logout():
    """Clears the session cookie."""
    response = JSONResponse(content={"message": "Logged out"})
    response.delete_cookie(key=TOKEN_COOKIE)
    return response


@router.get("/me", response_model=schemas.UserResponse)
def get_me(current_user: models.User = Depends(get_current_user)):
    """Returns the authenticated user's profile."""
    return current_user

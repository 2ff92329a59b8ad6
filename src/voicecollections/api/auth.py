import logging
import uuid
from datetime import datetime, timedelta

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voicecollections.api.settings import get_settings
from voicecollections.database import AuthSession, User, get_db
from voicecollections.models import MessageResponse
from voicecollections.services.profile_service import ProfileService
from voicecollections.session import SessionContext

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()


# Pydantic models for API
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    created_at: datetime


class Token(BaseModel):
    access_token: str
    token_type: str


# JWT utilities
settings = get_settings()


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(hours=settings.access_token_expire_hours)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm="HS256")
    return encoded_jwt


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """Resolve the bearer token to a live sign-in session."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret_key, algorithms=["HS256"])
        user_id: str = payload.get("sub")
        session_id: str = payload.get("sid")
        if user_id is None or session_id is None:
            raise credentials_exception
    except InvalidTokenError as e:
        raise credentials_exception from e

    result = await db.execute(
        select(AuthSession).where(AuthSession.id == session_id, AuthSession.user_id == user_id)
    )
    auth_session = result.scalar_one_or_none()
    if auth_session is None or auth_session.expires_at < datetime.utcnow():
        logger.info(f"Session {session_id} for user {user_id} is signed out or expired")
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None:
        raise credentials_exception

    preferences = await ProfileService(db).get_preferences(user.id)
    return SessionContext(user=user, session_id=auth_session.id, preferences=preferences)


async def get_current_user(session: SessionContext = Depends(get_current_session)) -> User:
    """Get the current authenticated user from JWT token."""
    return session.user


# Router
router = APIRouter(prefix="/api/v1/auth", tags=["authentication"])


@router.post("/register", response_model=UserResponse)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user."""
    # Check if signups are enabled based on environment
    if settings.env not in ["dev", "docker"]:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Signups are temporarily disabled",
        )

    result = await db.execute(select(User).where(User.email == user_data.email))
    existing_user = result.scalar_one_or_none()

    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
        )

    hashed_password = User.hash_password(user_data.password)
    new_user = User(id=str(uuid.uuid4()), email=user_data.email, hashed_password=hashed_password)

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    return UserResponse(id=new_user.id, email=new_user.email, created_at=new_user.created_at)


@router.post("/login", response_model=Token)
async def login(user_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate user, start a session and return its JWT token."""
    result = await db.execute(select(User).where(User.email == user_data.email))
    user = result.scalar_one_or_none()

    if not user or not user.verify_password(user_data.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires_delta = timedelta(hours=settings.access_token_expire_hours)
    auth_session = AuthSession(
        id=str(uuid.uuid4()),
        user_id=user.id,
        expires_at=datetime.utcnow() + expires_delta,
    )
    db.add(auth_session)
    await db.commit()

    access_token = create_access_token(
        data={"sub": user.id, "sid": auth_session.id}, expires_delta=expires_delta
    )
    logger.info(f"User {user.id} signed in (session {auth_session.id})")

    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """End the current session; its token stops working."""
    auth_session = await db.get(AuthSession, session.session_id)
    if auth_session is not None:
        await db.delete(auth_session)
        await db.commit()
    logger.info(f"User {session.user_id} signed out (session {session.session_id})")
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return UserResponse(
        id=current_user.id, email=current_user.email, created_at=current_user.created_at
    )

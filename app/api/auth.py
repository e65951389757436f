"""Bearer token verification"""

from datetime import datetime, timedelta
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.database import get_db
from app.models.restaurant import Restaurant
from app.models.user import User
from app.schemas.auth import Identity, RestaurantIdentity, UserIdentity

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)

ACTOR_USER = "user"
ACTOR_RESTAURANT = "restaurant"


def create_access_token(identity: Identity) -> str:
    """Create JWT access token for a user or restaurant"""
    actor = ACTOR_USER if isinstance(identity, UserIdentity) else ACTOR_RESTAURANT
    expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(identity.id),
        "actor": actor,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Resolve the bearer token to exactly one user or restaurant"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        payload = jwt.decode(
            credentials.credentials, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
        subject: str = payload.get("sub")
        actor: str = payload.get("actor")
        token_type: str = payload.get("type")

        if subject is None or token_type != "access":
            raise credentials_exception
        subject_id = UUID(subject)
    except (JWTError, ValueError):
        logger.debug("Bearer token rejected")
        raise credentials_exception

    if actor == ACTOR_USER:
        model, identity = User, UserIdentity(subject_id)
    elif actor == ACTOR_RESTAURANT:
        model, identity = Restaurant, RestaurantIdentity(subject_id)
    else:
        raise credentials_exception

    result = await db.execute(select(model.id).where(model.id == subject_id))
    if result.scalar_one_or_none() is None:
        raise credentials_exception

    return identity


async def get_current_user(
    identity: Identity = Depends(get_current_identity),
) -> UserIdentity:
    """Require a user token"""
    if not isinstance(identity, UserIdentity):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account required",
        )
    return identity


async def get_current_restaurant(
    identity: Identity = Depends(get_current_identity),
) -> RestaurantIdentity:
    """Require a restaurant token"""
    if not isinstance(identity, RestaurantIdentity):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Restaurant account required",
        )
    return identity

"""Authentication routes and role checks for StockLens."""

from datetime import datetime, timedelta, timezone
import hmac
import logging
import os
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from pydantic import BaseModel

from src.api.middleware.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")

# Without a real AUTH_SECRET_KEY a random key is generated per process; tokens
# then stop working after a restart.
_DEFAULT_INSECURE_KEY = "your-secret-key-change-in-production"
_env_key = os.getenv("AUTH_SECRET_KEY", "")
if _env_key and _env_key != _DEFAULT_INSECURE_KEY:
    SECRET_KEY = _env_key
else:
    SECRET_KEY = secrets.token_hex(32)
    logger.warning(
        "AUTH_SECRET_KEY is not set or uses the insecure default. "
        "Generated a random session-scoped key. Set AUTH_SECRET_KEY in production "
        "to persist tokens across restarts."
    )

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("AUTH_TOKEN_EXPIRE_MINUTES", "1440"))
AUTH_PASSWORD = os.getenv("AUTH_PASSWORD", "stocklens")

ROLE_ADMIN = "admin"
ROLE_MATERIAL = "material_staff"
ROLE_PRODUCTION = "production_manager"
ROLE_VIEWER = "viewer"
ROLES = {ROLE_ADMIN, ROLE_MATERIAL, ROLE_PRODUCTION, ROLE_VIEWER}


def parse_user_roles(value: str) -> dict[str, str]:
    """Parse ``name:role,name:role``; unknown roles are ignored."""
    roles: dict[str, str] = {}
    for entry in value.split(","):
        name, _, role = entry.strip().partition(":")
        name, role = name.strip(), role.strip()
        if not name:
            continue
        if role not in ROLES:
            logger.warning("Ignoring unknown role %r for user %s", role, name)
            continue
        roles[name] = role
    return roles


USER_ROLES = parse_user_roles(os.getenv("AUTH_USERS", ""))


class Token(BaseModel):
    access_token: str
    token_type: str
    role: str


class CurrentUser(BaseModel):
    username: str
    role: str = ROLE_VIEWER


def role_for(username: str) -> str:
    return USER_ROLES.get(username, ROLE_VIEWER)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        username: Optional[str] = payload.get("sub")
        if username is None:
            raise credentials_exception
    except JWTError as exc:
        raise credentials_exception from exc
    role = payload.get("role")
    return CurrentUser(username=username, role=role if role in ROLES else ROLE_VIEWER)


def require_roles(*allowed: str):
    """Dependency factory rejecting users whose role is not in ``allowed``."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning("User %s (%s) denied; requires %s", user.username, user.role, allowed)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this operation",
            )
        return user

    return checker


require_material_access = require_roles(ROLE_ADMIN, ROLE_MATERIAL)
require_production_access = require_roles(ROLE_ADMIN, ROLE_PRODUCTION)


@router.post("/token", response_model=Token)
@limiter.limit("5/minute")
async def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends()):
    if not hmac.compare_digest(form_data.password.encode(), AUTH_PASSWORD.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )
    role = role_for(form_data.username)
    access_token = create_access_token(data={"sub": form_data.username, "role": role})
    return {"access_token": access_token, "token_type": "bearer", "role": role}


@router.get("/verify")
async def verify_token(user: CurrentUser = Depends(get_current_user)):
    """Verify that the current token is valid. Returns 401 if expired/invalid."""
    return {"valid": True, "username": user.username, "role": user.role}

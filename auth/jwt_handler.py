from datetime import datetime, timezone
from decouple import config
from jose import jwt, JWTError
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Annotated, Optional
from fastapi import Depends
from pydantic import BaseModel
from database import UsersCollection
from exceptions import AuthorizationError


JWT_SECRET = config("SECRET_KEY")
JWT_ALGORITHM = config("JWT_ALGORITHM", default="HS256")
CATALOG_WRITE = "catalog:write"
bearer_scheme = HTTPBearer(auto_error=False, scheme_name="catalog_admin_schema")


class TokenPayload(BaseModel):
    account: Optional[str] = None
    exp: Optional[int] = None


class Caller(BaseModel):
    email: str
    username: str = ""
    permissions: list[str] = []


def create_access_token(data: dict, expires_at: datetime) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": expires_at})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


async def get_user(email: str) -> Optional[Caller]:
    user = await UsersCollection.find_one({"email": email})
    if user:
        return Caller(**user)


async def get_current_user(credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]) -> Caller:
    """
    Resolves the bearer token into the calling user
    """
    if credentials is None:
        raise AuthorizationError("Unauthorized - you must be logged in")
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise AuthorizationError("Could not validate credentials")
    token_data = TokenPayload(**payload)
    if token_data.account is None:
        raise AuthorizationError("Could not validate credentials")
    if token_data.exp is not None and datetime.fromtimestamp(token_data.exp, tz=timezone.utc) < datetime.now(timezone.utc):
        raise AuthorizationError("Token expired")
    user = await get_user(email=token_data.account)
    if not user:
        raise AuthorizationError("Could not validate credentials")
    return user


def authorize(caller: Caller, required_permissions: list[str]) -> bool:
    return all(permission in caller.permissions for permission in required_permissions)


class PermissionChecker:
    """
    Admission gate in front of every catalog mutation, denied callers never reach the workflow
    """

    def __init__(self, required_permissions: list[str]) -> None:
        self.required_permissions = required_permissions

    def __call__(self, user: Annotated[Caller, Depends(get_current_user)]) -> Caller:
        if not authorize(user, self.required_permissions):
            raise AuthorizationError("Unauthorized - you must be an admin")
        return user


require_admin = PermissionChecker(required_permissions=[CATALOG_WRITE])

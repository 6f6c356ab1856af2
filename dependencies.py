# dependencies.py
"""
Shared FastAPI dependencies: password hashing, JWT issue/verify, role guards.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.context import CryptContext

import config

# Bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ROLES = ("landlord", "tenant", "manager", "admin")
STAFF_ROLES = ("manager", "admin")


def hash_password(password: str) -> str:
     return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
     return pwd_context.verify(password, hashed)


def create_access_token(user) -> str:
     """Issue a bearer token carrying the user's id, role and email."""
     expires = datetime.now(timezone.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
     payload = {
          "id": user.id,
          "role": user.role,
          "email": user.email,
          "exp": expires,
     }
     return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
     token = auth.split(" ", 1)[1]
     try:
          payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
     except JWTError:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
     if not payload.get("id"):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
     return payload


def require_roles(*roles: str) -> Callable[[dict], dict]:
     """
     Dependency factory restricting a route to the given roles.

     Usage:
          @router.post("/x")
          def handler(token: dict = Depends(require_roles("landlord", "admin"))):
               ...
     """

     def _checker(token: dict = Depends(verify_token)) -> dict:
          if token.get("role") not in roles:
               raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Insufficient permissions",
               )
          return token

     return _checker

# routers/auth.py
"""
Registration, login and the current user.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import create_access_token, hash_password, verify_password, verify_token
from models import User
from schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register_user(body: RegisterRequest, db: Session = Depends(get_session)):
     email = body.email.strip().lower()
     if db.query(User).filter(User.email == email).first():
          raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already registered")

     user = User(
          name=body.name.strip(),
          email=email,
          password=hash_password(body.password),
          phone=body.phone,
          role=body.role,
     )
     db.add(user)
     db.commit()
     db.refresh(user)
     logger.info("Registered %s user %s", user.role, user.id)

     return TokenResponse(token=create_access_token(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login_user(body: LoginRequest, db: Session = Depends(get_session)):
     user = db.query(User).filter(User.email == body.email.strip().lower()).first()
     if not user or not verify_password(body.password, user.password):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
     if not user.is_active:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

     return TokenResponse(token=create_access_token(user), user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def get_me(db: Session = Depends(get_session), token: dict = Depends(verify_token)):
     user = db.query(User).filter(User.id == token.get("id")).first()
     if not user:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
     return user

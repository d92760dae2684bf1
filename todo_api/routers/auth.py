import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from todo_api.schemas.user import UserCreate, LoginResponse
from todo_api.services import credentials
from todo_api.utils.auth import create_token
from todo_api.utils.revocation import revoked_tokens
from todo_api.dependencies import get_current_user, CurrentUser
from todo_api.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

@router.post("/register")
def register(user: UserCreate, db: Session = Depends(get_db)):
    try:
        credentials.register(db, user.username, user.password)
    except credentials.UserAlreadyExists:
        raise HTTPException(status_code=400, detail="User already exist")
    except credentials.PasswordHashingError:
        logger.exception("Password hashing failed for %s", user.username)
        raise HTTPException(status_code=500, detail="Failed hash Password")

    return {"message": "User created successfully"}

@router.post("/login", response_model=LoginResponse)
def login(user: UserCreate, db: Session = Depends(get_db)):
    try:
        db_user = credentials.verify_login(db, user.username, user.password)
    except credentials.InvalidCredentials:
        logger.warning("Failed login for %s", user.username)
        raise HTTPException(status_code=401, detail="invalid Username or Password")

    token = create_token(db_user.username, db_user.id)
    return LoginResponse(
        message=f"Hello {db_user.username}! You are now logged in.",
        token=token,
        user_id=db_user.id,
    )

@router.post("/logout")
def logout(current: CurrentUser = Depends(get_current_user)):
    if current.claims.jti:
        revoked_tokens.revoke(current.claims.jti, current.claims.expires_at)
    return {"message": "Logged out"}

@router.get("/access")
def access(current: CurrentUser = Depends(get_current_user)):
    return {"message": f"Hello {current.username}!", "user_id": current.user_id}

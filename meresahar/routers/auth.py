# File: meresahar/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from meresahar.db.session import get_db
from meresahar.models.admin import AdminUser
from meresahar.schemas.auth import LoginIn, TokenOut, AdminOut
from meresahar.core.security import authenticate, make_token, require_admin

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, db: Session = Depends(get_db)):
    admin = authenticate(db, body.username, body.password)
    if not admin:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return make_token(admin.username)

@router.get("/me", response_model=AdminOut)
def me(admin: AdminUser = Depends(require_admin)):
    return admin

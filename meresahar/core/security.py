# meresahar/core/security.py
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time, jwt
from sqlalchemy.orm import Session
from meresahar.core.config import settings
from passlib.hash import bcrypt_sha256
from meresahar.db.session import get_db
from meresahar.models.admin import AdminUser

ALGO = "HS256"
ACCESS_TTL = 8 * 3600
bearer = HTTPBearer(auto_error=False)

def hash_password(raw: str) -> str:
    return bcrypt_sha256.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    return bcrypt_sha256.verify(raw, hashed)

def make_token(username: str, ttl: int = ACCESS_TTL) -> dict:
    now = int(time.time())
    payload = {"sub": username, "role": "admin", "iat": now, "exp": now + ttl}
    return {
        "access_token": jwt.encode(payload, settings.jwt_secret, algorithm=ALGO),
        "token_type": "bearer",
        "expires_in": ttl,
    }

def create_admin(db: Session, username: str, password: str) -> AdminUser:
    admin = AdminUser(username=username, hashed_password=hash_password(password))
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin

def authenticate(db: Session, username: str, password: str) -> Optional[AdminUser]:
    admin = db.query(AdminUser).filter(AdminUser.username == username).first()
    if not admin or not verify_password(password, admin.hashed_password):
        return None
    return admin

def _decode_token(creds: Optional[HTTPAuthorizationCredentials]) -> dict:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def require_admin(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                  db: Session = Depends(get_db)) -> AdminUser:
    payload = _decode_token(creds)
    username = payload.get("sub")
    if not username or payload.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    admin = db.query(AdminUser).filter(AdminUser.username == username).first()
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
    return admin

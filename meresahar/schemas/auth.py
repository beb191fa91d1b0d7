# File: meresahar/schemas/auth.py

from pydantic import BaseModel, Field

class LoginIn(BaseModel):
    username: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=1, max_length=512)

class TokenOut(BaseModel):
    access_token: str
    token_type: str
    expires_in: int

class AdminOut(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True

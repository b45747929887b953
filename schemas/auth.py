from pydantic import BaseModel, validator
from typing import Optional
from schemas.shared import clean_text, raw_text

class RegisterRequest(BaseModel):
    email: str
    username: str
    password: str

    @validator('email', pre=True)
    def validate_email(cls, v):
        v = clean_text(v)
        if not v:
            raise ValueError('Email is required.')
        local, _, domain = v.partition('@')
        if not local or not domain or ' ' in v:
            raise ValueError('Please enter a valid email address.')
        return v

    @validator('username', pre=True)
    def validate_username(cls, v):
        v = clean_text(v)
        if not v:
            raise ValueError('Username is required.')
        if len(v) > 50:
            raise ValueError('Username must be at most 50 characters long.')
        return v

    @validator('password', pre=True)
    def validate_password(cls, v):
        v = raw_text(v)
        if not v:
            raise ValueError('Password is required.')
        return v

class LoginRequest(BaseModel):
    username: str
    password: str

    @validator('username', pre=True)
    def validate_username(cls, v):
        v = clean_text(v)
        if not v:
            raise ValueError('Username is required.')
        return v

    @validator('password', pre=True)
    def validate_password(cls, v):
        v = raw_text(v)
        if not v:
            raise ValueError('Password is required.')
        return v

class ResendVerificationRequest(BaseModel):
    email: str

    @validator('email', pre=True)
    def validate_email(cls, v):
        v = clean_text(v)
        if not v:
            raise ValueError('Email is required.')
        return v

class UserResponse(BaseModel):
    user_id: int
    username: str
    email: str
    role: str
    display_name: str
    profile_picture: Optional[str] = None

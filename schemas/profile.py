from pydantic import BaseModel, validator
from typing import Optional
from schemas.shared import clean_text, raw_text

class ProfileUpdate(BaseModel):
    bio: str = ""
    avatar_url: str = ""

    @validator('bio', pre=True)
    def validate_bio(cls, v):
        v = clean_text(v)
        if len(v) > 500:
            raise ValueError('Bio must be at most 500 characters long.')
        return v

    @validator('avatar_url', pre=True)
    def validate_avatar_url(cls, v):
        v = clean_text(v)
        if v and not v.startswith(('http://', 'https://', '/')):
            raise ValueError('Avatar URL must be an http(s) link or a site path.')
        return v

class PasswordChange(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str

    @validator('current_password', 'new_password', 'confirm_password', pre=True)
    def validate_present(cls, v):
        v = raw_text(v)
        if not v:
            raise ValueError('All password fields are required.')
        return v

class ProfileResponse(BaseModel):
    user_id: int
    username: str
    email: str
    role: str
    first_name: str
    last_name: str
    display_name: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: Optional[str] = None

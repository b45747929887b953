from pydantic import BaseModel, validator
from typing import Optional
from schemas.shared import clean_text

class CommunityCreate(BaseModel):
    name: str
    description: str = ""
    community_type: str = ""

    @validator('name', pre=True)
    def validate_name(cls, v):
        v = clean_text(v)
        if not v:
            raise ValueError('Community name is required.')
        if len(v) > 100:
            raise ValueError('Community name must be at most 100 characters long.')
        return v

    @validator('description', 'community_type', pre=True)
    def validate_optional_text(cls, v):
        return clean_text(v)

class CommunityResponse(BaseModel):
    community_id: int
    name: str
    description: str
    community_type: str
    created_by: int
    creator_username: str
    number_of_members: int
    created_at: Optional[str] = None
    is_member: Optional[bool] = None

from pydantic import BaseModel, validator
from typing import Optional
from schemas.shared import clean_text

class PostCreate(BaseModel):
    post_text: str
    community_id: int

    @validator('post_text', pre=True)
    def validate_post_text(cls, v):
        v = clean_text(v)
        if not v:
            raise ValueError('Post text cannot be empty.')
        if len(v) > 2000:
            raise ValueError('Post text must be at most 2000 characters long.')
        return v

    @validator('community_id', pre=True)
    def validate_community_id(cls, v):
        try:
            return int(clean_text(v))
        except ValueError:
            raise ValueError('A valid community is required.')

class PostResponse(BaseModel):
    post_id: int
    text: str
    user_id: int
    author_username: str
    community_id: int
    community_name: str
    image_url: Optional[str] = None
    created_at: Optional[str] = None
    like_count: int
    liked_by_me: bool = False

class LikeResponse(BaseModel):
    success: bool = True
    post_id: int
    like_count: int
    liked: bool

# Schemas package
from .auth import RegisterRequest, LoginRequest, ResendVerificationRequest, UserResponse
from .profile import ProfileUpdate, PasswordChange, ProfileResponse
from .communities import CommunityCreate, CommunityResponse
from .posts import PostCreate, PostResponse, LikeResponse

import logging
import uuid
import os
from pathlib import Path
from typing import Optional
import config

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.webp'}
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
POST_IMAGES_SUBFOLDER = "posts"


def get_post_images_folder() -> str:
    return os.path.join(config.UPLOAD_FOLDER, POST_IMAGES_SUBFOLDER)


def ensure_post_images_directory():
    Path(get_post_images_folder()).mkdir(parents=True, exist_ok=True)


def is_allowed_image(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS


def generate_uuid_filename(original_filename: str) -> str:
    """Generate a UUID filename with original extension"""
    ext = Path(original_filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        ext = '.png'
    return f"{uuid.uuid4()}{ext}"


def save_post_image(file_content: bytes, filename: str) -> str:
    """Save a post image and return its UUID filename.

    Raises ValueError for a disallowed type or an oversized file.
    """
    if not is_allowed_image(filename):
        raise ValueError("Only image files (.png, .jpg, .jpeg, .gif, .webp) are allowed.")
    if len(file_content) > MAX_FILE_SIZE:
        raise ValueError("Image exceeds the 5MB limit.")
    ensure_post_images_directory()
    uuid_filename = generate_uuid_filename(filename)
    with open(os.path.join(get_post_images_folder(), uuid_filename), 'wb') as f:
        f.write(file_content)
    return uuid_filename


def get_post_image_path(uuid_filename: str) -> Optional[str]:
    """Resolve a stored file name, refusing anything with a path component"""
    if not uuid_filename or os.path.basename(uuid_filename) != uuid_filename:
        return None
    return os.path.join(get_post_images_folder(), uuid_filename)


def delete_post_image(uuid_filename: str) -> bool:
    file_path = get_post_image_path(uuid_filename)
    if not file_path or not os.path.exists(file_path):
        return False
    try:
        os.remove(file_path)
    except OSError:
        logger.exception("Could not delete post image %s", uuid_filename)
        return False
    return True


def get_post_image_url(uuid_filename: Optional[str]) -> Optional[str]:
    if not uuid_filename:
        return None
    return f"/cdn/posts/{uuid_filename}"

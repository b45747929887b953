from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
import os
from file_utils import get_post_image_path

router = APIRouter(prefix="/cdn", tags=["cdn"])

@router.get("/posts/{filename}")
def serve_post_image(filename: str):
    """Serve uploaded post images"""
    file_path = get_post_image_path(filename)
    if not file_path or not os.path.exists(file_path):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(file_path)

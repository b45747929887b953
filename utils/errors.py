from typing import Optional
from fastapi import HTTPException


class NotAuthenticatedError(Exception):
    """Raised by the auth gate when the request carries no live session"""


class ConflictError(HTTPException):
    """A uniqueness conflict; `context` is merged into the JSON error body"""

    def __init__(self, detail: str, context: Optional[dict] = None):
        super().__init__(status_code=400, detail=detail)
        self.context = context or {}

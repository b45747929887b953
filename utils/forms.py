from typing import Type, TypeVar
from fastapi import HTTPException, Request
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_body(request: Request) -> dict:
    """Dependency that parses JSON, urlencoded and multipart bodies alike.

    Handlers that depend on it are plain `def` and run in the threadpool.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Request body is not valid JSON.")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object.")
        return body
    form = await request.form()
    return dict(form)


def validation_message(exc: ValidationError) -> str:
    """First error as a human message, without pydantic's prefixes"""
    error = exc.errors()[0]
    ctx_error = error.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error['msg']}" if field else error["msg"]


def parse_form(model: Type[ModelT], data: dict) -> ModelT:
    """Build `model` from a request body, turning validation failures into 400s"""
    try:
        return model(**{name: data.get(name) for name in model.model_fields})
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=validation_message(exc))

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import config
from database import init_db
from logging_config import configure_logging
from seed_data import seed_db
from sessions import purge_expired_sessions
from utils.errors import NotAuthenticatedError, ConflictError
from utils.negotiation import wants_json, error_response
from routes.auth import router as auth_router
from routes.profile import router as profile_router
from routes.cdn import router as cdn_router
from routes.communities import router as communities_router
from routes.browse import router as browse_router
from routes.posts import router as posts_router

configure_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again later."


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database
    init_db()
    if config.SEED_DATA:
        seed_db()
    purge_expired_sessions()
    yield


app = FastAPI(title="CampusCircle", lifespan=lifespan)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    if wants_json(request):
        return JSONResponse({"success": False, "message": "Not authenticated"}, status_code=401)
    return RedirectResponse("/login", status_code=302)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    context = exc.context if isinstance(exc, ConflictError) else {}
    return error_response(request, exc.status_code, str(exc.detail), **context)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    # Malformed path ids name no existing resource
    if loc and loc[0] == "path":
        return error_response(request, 404, "Not found.")
    field = loc[-1] if loc else "request"
    return error_response(request, 400, f"Invalid value for {field}.")


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, 500, GENERIC_ERROR_MESSAGE)


# Include routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(cdn_router)
app.include_router(communities_router)
app.include_router(browse_router)
app.include_router(posts_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=True)

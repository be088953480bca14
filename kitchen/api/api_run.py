from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from kitchen.domain.errors import (
    CycleRejected, NotFoundError, RotationError, ScalingDomainError, StaleProposal, ValidationError,
)
from kitchen.events.web_observers import start as start_event_observers, get_events as get_web_events
from kitchen.utilities.config import DEBUG

# Routers
from kitchen.api.routes import recipes, rotation

# Logging
logger = logging.getLogger("kitchen_app")

# Domain error -> HTTP status
ERROR_STATUS = (
    (NotFoundError, 404),
    (CycleRejected, 409),
    (StaleProposal, 409),
    (ValidationError, 400),
    (ScalingDomainError, 400),
)

# Initialize FastAPI app
app = FastAPI(title="Kitchen Rotation API", debug=DEBUG)

# Include routers
app.include_router(rotation.router)
app.include_router(recipes.router)


@app.exception_handler(RotationError)
async def _rotation_error(request: Request, exc: RotationError):
    status = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 400)
    if status == 409:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s failed (%d): %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for the activity feed when the app starts."""
    start_event_observers()
    logger.info("Activity feed observers started")


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/api/events")
def api_events(since: Optional[int] = Query(default=None)):
    """Recent rotation events; poll with since=<next_cursor>."""
    return get_web_events(since)

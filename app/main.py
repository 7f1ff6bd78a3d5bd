from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import engine
from app.exceptions import EventNotFoundError, EventValidationError, PermissionDeniedError
from app.log import configure_logging
from app.models import Base

from app.routers.chat import router as chat_router
from app.routers.events import router as events_router

configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

app = FastAPI(title="Household Calendar (Backend)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def startup():
    # create tables if they don't exist
    Base.metadata.create_all(bind=engine)

@app.exception_handler(EventValidationError)
async def _validation_error(request: Request, exc: EventValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})

@app.exception_handler(PermissionDeniedError)
async def _permission_denied(request: Request, exc: PermissionDeniedError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})

@app.exception_handler(EventNotFoundError)
async def _not_found(request: Request, exc: EventNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(chat_router)
app.include_router(events_router)

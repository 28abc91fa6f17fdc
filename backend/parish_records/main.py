# backend/parish_records/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from parish_records import __version__
from parish_records.config import get_settings
from parish_records.storage import StoreError

from parish_records.api import (
    admin,          # /api/admin
    bookings,       # /api/bookings
    donations,      # /api/donations
    events,         # /api/events
    misc,           # /api/audit, /api/auth/send-code
    notifications,  # /api/notifications
    records,        # /api/records
    requests,       # /api/requests
    sacraments,     # /api/sacraments
    staff,          # /api/staff
    users,          # /api/users
)

# Ops/system endpoints (/health, /version)
from parish_records.api.system import router as system_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Parish Records API", version=__version__)

# --- CORS: ALLOWED_ORIGINS (comma-separated); empty allows any origin ---
origins = settings.allowed_origins or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# Routers
app.include_router(system_router)  # /health, /version

app.include_router(records.router)        # /api/records
app.include_router(requests.router)       # /api/requests
app.include_router(notifications.router)  # /api/notifications
app.include_router(admin.router)          # /api/admin
app.include_router(users.router)          # /api/users
app.include_router(donations.router)      # /api/donations
app.include_router(events.router)         # /api/events
app.include_router(bookings.router)       # /api/bookings
app.include_router(sacraments.router)     # /api/sacraments
app.include_router(staff.router)          # /api/staff
app.include_router(misc.router)           # /api/audit, /api/auth/send-code

logger.info("Parish Records API ready (backend=%s)", settings.db_backend)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core import config
from app.core.logging_config import setup_logging

# ✅ Import All API Routes
from app.api.routes import (
    auth,
    users,
    network,
    connections,
    notifications,
    messages,
    realtime,
    rooms,
    billing,
    meet,
    system,
)

setup_logging(config.LOG_LEVEL, config.LOG_DIR)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not config.SECRET_KEY:
        logger.critical("SECRET_KEY is not set; refusing to start")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if config.RUN_MIGRATIONS:
        from app.db.migrate import run_migrations
        run_migrations()
    else:
        from app.db.init_db import init_db
        init_db()
    logger.info("inrooms API started")
    yield


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="inrooms API", version="1.0.0", lifespan=lifespan)

# ✅ CORS - ONLY ALLOW THE FRONTEND
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(network.router)
app.include_router(connections.router)
app.include_router(notifications.router)
app.include_router(messages.router)
app.include_router(realtime.router)
app.include_router(rooms.router)
app.include_router(billing.router)
app.include_router(meet.router)
app.include_router(system.router)


# ============================================
# ✅ HEALTH CHECK ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"message": "inrooms API server running"}

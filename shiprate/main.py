# shiprate/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiprate import __version__
from shiprate.api.errors import install_error_handlers
from shiprate.core.config import get_settings
from shiprate.core.logging import setup_logging
from shiprate.router_mount import mount_routers

settings = get_settings()
setup_logging(settings.LOG_LEVEL, sql_echo=settings.SQL_ECHO)
logger = logging.getLogger("shiprate")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # 开发环境可以直接建表；正式环境走 alembic
    if settings.AUTO_CREATE_TABLES:
        from shiprate.db import Base, engine, init_models

        init_models()
        Base.metadata.create_all(bind=engine)
        logger.info("tables ensured (AUTO_CREATE_TABLES=1)")
    logger.info("shiprate started env=%s version=%s", settings.ENV, __version__)
    yield


app = FastAPI(
    title="shiprate",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://127.0.0.1:8000",
        "http://localhost:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)
mount_routers(app)

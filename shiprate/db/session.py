# shiprate/db/session.py
# 统一的同步会话工厂 + FastAPI 依赖（get_db）
from __future__ import annotations

import re
from collections.abc import Generator
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shiprate.core.config import get_settings


def normalize_dsn(url: str) -> str:
    """把 postgres/postgresql(+asyncpg) DSN 统一到 psycopg3；sqlite 原样返回。"""
    url = (url or "").strip()
    # 有些环境会把值写成 '"postgresql://..."'，这里统一剥掉两侧引号
    if len(url) >= 2 and url[0] == url[-1] and url[0] in ("'", '"'):
        url = url[1:-1].strip()
    if url.startswith("postgresql+asyncpg://") or url.startswith("postgres+asyncpg://"):
        return re.sub(r"^postgres(?:ql)?\+asyncpg://", "postgresql+psycopg://", url)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str, *, echo: bool = False) -> Engine:
    dsn = normalize_dsn(url)
    connect_args: Dict[str, Any] = {}
    if dsn.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(dsn, future=True, pool_pre_ping=True, echo=echo, connect_args=connect_args)


_settings = get_settings()

engine = build_engine(_settings.DATABASE_URL, echo=_settings.SQL_ECHO)
SessionLocal: sessionmaker[Session] = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    class_=Session,
)


# ---- FastAPI 依赖 ----
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

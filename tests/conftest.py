# tests/conftest.py
from __future__ import annotations

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ============================================================
# ★ 在 import shiprate.* 之前固定测试配置（get_settings 有缓存）
# ============================================================
os.environ.setdefault("SHIPRATE_DATABASE_URL", "sqlite://")
os.environ.setdefault("SHIPRATE_ENV", "test")
os.environ.setdefault("SHIPRATE_AUTO_CREATE_TABLES", "0")

from shiprate.db.base import Base, init_models  # noqa: E402
from shiprate.db.deps import get_db  # noqa: E402
from shiprate.main import app  # noqa: E402


# =========================================
# 每用例独立的内存库（StaticPool：同一连接，跨 Session 可见）
# =========================================
@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    init_models()
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_maker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture(scope="function")
def session(session_maker) -> Generator[Session, None, None]:
    """服务层测试用 Session：服务函数自己 commit，这里只负责关闭。"""
    sess = session_maker()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()


@pytest.fixture(scope="function")
def client(session_maker) -> Generator[TestClient, None, None]:
    """HTTP 合同测试：get_db 指向本用例的内存库。"""

    def _override_get_db():
        db = session_maker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)

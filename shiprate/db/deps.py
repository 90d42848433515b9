# shiprate/db/deps.py
"""
统一数据库依赖（薄转发到 shiprate.db.session）：
- get_db → 同步 Session（yield）

用法：def endpoint(db: Session = Depends(get_db)): ...
测试里通过 app.dependency_overrides[get_db] 替换。
"""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy.orm import Session

from shiprate.db.session import get_db as _get_db


def get_db() -> Generator[Session, None, None]:
    yield from _get_db()

# alembic/env.py：shiprate 迁移入口（同步引擎）

from __future__ import annotations

import os
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection
from sqlalchemy.pool import NullPool

# Alembic 基本配置
config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# 延迟加载模型（避免导入时机引发的问题）
from shiprate.core.config import get_settings  # noqa: E402
from shiprate.db.base import Base, init_models  # noqa: E402
from shiprate.db.session import normalize_dsn  # noqa: E402


def include_object(
    obj: Any, name: str | None, type_: str, reflected: bool, compare_to: Any
) -> bool:
    """
    DB 里多出来的对象（reflected=True 且 compare_to=None）不参与 diff，
    避免 autogenerate 生成莫名其妙的 drop。
    """
    if reflected and compare_to is None:
        return False
    return True


def get_url() -> str:
    """
    优先级：
      1. SHIPRATE_ALEMBIC_URL（只给迁移用，例如指向 owner 账号）
      2. AppSettings.DATABASE_URL（SHIPRATE_DATABASE_URL / .env）
    """
    url = os.getenv("SHIPRATE_ALEMBIC_URL") or get_settings().DATABASE_URL
    if not url:
        raise RuntimeError("Alembic 无法确定数据库 URL：请设置 SHIPRATE_DATABASE_URL")
    return normalize_dsn(url)


def run_migrations_offline() -> None:
    """
    Offline 模式：不真实连库，只生成 SQL。
    """
    init_models()
    context.configure(
        url=get_url(),
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Online 模式：真实连库执行迁移。
    """
    init_models()
    url = get_url()
    engine = create_engine(url, poolclass=NullPool, future=True)

    with engine.connect() as connection:  # type: Connection
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            compare_type=True,
            include_object=include_object,
            # sqlite 不支持大部分 ALTER，走 batch 模式
            render_as_batch=url.startswith("sqlite"),
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

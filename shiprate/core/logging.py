# shiprate/core/logging.py
import logging
import sys

_FMT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_HANDLER_NAME = "shiprate-stdout"


def setup_logging(level: str = "INFO", *, sql_echo: bool = False) -> None:
    """
    统一日志入口（main 启动时调一次）：
    - 根 logger 只挂一个 stdout handler；重复调用只调级别不重复挂
    - shiprate.* 业务日志跟随 level
    - SQL 日志只在 SQL_ECHO / DEBUG 时放开
    """
    lvl = (level or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(lvl)

    if not any(getattr(h, "name", None) == _HANDLER_NAME for h in root.handlers):
        for h in list(root.handlers):
            root.removeHandler(h)
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FMT))
        root.addHandler(handler)

    logging.getLogger("shiprate").setLevel(lvl)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if (sql_echo or lvl == "DEBUG") else logging.WARNING
    )
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

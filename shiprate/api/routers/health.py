# shiprate/api/routers/health.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiprate.db.deps import get_db

log = logging.getLogger("shiprate.api")

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"ok": True, "db": "up"}
    except SQLAlchemyError as e:
        log.warning("health check: db down: %s", e)
        return {"ok": False, "db": "down"}

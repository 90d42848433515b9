# shiprate/router_mount.py
from __future__ import annotations

from fastapi import FastAPI


def mount_routers(app: FastAPI) -> None:
    # ---------------------------------------------------------------------------
    # routers imports
    # ---------------------------------------------------------------------------
    from shiprate.api.routers.health import router as health_router
    from shiprate.api.routers.shipping import router as shipping_router
    from shiprate.metrics import router as metrics_router

    # ===========================
    # mount routers
    # ===========================
    app.include_router(health_router)
    app.include_router(shipping_router)
    app.include_router(metrics_router)

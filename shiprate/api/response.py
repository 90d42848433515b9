# shiprate/api/response.py
from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """
    统一响应信封：
    - code == 0 成功
    - code != 0 业务错误（见 services/shipping_rates/errors.py）
    """

    code: int = 0
    message: str = "ok"
    data: Optional[T] = None


def ok(data=None, message: str = "ok") -> dict:
    return {"code": 0, "message": message, "data": data}

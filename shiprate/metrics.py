# shiprate/metrics.py
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, generate_latest

# 算价结果：mode=single|batch|estimate，outcome=ok|<error key>
CALC_TOTAL = Counter(
    "shipping_calc_total",
    "Shipping fee calculations",
    ["mode", "outcome"],
)

# 模板 / 规则 / 绑定 写操作
MUTATIONS_TOTAL = Counter(
    "shipping_template_mutations_total",
    "Shipping template/rule/binding mutations",
    ["entity", "action"],
)

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

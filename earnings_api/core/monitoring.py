# Prometheus metrics for the earnings service

from fastapi import APIRouter, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .config import settings

# HTTP metrics
request_count = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
request_duration = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])

# Business metrics
withdrawals_requested = Counter('withdrawals_requested_total', 'Withdrawal requests accepted', ['operator'])
withdrawals_refused = Counter('withdrawals_refused_total', 'Withdrawal requests refused', ['reason'])
withdrawals_resolved = Counter('withdrawals_resolved_total', 'Withdrawals resolved by an admin', ['status'])
earnings_adjustments = Counter('earnings_adjustments_total', 'Manual earnings adjustments', ['adjustment_type'])

router = APIRouter()

def observe_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    request_count.labels(method=method, endpoint=endpoint, status=status_code).inc()
    request_duration.labels(method=method, endpoint=endpoint).observe(duration)

@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint"""
    if not settings.PROMETHEUS_ENABLED:
        return {"success": False, "error": "Metrics disabled"}
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

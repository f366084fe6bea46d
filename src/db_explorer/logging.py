import logging
import uuid
from fastapi import Request

logger = logging.getLogger("db_explorer")

SQL_LOG_PREVIEW = 200


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def sql_preview(sql: str) -> str:
    """Single-line, truncated SQL text for log messages."""
    flat = " ".join(sql.split())
    if len(flat) > SQL_LOG_PREVIEW:
        return flat[:SQL_LOG_PREVIEW] + "..."
    return flat


async def correlation_id_middleware(request: Request, call_next):
    cid = request.headers.get("x-correlation-id") or str(uuid.uuid4())
    request.state.correlation_id = cid
    response = await call_next(request)
    response.headers["x-correlation-id"] = cid
    return response

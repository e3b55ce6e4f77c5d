"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from formation_api.core.config import settings

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Keep references so pending audit writes are not garbage-collected mid-flight
_pending: set[asyncio.Task] = set()


def infer_entity(path: str) -> tuple[str, str | None]:
    """Map a request path to ``(entity_type, entity_id)``.

    /api/orders/<id>/progress  -> ("order", "<id>")
    /api/orders/documents/upload -> ("document", None)
    """
    parts = [p for p in path.strip("/").split("/") if p and p != "api"]
    if not parts:
        return "unknown", None
    if "documents" in parts:
        return "document", None
    entity_type = parts[0].rstrip("s")  # simple singularize
    entity_id = parts[1] if len(parts) >= 2 and len(parts[1]) == 36 else None
    return entity_type, entity_id


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written asynchronously AFTER the response is sent so it
    never adds latency to the request. Failures in audit logging are caught and
    logged; they never raise to the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if settings.audit_enabled and request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            task = asyncio.create_task(
                self._record(request, response.status_code, duration_ms)
            )
            _pending.add(task)
            task.add_done_callback(_pending.discard)

        return response

    async def _record(
        self, request: Request, status_code: int, duration_ms: int
    ) -> None:
        """Persist an audit row. Swallows all errors to avoid cascading failures."""
        try:
            from formation_api.db.base import async_session_factory
            from formation_api.domain.audit import AuditTrail

            entity_type, entity_id = infer_entity(request.url.path)

            async with async_session_factory() as session:
                session.add(
                    AuditTrail(
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type,
                        entity_id=entity_id,
                        status_code=status_code,
                        duration_ms=duration_ms,
                        description=f"{request.method} {request.url.path} → {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception as exc:  # pragma: no cover
            logger.warning("Audit write failed for %s %s: %s", request.method, request.url.path, exc)


async def drain_pending_audits() -> None:
    """Wait for in-flight audit writes (shutdown and tests)."""
    if _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)

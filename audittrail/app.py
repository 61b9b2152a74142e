import json
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import Settings
from .ingest import RequestContext
from .service import AuditService, Result
from .store.base import EventStore
from .store.factory import make_store

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "malformed_input": 400,
    "store_unavailable": 503,
}

ENDPOINTS = [
    "POST /api/audit",
    "GET /api/audit/events",
    "GET /api/audit/summary",
    "GET /api/audit/stats",
    "GET /api/audit/export",
    "DELETE /api/audit/clear",
]


def _failure(res: Result) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS.get(res.error.code, 500),
        content={"success": False, "error": res.error.code, "message": res.error.message},
    )


def get_service(request: Request) -> AuditService:
    return request.app.state.audit


def create_app(store: Optional[EventStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Audit Trail API", version="0.1.0")
    app.state.audit = AuditService(store if store is not None else make_store(settings), settings)
    logger.info("audit store: %s (capacity %d)", type(app.state.audit.store).__name__, settings.capacity)

    # CORS so the portfolio pages can POST from the browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health")
    def health(svc: AuditService = Depends(get_service)):
        return {"ok": True, "service": "audit-trail-api", "store": svc.store_ok()}

    @app.get("/api/audit")
    def index(svc: AuditService = Depends(get_service)):
        res = svc.count()
        if not res.ok:
            return _failure(res)
        return {"message": "Audit API", "currentData": res.data, "endpoints": ENDPOINTS}

    @app.post("/api/audit")
    async def submit_event(request: Request, svc: AuditService = Depends(get_service)):
        """
        Accept one event object. The server adds receivedAt, ipHash,
        userAgent and referer; the oldest events are dropped past capacity.
        """
        body = await request.body()
        res = svc.submit(body, RequestContext.from_headers(request.headers))
        if not res.ok:
            return _failure(res)
        return {"success": True, "message": "Event logged", "total": res.data}

    @app.get("/api/audit/events")
    def list_events(svc: AuditService = Depends(get_service)):
        res = svc.events()
        if not res.ok:
            return _failure(res)
        return [e.to_wire() for e in res.data]

    @app.get("/api/audit/summary")
    def summary(svc: AuditService = Depends(get_service)):
        res = svc.summary()
        if not res.ok:
            return _failure(res)
        return res.data.model_dump(by_alias=True, mode="json")

    @app.get("/api/audit/stats")
    def stats(svc: AuditService = Depends(get_service)):
        res = svc.stats()
        if not res.ok:
            return _failure(res)
        return res.data.model_dump(by_alias=True, mode="json")

    @app.get("/api/audit/export")
    def export(svc: AuditService = Depends(get_service)):
        res = svc.export()
        if not res.ok:
            return _failure(res)
        return Response(
            content=json.dumps([e.to_wire() for e in res.data], indent=2),
            media_type="application/json",
            headers={"Content-Disposition": "attachment; filename=audit-logs.json"},
        )

    @app.delete("/api/audit/clear")
    def clear(svc: AuditService = Depends(get_service)):
        res = svc.clear()
        if not res.ok:
            return _failure(res)
        return {"success": True, "message": "Data cleared"}

    return app


app = create_app()

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .catalog.feed import FeedClient
from .config import Settings, load_settings
from .errors import DeliveryRangeError, ErrorKind
from .matching.models import CalculationRequest
from .models import CalculationResponse, PreprocessResponse
from .service import CalculatorService, CatalogFeed
from .storage.redis_store import RedisStore
from .storage.store import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.format: 422,
    ErrorKind.data: 422,
    ErrorKind.invalid_query: 400,
    ErrorKind.not_found: 404,
    ErrorKind.feed: 502,
    ErrorKind.store: 503,
}


def create_app(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    feed: CatalogFeed | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if store is None:
        if settings.redis_url:
            logger.info("Using redis store")
            store = RedisStore.from_url(settings.redis_url)
        else:
            store = InMemoryStore(max_value_bytes=settings.max_value_bytes)
    feed = feed if feed is not None else FeedClient(settings)
    service = CalculatorService(settings, store, feed)

    app = FastAPI(title="Distance Calculator API", version=settings.version)
    app.state.settings = settings
    app.state.service = service

    # ── Error mapping ────────────────────────────────────────────────────

    @app.exception_handler(DeliveryRangeError)
    async def delivery_range_error_handler(request: Request, exc: DeliveryRangeError) -> JSONResponse:
        status = STATUS_BY_KIND.get(exc.kind, 500)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status,
            content={"detail": exc.message, "code": exc.kind.value},
        )

    # ── Public endpoints ─────────────────────────────────────────────────

    @app.get("/ping", response_class=PlainTextResponse)
    def ping() -> str:
        return "pong"

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # ── Calculator endpoints ─────────────────────────────────────────────

    @app.post(f"{settings.prefix}/calculate/preprocess", response_model=PreprocessResponse)
    async def preprocess() -> PreprocessResponse:
        count = await service.preprocess_restaurants()
        return PreprocessResponse(status="ok", restaurants=count)

    @app.get(f"{settings.prefix}/calculate/restaurants", response_model=CalculationResponse)
    async def calculate(
        lat: float = Query(..., ge=-90.0, le=90.0),
        long: float = Query(..., ge=-180.0, le=180.0),
        now: datetime | None = Query(default=None, description="Defaults to the server's local time"),
    ) -> CalculationResponse:
        request = CalculationRequest(lat=lat, long=long, now=now or datetime.now())
        ids = await service.calculate_delivery_range(request)
        return CalculationResponse(restaurant_ids=ids)

    return app


app = create_app()

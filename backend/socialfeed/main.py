"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from socialfeed import obs
from socialfeed.feed import router as feed_router
from socialfeed.infra import postgres
from socialfeed.obs import health
from socialfeed.obs.logging import current_request_id
from socialfeed.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	try:
		yield
	finally:
		await postgres.close_pool()


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		payload = {"detail": exc.detail, "request_id": current_request_id()}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		payload = {"detail": "validation_error", "errors": exc.errors(), "request_id": current_request_id()}
		return JSONResponse(status_code=422, content=payload)


app = FastAPI(title="server-beta feed", lifespan=lifespan)

if settings.cors_allow_origins:
	app.add_middleware(
		CORSMiddleware,
		allow_origins=list(settings.cors_allow_origins),
		allow_credentials=True,
		allow_methods=["GET"],
		allow_headers=["*"],
	)

obs.init(app)
install_error_handlers(app)
app.include_router(feed_router)


@app.get("/health/live")
async def liveness() -> dict[str, bool]:
	return {"ok": True}


@app.get("/health/ready")
async def readiness_endpoint() -> JSONResponse:
	status_payload = await health.readiness()
	return JSONResponse(status_code=200 if status_payload["ok"] else 503, content=status_payload)


@app.get("/metrics")
async def metrics_endpoint() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from rentease.backend.local import LocalTransport
from rentease.backend.rest import RestTransport
from rentease.core.config import settings
from rentease.core.errors import (
	AuthRequired, auth_required_handler, cancelled_handler, validation_exception_handler,
)
from rentease.core.logging import log_event, request_id_middleware
from rentease.db.base import Base
from rentease.dependencies import session_cookie_middleware
from rentease.routers.auth import router as auth_router
from rentease.routers.feed import router as feed_router
from rentease.routers.items import router as items_router
from rentease.routers.listings import router as listings_router
from rentease.routers.profile import router as profile_router
from rentease.views.base import Cancelled


def create_transport():
	if settings.BACKEND == "supabase":
		return RestTransport(
			settings.SUPABASE_URL,
			settings.SUPABASE_ANON_KEY,
			jwt_secret=settings.SUPABASE_JWT_SECRET,
			timeout=settings.BACKEND_TIMEOUT_SEC,
		)
	if settings.BACKEND != "local":
		raise RuntimeError(f"Unknown BACKEND {settings.BACKEND!r} (expected 'local' or 'supabase')")

	from rentease.db.session import SessionLocal, engine

	# DB init
	Base.metadata.create_all(bind=engine)
	return LocalTransport(SessionLocal)


def create_app(transport=None) -> FastAPI:
	transport = transport or create_transport()

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		log_event("startup", app=settings.APP_NAME, backend=type(transport).__name__)
		yield
		await transport.aclose()
		log_event("shutdown", app=settings.APP_NAME)

	app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
	app.state.transport = transport

	# Middleware
	app.middleware("http")(session_cookie_middleware)
	app.middleware("http")(request_id_middleware)

	# Validation error handler (consistent format)
	app.add_exception_handler(RequestValidationError, validation_exception_handler)
	app.add_exception_handler(AuthRequired, auth_required_handler)
	app.add_exception_handler(Cancelled, cancelled_handler)

	# Routers
	app.include_router(feed_router)
	app.include_router(auth_router)
	app.include_router(listings_router)
	app.include_router(items_router)
	app.include_router(profile_router)

	@app.get("/health")
	def health():
		return {"status": "OK"}

	return app


if __name__ == "__main__":
	import uvicorn
	uvicorn.run(create_app(), host="0.0.0.0", port=8000)

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .generation import GenerationError
from .settings import settings
from .store import RecordNotFound, SessionStore
from .routers import health
from .routers import highlight
from .routers import lessons
from .routers import speaking
from .routers import speaking_practice
from .routers import vocabulary
from .routers import vocabulary_game
from .routers import vocabulary_learn
from .routers import writing

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(database_url: Optional[str] = None) -> FastAPI:
	app = FastAPI(title="IELTS Study API")
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(health.router)
	app.include_router(vocabulary_game.router)
	app.include_router(lessons.router)
	app.include_router(vocabulary_learn.router)
	app.include_router(speaking_practice.router)
	app.include_router(speaking.router)
	app.include_router(writing.router)
	app.include_router(vocabulary.router)
	app.include_router(highlight.router)

	@app.on_event("startup")
	async def open_store():
		store = SessionStore(database_url or settings.database_url)
		store.create_all()
		app.state.store = store
		logger.info("Session store opened at %s", store.engine.url.render_as_string(hide_password=True))

	@app.on_event("shutdown")
	async def close_store():
		store = getattr(app.state, "store", None)
		if store is not None:
			store.close()

	@app.exception_handler(GenerationError)
	async def generation_error_handler(request: Request, exc: GenerationError):
		logger.error("Generation failed on %s: %s", request.url.path, exc)
		return JSONResponse(status_code=502, content={"detail": str(exc)})

	@app.exception_handler(RecordNotFound)
	async def not_found_handler(request: Request, exc: RecordNotFound):
		return JSONResponse(status_code=404, content={"detail": str(exc)})

	@app.exception_handler(SQLAlchemyError)
	async def database_error_handler(request: Request, exc: SQLAlchemyError):
		logger.exception("Database error on %s", request.url.path)
		return JSONResponse(status_code=500, content={"detail": "Database error"})

	@app.exception_handler(Exception)
	async def unexpected_error_handler(request: Request, exc: Exception):
		logger.exception("Unhandled error on %s", request.url.path)
		return JSONResponse(status_code=500, content={"detail": str(exc) or "Internal server error"})

	return app


configure_logging(settings.log_level)
app = create_app()

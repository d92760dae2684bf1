import logging
import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from todo_api import config
from todo_api.database import Base, engine
from todo_api.logging_setup import setup_logging
from todo_api.models import task, user  # noqa: F401  (register tables)
from todo_api.routers import auth, tasks, uploads

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Todo API")

# API routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(uploads.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
	start = time.perf_counter()
	response = await call_next(request)
	elapsed_ms = (time.perf_counter() - start) * 1000
	logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
	return response


def _error(status_code: int, detail, headers=None):
	return JSONResponse(status_code=status_code, content={"status": status_code, "detail": detail}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
	return _error(exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
	# malformed body, unparsable path id or query value -> 400
	messages = []
	for err in exc.errors():
		field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query"))
		msg = err.get("msg", "invalid value")
		messages.append(f"{field}: {msg}" if field else msg)
	return _error(400, "; ".join(messages) or "invalid request")


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	return _error(500, "Internal server error")

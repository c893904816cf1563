from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse, Response
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from api.bootstrap import build_relay
from api.config import create_db, get_settings
from api.errors import TutorChatError
from api.routes.chat_routes import chat_routes
from api.routes.message_routes import message_routes
from api.routes.tutor_routes import tutor_routes
from api.utils.logger import clear_request_id, configure_logging, set_request_id

settings = get_settings()
logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db()
    # Tests install their own relay before startup.
    if getattr(app.state, "relay", None) is None:
        app.state.relay = build_relay(settings)
    yield


app = FastAPI(title="Tutor Chat", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id"))
    try:
        logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
        response: Response = await call_next(request)
        logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


@app.exception_handler(TutorChatError)
async def tutor_chat_error_handler(request: Request, exc: TutorChatError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("error status=%s method=%s path=%s error=%s", exc.status_code, request.method, request.url.path, exc.message)
    else:
        logger.warning("error status=%s method=%s path=%s error=%s", exc.status_code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("validation error method=%s path=%s errors=%s", request.method, request.url.path, exc.errors())
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body") or "request"
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"error": f"{field}: {first.get('msg', 'invalid request')}"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


@app.get("/")
def read_root():
    return {"message": "Tutor Chat is Healthy"}


app.include_router(tutor_routes)
app.include_router(chat_routes)
app.include_router(message_routes)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)

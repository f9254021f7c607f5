import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import Optional

import firebase_admin
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from firebase_admin import auth, firestore
from starlette.exceptions import HTTPException

from config import Settings
from config.cloudinary import configure_cloudinary
from config.firebase import init_firebase
from errors import BlogError
from routers import all_routers
from services.accounts import IdTokenVerifier
from store import FirestoreStore, Store

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    verify_id_token: Optional[IdTokenVerifier] = None,
) -> FastAPI:
    """Build the API.

    Without ``store`` the app connects to Firestore on startup using the
    credentials named in ``settings`` and releases the Firebase app on
    shutdown.
    """
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        firebase_app = None
        if app.state.store is None:
            firebase_app = init_firebase(settings)
            app.state.store = FirestoreStore(firestore.client(app=firebase_app))
            if app.state.verify_id_token is None:
                app.state.verify_id_token = partial(auth.verify_id_token, app=firebase_app)
            logger.info("Connected to Firestore")
        try:
            yield
        finally:
            if firebase_app is not None:
                app.state.store.close()
                firebase_admin.delete_app(firebase_app)

    app = FastAPI(title="Blog API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.verify_id_token = verify_id_token

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    configure_cloudinary(settings)

    @app.exception_handler(BlogError)
    async def blog_error_handler(request: Request, exc: BlogError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    for router in all_routers:
        app.include_router(router)

    return app


if __name__ == "__main__":
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)

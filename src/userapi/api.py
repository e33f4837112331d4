"""FastAPI application exposing create/read/update/delete endpoints for users."""

from contextlib import asynccontextmanager
from typing import Annotated, Generator, List, Optional

import logging
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import services
from .config import Settings, settings as default_settings
from .database import init_db, make_engine, make_session_factory
from .services import StoreError


logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


class UserIn(BaseModel):
    """Request body for creating or replacing a user."""

    name: Optional[str] = Field(None, examples=["John Doe"])
    email: Optional[str] = Field(None, examples=["johndoe@example.com"])


class UserOut(UserIn):
    """Serialized user."""

    id: int = Field(..., examples=[1])

    model_config = ConfigDict(from_attributes=True)


class Message(BaseModel):
    """Error envelope returned by every failing request."""

    message: str


# SQLite stores integers as signed 64-bit values
UserId = Annotated[int, Path(ge=-(2**63), le=2**63 - 1, examples=[1])]

NOT_FOUND_RESPONSE = {404: {"model": Message, "description": USER_NOT_FOUND}}
ERROR_RESPONSES = {
    400: {"model": Message, "description": "Malformed request"},
    500: {"model": Message, "description": "Database error"},
}


def get_db(request: Request) -> Generator[Session, None, None]:
    """Provide a session on the application's engine for one request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def _endpoint_label(request: Request) -> str:
    """Route template of the matched route, so ids do not become labels."""
    route = request.scope.get("route")
    return route.path if route is not None else "unmatched"


async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes while updating metrics."""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=_endpoint_label(request),
            status=str(response.status_code),
        ).inc()
        logger.info(
            "response %s %s status %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response
    except Exception:
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=_endpoint_label(request),
            status="500",
        ).inc()
        logger.exception(
            "error handling %s %s", request.method, request.url.path
        )
        raise


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        "{}: {}".format(".".join(str(part) for part in err["loc"]), err["msg"])
        for err in exc.errors()
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": exc.message},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around its own engine and session factory."""

    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(
            app.state.engine,
            reset=settings.reset_on_startup,
            seed=settings.seed_on_startup,
        )
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        docs_url="/swagger",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.session_factory = make_session_factory(app.state.engine)

    app.middleware("http")(log_requests)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.include_router(router)

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)


@router.get("", response_model=List[UserOut], summary="List all users")
def list_users(db: Session = Depends(get_db)):
    """Return every user ordered by id."""

    return services.list_users(db)


@router.get(
    "/{user_id}",
    response_model=UserOut,
    responses=NOT_FOUND_RESPONSE,
    summary="Get a user by id",
)
def get_user(user_id: UserId, db: Session = Depends(get_db)):
    user = services.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
    return user


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
def create_user(payload: UserIn, db: Session = Depends(get_db)):
    """Store a new user and return it with the id assigned by the database."""

    user_id = services.create_user(db, payload.name, payload.email)
    return UserOut(id=user_id, **payload.model_dump())


@router.put(
    "/{user_id}",
    response_model=UserOut,
    responses=NOT_FOUND_RESPONSE,
    summary="Replace a user's name and email",
)
def update_user(user_id: UserId, payload: UserIn, db: Session = Depends(get_db)):
    """Overwrite name and email; the id never changes."""

    if not services.update_user(db, user_id, payload.name, payload.email):
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
    return UserOut(id=user_id, **payload.model_dump())


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND_RESPONSE,
    summary="Delete a user",
)
def delete_user(user_id: UserId, db: Session = Depends(get_db)):
    if not services.delete_user(db, user_id):
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


app = create_app()

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError, field_validator

from little_lemon.core.config import settings
from little_lemon.core.logging import configure_logging, request_id_ctx
from little_lemon.core.sentry import init_sentry
from little_lemon.menu.filters import display_category
from little_lemon.menu.models import MenuItem, resolve_image_url
from little_lemon.profile.models import CONTROL_CHARS_RE, ProfileRecord
from little_lemon.state import AppState

configure_logging(settings.log_level)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_sentry()
    try:
        yield
    finally:
        await state.aclose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
state = AppState()


class SearchRequest(BaseModel):
    text: str = Field(default="", max_length=200)
    flush: bool = False

    @field_validator("text")
    @classmethod
    def strip_control_chars(cls, value: str) -> str:
        return CONTROL_CHARS_RE.sub("", value)


class MenuItemView(MenuItem):
    image_url: str = ""


class CategoryView(BaseModel):
    name: str
    label: str
    selected: bool


class MenuResponse(BaseModel):
    items: list[MenuItemView]
    categories: list[CategoryView]
    query: str
    search_pending: bool = False
    alerts: list[str] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    profile: ProfileRecord
    initials: str
    alerts: list[str] = Field(default_factory=list)


class StatusResponse(BaseModel):
    status: str
    alerts: list[str] = Field(default_factory=list)


def _menu_response() -> MenuResponse:
    controller = state.menu
    base_url = state.settings.menu_image_base_url
    return MenuResponse(
        items=[
            MenuItemView(
                **item.model_dump(),
                image_url=resolve_image_url(item.image, base_url),
            )
            for item in controller.items
        ],
        categories=[
            CategoryView(name=name, label=display_category(name), selected=selected)
            for name, selected in zip(controller.categories, controller.selections)
        ],
        query=controller.query_text,
        search_pending=controller.search_pending,
        alerts=state.alerts.drain(),
    )


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    token = request_id_ctx.set(request_id)
    sentry_sdk.set_tag("request_id", request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_ctx.reset(token)
    response.headers["x-request-id"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("request_validation_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(ValidationError)
async def pydantic_validation_handler(request: Request, exc: ValidationError):
    logger.warning("pydantic_validation_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
async def health() -> dict[str, str]:
    logger.info("health_check")
    return {"status": "ok"}


@app.get("/menu", response_model=MenuResponse)
async def get_menu() -> MenuResponse:
    """
    Return the menu list, loading it from the cache (or the remote menu
    when the cache is empty) on first access.
    """
    if not state.menu.mounted:
        await state.menu.load_initial()
    return _menu_response()


@app.post("/menu/search", response_model=MenuResponse)
async def search_menu(payload: SearchRequest) -> MenuResponse:
    state.menu.search(payload.text)
    if payload.flush:
        await state.menu.flush_search()
    return _menu_response()


@app.post("/menu/categories/{index}/toggle", response_model=MenuResponse)
async def toggle_category(index: int) -> MenuResponse:
    try:
        await state.menu.toggle_category(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _menu_response()


@app.get("/profile", response_model=ProfileResponse)
async def get_profile() -> ProfileResponse:
    profile = await state.get_profile()
    return ProfileResponse(
        profile=profile,
        initials=profile.initials,
        alerts=state.alerts.drain(),
    )


@app.put("/profile", response_model=ProfileResponse)
async def put_profile(profile: ProfileRecord) -> ProfileResponse:
    await state.save_profile(profile)
    return ProfileResponse(
        profile=profile,
        initials=profile.initials,
        alerts=state.alerts.drain(),
    )


@app.post("/logout", response_model=StatusResponse)
async def logout() -> StatusResponse:
    await state.logout()
    alerts = state.alerts.drain()
    return StatusResponse(status="error" if alerts else "ok", alerts=alerts)

import asyncio
import uuid
from contextlib import asynccontextmanager

import anyio
import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import BaseModel, ValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from menu_admin.board import MenuBoard
from menu_admin.core.config import settings
from menu_admin.core.errors import StoreError
from menu_admin.core.logging import configure_logging, request_id_ctx
from menu_admin.core.sentry import init_sentry
from menu_admin.forms.item_form import FormOutcome, FormResult, ItemForm
from menu_admin.forms.models import MenuItemDraft
from menu_admin.store.base import MenuItem
from menu_admin.store.factory import build_store
from menu_admin.view.projection import ActiveSort, SortKey
from menu_admin.web.pages import render_menu_page

configure_logging(
    settings.log_level,
    service=settings.app_name,
    environment=settings.environment,
    store_backend=settings.store_backend,
)
init_sentry()
logger = structlog.get_logger(__name__)

store = build_store()
board = MenuBoard()


@asynccontextmanager
async def lifespan(app: FastAPI):
    loop = asyncio.get_running_loop()
    with board.attach(store, dispatch=loop.call_soon_threadsafe):
        logger.info(
            "service_started",
            store=type(store).__name__,
            collection=board.collection,
        )
        yield
    logger.info("service_stopped")


app = FastAPI(title=settings.app_name, lifespan=lifespan)
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


class MenuView(BaseModel):
    items: list[MenuItem]
    sort: ActiveSort
    indicators: dict[str, str]
    pending_delete: str | None = None


class DeleteState(BaseModel):
    pending_delete: str | None = None
    deleted: bool = False


def _menu_view() -> MenuView:
    projection = board.projection
    return MenuView(
        items=projection.items,
        sort=projection.active_sort,
        indicators=projection.indicators(),
        pending_delete=board.deletion.item_id if board.deletion.open else None,
    )


def _get_item_or_404(item_id: str) -> MenuItem:
    item = board.projection.find(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


def _back_to_page() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


def _describe_validation_error(exc: ValidationError) -> str:
    fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
    return "Please check: " + ", ".join(fields) if fields else "Invalid item."


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request_id_token = request_id_ctx.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_ctx.reset(request_id_token)
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


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.warning(
        "store_request_failed",
        path=request.url.path,
        service=exc.service,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=503, content={"detail": f"Upstream {exc.service} error"})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limit_exceeded", path=request.url.path)
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please slow down."},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
async def health() -> dict[str, str]:
    logger.info("health_check")
    return {"status": "ok"}


@app.get("/ready")
async def ready() -> JSONResponse:
    try:
        with anyio.fail_after(1.5):
            await anyio.to_thread.run_sync(store.check_health, abandon_on_cancel=True)
    except Exception as exc:  # noqa: BLE001 - any failure means not ready
        checks = {"store": {"status": "error", "error": str(exc) or type(exc).__name__}}
        return JSONResponse(status_code=503, content={"status": "error", "checks": checks})
    return JSONResponse(
        status_code=200,
        content={"status": "ok", "checks": {"store": {"status": "ok"}}},
    )


# JSON API


@app.get("/menu", response_model=MenuView)
async def get_menu() -> MenuView:
    return _menu_view()


@app.post("/menu/sort/{key}", response_model=MenuView)
async def sort_menu(key: SortKey) -> MenuView:
    board.projection.sort_by(key)
    logger.info("menu_sorted", key=key, direction=board.projection.active_sort.direction.value)
    return _menu_view()


@app.post("/menu/items", response_model=FormResult, status_code=201)
@limiter.limit(settings.admin_rate_limit)
async def create_item(request: Request, payload: MenuItemDraft):
    form = ItemForm()
    form.open_for_create()
    result = await form.submit(payload, store, board.collection)
    if result.status == FormOutcome.rejected:
        return JSONResponse(status_code=422, content={"detail": result.detail})
    if result.status == FormOutcome.failed:
        return JSONResponse(status_code=200, content=result.model_dump(mode="json"))
    return result


@app.put("/menu/items/{item_id}", response_model=FormResult)
@limiter.limit(settings.admin_rate_limit)
async def update_item(request: Request, item_id: str, payload: MenuItemDraft) -> FormResult:
    form = ItemForm()
    form.open_for_edit(_get_item_or_404(item_id))
    return await form.submit(payload, store, board.collection)


@app.post("/menu/items/{item_id}/delete", response_model=DeleteState)
async def request_delete(item_id: str) -> DeleteState:
    _get_item_or_404(item_id)
    board.deletion.request(item_id)
    return DeleteState(pending_delete=item_id)


@app.post("/menu/delete/confirm", response_model=DeleteState)
@limiter.limit(settings.admin_rate_limit)
async def confirm_delete(request: Request) -> DeleteState:
    deleted = await board.deletion.confirm(store, board.collection)
    return DeleteState(deleted=deleted)


@app.post("/menu/delete/cancel", response_model=DeleteState)
async def cancel_delete() -> DeleteState:
    board.deletion.cancel()
    return DeleteState()


# HTML admin page


@app.get("/", response_class=HTMLResponse)
async def menu_page() -> HTMLResponse:
    return HTMLResponse(render_menu_page(board))


@app.post("/ui/sort/{key}")
async def ui_sort(key: SortKey) -> RedirectResponse:
    board.projection.sort_by(key)
    return _back_to_page()


@app.post("/ui/form/open")
async def ui_open_form() -> RedirectResponse:
    board.form.open_for_create()
    return _back_to_page()


@app.post("/ui/form/close")
async def ui_close_form() -> RedirectResponse:
    board.form.close()
    return _back_to_page()


@app.post("/ui/items/{item_id}/edit")
async def ui_edit_item(item_id: str) -> RedirectResponse:
    board.form.open_for_edit(_get_item_or_404(item_id))
    return _back_to_page()


@app.post("/ui/form")
async def ui_submit_form(request: Request) -> RedirectResponse:
    form_data = await request.form()
    try:
        draft = MenuItemDraft.model_validate(dict(form_data))
    except ValidationError as exc:
        board.form.validation_error = _describe_validation_error(exc)
        return _back_to_page()
    await board.form.submit(draft, store, board.collection)
    return _back_to_page()


@app.post("/ui/items/{item_id}/delete")
async def ui_request_delete(item_id: str) -> RedirectResponse:
    board.deletion.request(item_id)
    return _back_to_page()


@app.post("/ui/delete/confirm")
async def ui_confirm_delete() -> RedirectResponse:
    await board.deletion.confirm(store, board.collection)
    return _back_to_page()


@app.post("/ui/delete/cancel")
async def ui_cancel_delete() -> RedirectResponse:
    board.deletion.cancel()
    return _back_to_page()

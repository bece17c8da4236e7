"""Cloud Archive web application.

FastAPI app that serves the server-rendered browser pages and the
versioned ``/api/v1/`` JSON API.

Pages:
  - ``/login``  — Google sign-in button, rejection notices
  - ``/``       — bucket selector, breadcrumbs, folder view or search results

Navigation is carried in query parameters and applied to the user's
NavigationState on every page request:
  - ``bucket``  selected bucket (first bucket when missing)
  - ``path``    current folder
  - ``q``       search text (present but blank clears the search)
  - ``crumb``   breadcrumb index clicked, relative to ``path``
  - ``open``    search result clicked; lands in the folder holding it
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from cloudarchive.api.deps import get_registry, get_storage
from cloudarchive.api.v1 import mount_v1_routers
from cloudarchive.api.v1.buckets import load_bucket
from cloudarchive.api.v1.schemas.common import ErrorResponse
from cloudarchive.config import get_settings
from cloudarchive.dashboard_auth import auth_middleware, auth_router, session_user
from cloudarchive.hierarchy import (
    BrowserRegistry,
    NavigationMode,
    NavigationState,
    breadcrumbs,
    format_size,
    key_prefix,
    object_key,
)
from cloudarchive.storage import FetchError, GCSClient

logger = logging.getLogger(__name__)

FRONTEND_DIR = Path(__file__).parent / "frontend"
TEMPLATES_DIR = FRONTEND_DIR / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["filesize"] = format_size
templates.env.filters["basename"] = lambda path: path.rsplit("/", 1)[-1] or "/"
templates.env.filters["key_prefix"] = key_prefix
templates.env.globals["object_key"] = object_key

LOGIN_ERRORS = {
    "AccessDenied": "Your account is not allowed to access this archive.",
    "SignInFailed": "Sign-in failed. Please try again.",
    "Configuration": "Google sign-in is not configured on this server.",
}


def resolve_navigation(
    path: str = "",
    q: str | None = None,
    crumb: int | None = None,
    open_item: str | None = None,
) -> NavigationState:
    """Apply the page's query parameters as a navigation transition."""
    here = NavigationState(current_path=path)
    if open_item is not None:
        return here.open_search_result(open_item)
    if crumb is not None:
        return here.breadcrumb_click(crumb)
    if q is not None:
        return here.search(q)
    return NavigationState().select_folder(path)


async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; "
        "style-src 'self'; "
        "img-src 'self' data: https://*.googleusercontent.com; "
        "frame-ancestors 'none'"
    )
    if request.url.scheme == "https" or request.headers.get("x-forwarded-proto") == "https":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


async def fetch_error_handler(request: Request, exc: FetchError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message).model_dump(),
    )


async def login_page(request: Request, error: str = ""):
    """Serve the sign-in page."""
    if session_user(request):
        return RedirectResponse("/", status_code=303)
    return templates.TemplateResponse(
        request,
        "login.html",
        {"error": LOGIN_ERRORS.get(error, LOGIN_ERRORS["SignInFailed"] if error else "")},
    )


async def index(
    request: Request,
    bucket: str = "",
    path: str = "",
    q: str | None = None,
    crumb: int | None = None,
    open_item: str | None = Query(None, alias="open"),
    storage: GCSClient = Depends(get_storage),
    registry: BrowserRegistry = Depends(get_registry),
):
    """Serve the main browsing page."""
    user = request.state.user
    browser = registry.get(user)
    context: dict = {
        "user": user,
        "user_name": getattr(request.state, "user_name", ""),
        "buckets": [],
        "bucket": "",
        "state": browser.state,
        "view": None,
        "breadcrumbs": [],
        "error": "",
    }

    try:
        buckets = await run_in_threadpool(storage.list_buckets)
        context["buckets"] = buckets
        bucket = bucket or browser.bucket or (buckets[0] if buckets else "")
        if bucket:
            active = await load_bucket(browser, storage, bucket)
            active.navigate(resolve_navigation(path, q, crumb, open_item))
            context.update(
                bucket=bucket,
                state=active.state,
                view=active.view(),
                breadcrumbs=breadcrumbs(active.state.current_path),
            )
    except FetchError as e:
        context["error"] = e.message

    context["searching"] = context["state"].mode is NavigationMode.SEARCH
    return templates.TemplateResponse(request, "index.html", context)


def create_app() -> FastAPI:
    """Build the Cloud Archive FastAPI application."""
    from cloudarchive import __version__

    settings = get_settings()

    app = FastAPI(
        title="Cloud Archive",
        description="Browse and download Google Cloud Storage buckets.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    if settings.cors_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type"],
        )

    # Last registered runs outermost: security headers also cover auth redirects
    app.middleware("http")(auth_middleware)
    app.middleware("http")(security_headers_middleware)

    app.add_exception_handler(FetchError, fetch_error_handler)

    app.mount("/static", StaticFiles(directory=FRONTEND_DIR / "static"), name="static")

    app.include_router(auth_router)
    mount_v1_routers(app)

    app.add_api_route("/login", login_page, methods=["GET"], include_in_schema=False)
    app.add_api_route("/", index, methods=["GET"], include_in_schema=False)

    return app


def run_dashboard(host: str = "127.0.0.1", port: int = 8000, dev: bool = False) -> None:
    """Start the web server."""
    import uvicorn

    logger.info("Cloud Archive listening on http://%s:%s", host, port)

    if dev:
        src_dir = str(Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "cloudarchive.dashboard:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            log_level="debug",
        )
    else:
        uvicorn.run(create_app(), host=host, port=port, log_config=None)

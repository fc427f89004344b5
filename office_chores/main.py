import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from office_chores.config.settings import settings
from office_chores.database.supabase_client import get_supabase
from office_chores.modules.members import routes as members_routes
from office_chores.modules.chores import routes as chores_routes
from office_chores.modules.completions import routes as completions_routes
from office_chores.modules.calendar import routes as calendar_routes
from office_chores.modules.sync import routes as sync_routes
from office_chores.modules.sync.gateway import SupabaseGateway
from office_chores.modules.sync.store import SyncStore

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(members_routes.router, prefix="/api/v1")
app.include_router(chores_routes.router, prefix="/api/v1")
app.include_router(completions_routes.router, prefix="/api/v1")
app.include_router(calendar_routes.router, prefix="/api/v1")
app.include_router(sync_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    store = getattr(app.state, "store", None)
    if store is None:
        store = SyncStore(SupabaseGateway(await get_supabase()))
        app.state.store = store
    if not await store.initialize():
        logger.error(f"Store initialization failed: {store.state.error}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
    store = getattr(app.state, "store", None)
    if store is not None:
        await store.close()


@app.get("/")
async def root():
    return {"message": "Welcome to office-chores", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: ready once the store has finished its initial load."""
    store = getattr(app.state, "store", None)
    if store is None or store.state.is_loading:
        return JSONResponse(status_code=503, content={"status": "not ready"})
    return {"status": "ready"}

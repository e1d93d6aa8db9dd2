from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from app.core import config
from app.core.database.engine import init_db
from app.core.exceptions import RBACAdminError, ValidationFailed
from app.core.rate_limit import limiter
from app.features.auth.routes import router as auth_router, profile_router
from app.features.dashboard.routes import router as dashboard_router
from app.features.permissions.routes import router as permission_router
from app.features.roles.routes import router as role_router
from app.features.users.routes import router as user_router
from app.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="RBAC Admin",
    description="Role-based access control administration API",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.app.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    # Malformed query strings and non-object bodies; field rules answer 422 below
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = ".".join(str(part) for part in error["loc"][1:]) or "root"
        errors.setdefault(key, error["msg"])
    log.info("Malformed request %s", errors)
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"message": "The request is malformed.", "errors": errors}),
    )


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(_request: Request, exc: ValidationFailed):
    log.info("Validation failed %s", exc.errors)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "errors": exc.errors},
    )


@app.exception_handler(RBACAdminError)
async def rbac_admin_error_handler(_request: Request, exc: RBACAdminError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, exc: RateLimitExceeded) -> Response:
    log.info("Rate limit hit: %s", exc.detail)
    return JSONResponse({"message": "Too many attempts. Please try again later."}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "RBAC Admin API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Send the token from /auth/login as a Bearer token in the Authorization header",
            "public_endpoints": ["/", "/health", "/auth/login"],
        },
        "features": {
            "users": "User accounts and their roles",
            "roles": "Roles and the permissions they grant",
            "permissions": "Named permissions checked by every admin operation",
            "profile": "Self-service profile for the signed-in user",
            "dashboard": "Entity counts",
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(profile_router, prefix="/profile", tags=["profile"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(user_router, prefix="/users", tags=["users"])
app.include_router(role_router, prefix="/roles", tags=["roles"])
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])

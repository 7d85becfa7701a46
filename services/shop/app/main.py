# app/main.py
from html import escape

from fastapi import FastAPI, Request
from fastapi.openapi.utils import get_openapi
from fastapi.responses import HTMLResponse, JSONResponse

from app.core.database import Base, engine
from app.core.errors import DomainError
from app.models import store as store_models  # noqa: F401  registra las tablas en Base
from app.routers import auth, bookings, catalog, clients, shops
from shared import (
    EventPublisher,
    RequestContextLogMiddleware,
    configure_cors,
    configure_logging,
    create_health_router,
    database_lifespan_factory,
    load_service_config,
)
from shared.cache import create_redis_cache

tags_metadata = [
    {"name": "Auth", "description": "Ingreso de administradores, barberos y de la plataforma."},
    {"name": "Shops", "description": "Alta de locales, planes, perfil público, turnos web y configuración."},
    {"name": "Catalog", "description": "Servicios, barberos, insumos, recepción y planes de membresía."},
    {"name": "Clients", "description": "Fichero de clientes, membresías y exportación CSV."},
    {"name": "Bookings", "description": "Agenda, cierre de turnos con consumos y tablero."},
]

_CONFIG = load_service_config("shop")
_LOGGER = configure_logging("shop")

# Publicador de eventos solo si Redis está configurado
_EVENT_PUBLISHER = (
    EventPublisher(_CONFIG.redis.url, _CONFIG.redis.stream)
    if isinstance(_CONFIG.redis.url, str) and _CONFIG.redis.url.strip()
    else None
)
_CACHE = create_redis_cache(_CONFIG.redis.url)

lifespan = database_lifespan_factory(
    service_name="shop",
    metadata=Base.metadata,
    engine=engine,
)

app = FastAPI(
    title="TurnoLibre Shop Service",
    version="0.1.0",
    description="API de turnos, inventario y membresías para barberías.",
    openapi_tags=tags_metadata,
    root_path=_CONFIG.root_path,
    lifespan=lifespan,
    docs_url=None,
    redoc_url="/redoc",
)

app.state.config = _CONFIG
app.state.event_publisher = _EVENT_PUBLISHER
app.state.redis_cache = _CACHE

app.add_middleware(RequestContextLogMiddleware, logger=_LOGGER)
configure_cors(app)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    _LOGGER.info(
        "domain_error",
        error=type(exc).__name__,
        detail=exc.detail,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def custom_openapi_schema():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=tags_metadata,
    )
    schema["openapi"] = "3.0.3"
    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi_schema


@app.get("/docs", include_in_schema=False)
async def custom_swagger_ui_html():
    return HTMLResponse(f"""
    <!DOCTYPE html>
    <html>
    <head>
        <link type="text/css" rel="stylesheet" href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui.css">
        <title>{escape(app.title)} - Swagger UI</title>
    </head>
    <body>
        <div id="swagger-ui"></div>
        <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
        <script>
        SwaggerUIBundle({{
            url: window.location.pathname.replace(/\\/docs$/, '') + '/openapi.json',
            dom_id: '#swagger-ui',
            layout: "BaseLayout",
            deepLinking: true
        }})
        </script>
    </body>
    </html>
    """)


app.include_router(
    create_health_router(
        service_name="shop",
        database_engine=engine,
        redis_client=_CACHE,
    )
)

app.include_router(auth.router)
app.include_router(shops.router)
app.include_router(catalog.router)
app.include_router(clients.router)
app.include_router(bookings.router)


@app.get("/")
def root():
    return {
        "service": "shop",
        "status": "ok",
        "docs_url": "/docs",
        "config": {
            "redis_stream": _CONFIG.redis.stream,
            "environment": _CONFIG.environment,
        },
    }

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .config import Settings, settings as default_settings
from .db import Database
from .errors import ConnectivityError, DatabaseError
from .logging import logger, setup_logging, correlation_id_middleware, sql_preview
from .schemas import ErrorResponse, HealthResponse, QueryRequest, QueryResponse, TablesResponse

QUERIES = Counter("gateway_queries_total", "Total SQL passthrough requests", ["outcome"])
QUERY_LAT = Histogram("gateway_query_duration_ms", "Query duration in ms")
TABLE_LISTINGS = Counter("gateway_table_listings_total", "Total table listing requests", ["outcome"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}}


def _outcome(error: DatabaseError) -> str:
    return "connectivity_error" if isinstance(error, ConnectivityError) else "error"


def create_app(database: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the Query Gateway.

    The database connection is owned by the application lifespan: opened
    at startup, closed at shutdown. A database handed in already open stays
    owned by the caller and is left open.

    Args:
        database: Connection owner to use. Defaults to one configured from
                  the DB_* environment variables.
        settings: Service settings. Defaults to the environment-derived ones.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database()
        owns_connection = not db.is_connected
        if owns_connection:
            db.open()
        app.state.database = db
        try:
            yield
        finally:
            if owns_connection:
                db.close()

    app = FastAPI(title="Database Explorer Gateway", version="0.1.0", lifespan=lifespan)
    app.middleware("http")(correlation_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        return JSONResponse(status_code=400, content=ErrorResponse(error=exc.message).model_dump())

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(request: Request, exc: RequestValidationError):
        # Keep the error channel payload-based for malformed bodies too
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=f"Invalid request: {problems}").model_dump()
        )

    @app.get("/health", response_model=HealthResponse)
    def health(request: Request):
        connected = request.app.state.database.ping()
        return HealthResponse(status="ok" if connected else "degraded", database=connected)

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/api/tables", response_model=TablesResponse, responses=ERROR_RESPONSES)
    def list_tables(request: Request):
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        try:
            tables = request.app.state.database.list_tables()
        except DatabaseError as e:
            TABLE_LISTINGS.labels(outcome=_outcome(e)).inc()
            logger.warning("[%s] Table listing failed: %s", correlation_id, e.message)
            raise
        TABLE_LISTINGS.labels(outcome="success").inc()
        return TablesResponse(tables=tables)

    @app.post("/api/query", response_model=QueryResponse, responses=ERROR_RESPONSES)
    def query(req: QueryRequest, request: Request):
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start = time.perf_counter()
        try:
            rows = request.app.state.database.run_query(req.query)
        except DatabaseError as e:
            QUERIES.labels(outcome=_outcome(e)).inc()
            logger.warning("[%s] Query failed: %s | %s", correlation_id, sql_preview(req.query), e.message)
            raise
        finally:
            QUERY_LAT.observe((time.perf_counter() - start) * 1000)
        QUERIES.labels(outcome="success").inc()
        logger.info("[%s] Query returned %d row(s): %s", correlation_id, len(rows), sql_preview(req.query))
        return QueryResponse(results=rows)

    return app


setup_logging(default_settings.log_level)
app = create_app()


def run() -> None:
    import uvicorn
    uvicorn.run("db_explorer.main:app", host=default_settings.gateway_host, port=default_settings.gateway_port)


if __name__ == "__main__":
    run()

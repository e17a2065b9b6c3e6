from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.errors import register_error_handlers
from app.api.routes import actions, auth, ping, records, tickets
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging, init_tracer, shutdown_tracer
from app.records.codec import StructuredFieldCodec
from app.records.service import RecordService
from app.records.store import InMemoryRecordStore, PostgresRecordStore, RecordStore
from app.services.postgres import PostgresPoolProvider
from app.tickets.codes import TicketCodeGenerator
from app.tickets.service import TicketService
from app.workflow.dispatcher import ActionDispatcher


def install_services(app: FastAPI, store: RecordStore, settings: Settings) -> None:
    """Build the services on top of ``store`` and expose them on ``app.state``."""

    codec = StructuredFieldCodec()
    app.state.record_store = store
    app.state.ticket_service = TicketService(
        store,
        codec=codec,
        code_generator=TicketCodeGenerator(settings.ticket_code_strategy),
    )
    app.state.record_service = RecordService(store, codec=codec)
    app.state.action_dispatcher = ActionDispatcher(
        store,
        codec=codec,
        serialize_per_record=settings.serialize_record_actions,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)
    app.state.logger = logger
    app.state.tracer_provider = tracer_provider

    pool_provider: PostgresPoolProvider | None = None
    if settings.store_backend == "postgres":
        pool_provider = PostgresPoolProvider(
            dsn=settings.postgres_dsn,
            min_size=settings.postgres_pool_min_size,
            max_size=settings.postgres_pool_max_size,
        )
        store = PostgresRecordStore(await pool_provider.get_pool())
        await store.ensure_schema()
    else:
        store = InMemoryRecordStore()
    install_services(app, store, settings)
    logger.info("Record store backend: %s", settings.store_backend)
    try:
        yield
    finally:
        if pool_provider is not None:
            await pool_provider.close()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(ping.router)
    app.include_router(auth.router)
    app.include_router(tickets.router)
    app.include_router(records.router)
    app.include_router(actions.router)
    return app


app = create_app()

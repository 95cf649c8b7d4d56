"""
Per-invocation context: clients, store, resolver and logger shared by every
entity pipeline of one CLI run.

Usage:
    async with open_context(Settings(), RunOptions(local=True), logger) as ctx:
        run = await run_pipeline(PIPELINE, ctx, options)
"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from .api_client import SenadoApiClient
from .camara_client import CamaraApiClient
from .config import RunOptions, Settings
from .errors import EtlError
from .legislatura import LegislaturaResolver
from .logging_config import LOGGER_NAME
from .retry import RetryPolicy
from .storage import DocumentStore, FirestoreStore, LocalStore


@dataclass
class EtlContext:
    settings: Settings
    logger: logging.Logger
    senado: SenadoApiClient
    camara: CamaraApiClient
    store: DocumentStore
    resolver: LegislaturaResolver


def build_store(settings: Settings, options: RunOptions) -> DocumentStore:
    if options.local:
        return LocalStore(settings.local_store_dir)
    try:
        return FirestoreStore(settings.firestore_projeto)
    except Exception as exc:
        # Missing credentials / project surface here, before any pipeline starts
        raise EtlError(f"Não foi possível inicializar o Firestore: {exc}") from exc


@asynccontextmanager
async def open_context(
    settings: Settings,
    options: RunOptions,
    logger: logging.Logger | None = None,
    *,
    store: DocumentStore | None = None,
) -> AsyncIterator[EtlContext]:
    """Build the run context and close clients/store on exit."""
    log = logger or logging.getLogger(LOGGER_NAME)
    retry = RetryPolicy(settings.retry_attempts, settings.retry_delay, settings.retry_backoff)

    async with AsyncExitStack() as stack:
        senado = SenadoApiClient(
            settings.senado_base_url,
            delay=settings.senado_delay,
            timeout=settings.timeout,
            retry=retry,
            logger=log.getChild("senado"),
        )
        stack.push_async_callback(senado.aclose)
        camara = CamaraApiClient(
            settings.camara_base_url,
            delay=settings.camara_delay,
            timeout=settings.timeout,
            retry=retry,
            logger=log.getChild("camara"),
        )
        stack.push_async_callback(camara.aclose)

        if store is None:
            store = build_store(settings, options)
            stack.push_async_callback(store.close)
        log.info("Armazenamento: %s", type(store).__name__)

        yield EtlContext(
            settings=settings,
            logger=log,
            senado=senado,
            camara=camara,
            store=store,
            resolver=LegislaturaResolver.from_file(settings.legislaturas_file),
        )

"""FastAPI surface of the relay: one WebSocket endpoint plus a health check."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Set

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent_relay.agents.hedera.agent import AgentBuilder, make_agent_builder
from agent_relay.config import RelaySettings, get_settings
from agent_relay.infrastructure.logging import setup_logging
from agent_relay.infrastructure.rate_limiter import limit_health, setup_rate_limiter
from agent_relay.integrations.bonzo import BonzoApiClient
from agent_relay.integrations.mirror_node import MirrorNodeClient
from agent_relay.llm import LLMFactory
from agent_relay.models.envelopes import SystemMessage
from agent_relay.service import (
    Channel,
    ConfirmationHandler,
    MessageRouter,
    SessionRegistry,
    TurnProcessor,
)

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Connected to Hedera Agent. Please authenticate with your account ID first "
    "using CONNECTION_AUTH message."
)
FORCE_CLEAR_SUFFIX = " [Debug: Memory cleared on each message]"


def welcome_message(settings: RelaySettings) -> str:
    return WELCOME_MESSAGE + (FORCE_CLEAR_SUFFIX if settings.force_clear_memory else "")


def build_router(agent_builder: AgentBuilder, settings: RelaySettings) -> MessageRouter:
    registry = SessionRegistry(agent_builder)
    turns = TurnProcessor(force_clear_memory=settings.force_clear_memory)
    return MessageRouter(registry, turns, ConfirmationHandler(turns))


def create_app(
    settings: Optional[RelaySettings] = None,
    *,
    agent_builder: Optional[AgentBuilder] = None,
    bonzo_client: Optional[BonzoApiClient] = None,
    mirror_client: Optional[MirrorNodeClient] = None,
) -> FastAPI:
    """
    Build the relay application.

    Without ``agent_builder`` the lifespan creates the LLM from settings and
    the REST clients it needs (closing the ones it created on shutdown).
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(level=settings.log_level, format_type=settings.log_format)
        owned = []
        builder = agent_builder
        if builder is None:
            bonzo = bonzo_client
            if bonzo is None:
                bonzo = BonzoApiClient()
                owned.append(bonzo)
            mirror = mirror_client
            if mirror is None:
                mirror = MirrorNodeClient(settings.network)
                owned.append(mirror)
            llm = LLMFactory.create(
                settings.llm_model,
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
                timeout=settings.llm_timeout,
            )
            builder = make_agent_builder(
                llm, settings.network, bonzo_client=bonzo, mirror_client=mirror
            )

        app.state.router = build_router(builder, settings)
        app.state.consumers = set()
        logger.info(
            "%s ready on %s (model %s, network %s)",
            settings.service_name,
            f"{settings.host}:{settings.port}",
            settings.llm_model,
            settings.network,
        )
        try:
            yield
        finally:
            for task in list(app.state.consumers):
                task.cancel()
            for client in owned:
                await client.aclose()
            logger.info("%s stopped", settings.service_name)

    app = FastAPI(title="Hedera Agent Relay", version="1.0", lifespan=lifespan)
    app.state.settings = settings
    setup_rate_limiter(app)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse(
                f"WebSocket Agent - Use WebSocket connection on port {settings.port}",
                status_code=404,
            )
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.get("/health")
    @limit_health
    async def health(request: Request):
        router: Optional[MessageRouter] = getattr(request.app.state, "router", None)
        return {
            "status": "healthy",
            "service": settings.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "connections": router.registry.count() if router else 0,
        }

    async def relay_socket(websocket: WebSocket):
        await websocket.accept()
        router: MessageRouter = websocket.app.state.router
        consumers: Set[asyncio.Task] = websocket.app.state.consumers
        channel = Channel(websocket)
        logger.info("WebSocket connection %s established", channel.id)
        await channel.send(SystemMessage(message=welcome_message(settings), level="info"))

        queue: asyncio.Queue = asyncio.Queue()
        consumer = asyncio.create_task(_consume(router, channel, queue))
        consumers.add(consumer)
        consumer.add_done_callback(consumers.discard)

        try:
            while not channel.closed:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes")
                if raw is not None:
                    queue.put_nowait(raw)
        except Exception:
            logger.exception("WebSocket error on channel %s", channel.id)
        finally:
            channel.mark_closed()
            router.registry.teardown(channel)
            queue.put_nowait(None)
            logger.info("WebSocket connection %s closed", channel.id)

    app.add_api_websocket_route("/", relay_socket)
    app.add_api_websocket_route("/ws", relay_socket)
    return app


async def _consume(router: MessageRouter, channel: Channel, queue: asyncio.Queue) -> None:
    """Single consumer per channel: frames are dispatched strictly in arrival order."""
    while True:
        raw = await queue.get()
        if raw is None:
            return
        try:
            await router.dispatch(channel, raw)
        except Exception:
            logger.exception("Unhandled error dispatching on channel %s", channel.id)

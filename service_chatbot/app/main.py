"""
Chat gateway service: text endpoints for Arc Raiders chat bot commands.
"""

from typing import Any, Callable, Dict, Optional

import httpx
from fastapi import Depends, Request
from fastapi.responses import PlainTextResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import RateLimitError, UpstreamError, ValidationError
from .adapters.loot_store import LootStore
from .adapters.metaforge_client import MetaForgeClient
from .caching.cache_manager import CacheManager
from .caching.ttl_cache import TTLCache
from .domain.auth_middleware import AuthMiddleware
from .domain.validation import validate_name
from .formatting import chat_formatter as fmt
from .ratelimit.fixed_window import FixedWindowRateLimiter, RateLimitMiddleware, RATE_LIMIT_MESSAGE
from .resolution.entity_resolver import resolve_entity
from .resolution.map_resolver import resolve_map_token
from .resolution.maps import MAPS, MapTable


SERVICE_NAME = "chatbot"
DEFAULT_PORT = 3000


class ChatGatewayService(BaseService):
    """Chat gateway service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
        cache_clock: Optional[Callable[[], float]] = None,
        maps: MapTable = MAPS,
    ):
        config = config or get_config(SERVICE_NAME, DEFAULT_PORT)
        # Needed by _setup_middleware, which runs inside BaseService.__init__.
        self.rate_limiter = FixedWindowRateLimiter(
            max_requests=config.rate_limit_max_requests,
            window_seconds=config.rate_limit_window_seconds,
        )
        self.rate_limit_middleware = RateLimitMiddleware(self.rate_limiter, config.trusted_proxy_hops)

        super().__init__(SERVICE_NAME, config.port, config=config)

        self.cache = TTLCache(default_ttl=self.config.cache_ttl_seconds, clock=cache_clock)
        self.upstream = MetaForgeClient(
            self.config.upstream_base_url,
            self.config.fetch_timeout_ms,
            transport=upstream_transport,
            metrics=self.metrics,
        )
        self.cache_manager = CacheManager(
            self.cache,
            self.upstream,
            metrics=self.metrics,
            single_flight=self.config.cache_single_flight,
        )
        self.loot_store = LootStore(self.config.loot_data_path)
        self.auth_middleware = AuthMiddleware(self.config.api_key)
        self.maps = maps

        self._setup_chatbot_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.chatbot_service = self

    async def _on_startup(self) -> None:
        self.logger.info(
            "Arc Raiders chat gateway starting",
            port=self.config.port,
            upstream=self.config.upstream_base_url,
            cache_ttl_seconds=self.config.cache_ttl_seconds,
            loot_entries=len(self.loot_store),
        )
        if self.config.cache_warm_on_startup:
            await self.cache_manager.warm_cache()

    async def _on_shutdown(self) -> None:
        self.logger.info("Shutting down gracefully", cache=self.cache_manager.get_cache_stats())
        await self.upstream.close()

    async def _check_dependencies(self) -> Dict[str, str]:
        return {
            "loot_table": "ok" if len(self.loot_store) else "empty",
            "cache": "ok",
        }

    def _setup_middleware(self):
        """Rate limiting sits inside the base middleware so 429s still get security headers."""

        @self.app.middleware("http")
        async def enforce_rate_limit(request: Request, call_next):
            result = self.rate_limit_middleware.check_request(request)
            headers = self.rate_limit_middleware.rate_limit_headers(result)
            if not result["allowed"]:
                error = RateLimitError(RATE_LIMIT_MESSAGE, details={"limit": result["limit"]})
                self.metrics.increment_counter("rate_limit_hits_total", endpoint=request.url.path)
                self.metrics.record_error(error.code)
                return PlainTextResponse(error.message, status_code=error.status_code, headers=headers)

            response = await call_next(request)
            for header, value in headers.items():
                response.headers[header] = value
            return response

        super()._setup_middleware()

    async def _fetch_text(self, subject: str, endpoint: str, cache_key: str, render: Callable[[Any], str], unwrap: bool = True):
        """Fetch through the cache and render, mapping upstream failures to a 500 line."""
        try:
            payload = await self.cache_manager.fetch_cached(endpoint, cache_key, unwrap=unwrap)
        except UpstreamError as exc:
            self.logger.error("Upstream fetch failed", subject=subject, endpoint=endpoint, error=exc.message)
            return PlainTextResponse(fmt.error_message(subject), status_code=500)
        return PlainTextResponse(render(payload))

    def _setup_chatbot_routes(self):
        """Set up chat command routes."""
        authenticated = [Depends(self.auth_middleware.authenticate_request)]

        @self.app.exception_handler(ValidationError)
        async def validation_exception_handler(request: Request, exc: ValidationError):
            self.logger.info("Rejected invalid input", path=request.url.path, message=exc.message)
            return PlainTextResponse(exc.message, status_code=400)

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Arc Raiders Bot API - Powered by metaforge.app/arc-raiders",
                "version": "1.0.0",
                "endpoints": {
                    "/quests": "List all quests",
                    "/quest/:name": "Search for a quest by name",
                    "/item/:name": "Search for an item/weapon by name",
                    "/arc/:name": "Search for an ARC enemy by name",
                    "/blueprint/:name": "Find where a blueprint is located",
                    "/events": "Get upcoming events schedule",
                    "/maps": "List all available maps",
                    "/map/:name": "Get interactive map link",
                    "/trials": "Active weekly trials and time remaining",
                    "/health": "Health check",
                },
            }

        @self.app.get("/trials", dependencies=authenticated)
        async def get_trials():
            """Active weekly trials; keeps the envelope for ``activeWindowEnd``."""
            return await self._fetch_text(
                "trials", "/weekly-trials", "weekly-trials-full", fmt.format_trials, unwrap=False
            )

        @self.app.get("/events", dependencies=authenticated)
        async def get_events():
            return await self._fetch_text(
                "events", "/events-schedule", "events",
                lambda payload: fmt.format_events(fmt.as_list(payload)),
            )

        @self.app.get("/maps", dependencies=authenticated)
        async def list_maps():
            return PlainTextResponse(fmt.format_map_list(self.maps))

        @self.app.get("/map", dependencies=authenticated)
        async def map_usage():
            return PlainTextResponse(fmt.USAGE_HINTS["map"])

        @self.app.get("/map/{name}", dependencies=authenticated)
        async def get_map(name: str = Depends(validate_name)):
            """Interactive map link, with optional level selection."""
            resolution = resolve_map_token(name, self.maps)
            if resolution is None:
                return PlainTextResponse(fmt.map_not_found(name))
            return PlainTextResponse(fmt.format_map(resolution))

        @self.app.get("/quests", dependencies=authenticated)
        async def list_quests():
            return await self._fetch_text(
                "quests", "/quests", "quests",
                lambda payload: fmt.format_quest_list(fmt.as_list(payload)),
            )

        @self.app.get("/quest", dependencies=authenticated)
        async def quest_usage():
            return PlainTextResponse(fmt.USAGE_HINTS["quest"])

        @self.app.get("/quest/{name}", dependencies=authenticated)
        async def get_quest(name: str = Depends(validate_name)):
            def render(payload: Any) -> str:
                quests = fmt.as_list(payload)
                if not quests:
                    return "No quests found."
                quest = resolve_entity(name, quests)
                return fmt.format_quest(quest) if quest else fmt.quest_not_found(name)

            return await self._fetch_text("quest", "/quests", "quests", render)

        @self.app.get("/item", dependencies=authenticated)
        async def item_usage():
            return PlainTextResponse(fmt.USAGE_HINTS["item"])

        @self.app.get("/item/{name}", dependencies=authenticated)
        async def get_item(name: str = Depends(validate_name)):
            def render(payload: Any) -> str:
                items = fmt.as_list(payload)
                if not items:
                    return "No items found."
                item = resolve_entity(name, items)
                return fmt.format_item(item) if item else fmt.item_not_found(name)

            return await self._fetch_text("item", "/items", "items", render)

        @self.app.get("/blueprint", dependencies=authenticated)
        async def blueprint_usage():
            return PlainTextResponse(fmt.USAGE_HINTS["blueprint"])

        @self.app.get("/blueprint/{name}", dependencies=authenticated)
        async def get_blueprint(name: str = Depends(validate_name)):
            def render(payload: Any) -> str:
                blueprints = fmt.as_list(payload)
                if not blueprints:
                    return "No blueprint data found."
                blueprint = resolve_entity(name, blueprints)
                return fmt.format_blueprint(blueprint) if blueprint else fmt.blueprint_not_found(name)

            return await self._fetch_text("blueprint", "/blueprints", "blueprints", render)

        @self.app.get("/arc", dependencies=authenticated)
        async def arc_usage():
            return PlainTextResponse(fmt.USAGE_HINTS["arc"])

        @self.app.get("/arc/{name}", dependencies=authenticated)
        async def get_arc(name: str = Depends(validate_name)):
            """ARC enemy with notable loot from the static loot table."""
            def render(payload: Any) -> str:
                arcs = fmt.as_list(payload)
                if not arcs:
                    return "No ARC data found."
                arc = resolve_entity(name, arcs)
                if arc is None:
                    return fmt.arc_not_found(name)
                # Loot is keyed by the upstream id, e.g. "bison" for the Leaper.
                return fmt.format_arc(arc, self.loot_store.get(arc.get("id")))

            return await self._fetch_text("arc", "/arcs", "arcs", render)


def create_app():
    """Create FastAPI application."""
    service = ChatGatewayService()
    return service.app


if __name__ == "__main__":
    service = ChatGatewayService()
    service.run()

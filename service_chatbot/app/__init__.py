"""
Chat gateway service package.

The gateway answers chat bot commands with single-line text, enforcing:
- Authentication: shared API key
- Rate limiting: in-memory fixed window per client IP
- Caching: read-through TTL cache in front of the MetaForge API

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: upstream HTTP client and static loot table.
- app.caching: TTL store and read-through cache manager.
- app.resolution: entity and map/level name resolution.
- app.formatting: chat-line rendering.
- app.ratelimit: fixed-window limiter.
- app.domain: auth and input validation helpers.
"""

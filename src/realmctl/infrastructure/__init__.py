"""Infrastructure layer — remote cache, HTTP transport, session lifetime.

This layer depends on stdlib, the domain layer, and third-party libs (httpx,
structlog). It must never import from services, commands, or output.
"""

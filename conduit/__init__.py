"""
conduit - Typed tool adapters for third-party HTTP APIs

Exposes an external HTTP API to an agent runtime as a small set of typed
tool operations.

Pipeline (data flows strictly upward):
    - Settings: configuration resolved from .env / environment (settings.py)
    - Transport: scoped, authenticated httpx client with retry and pagination (transport/)
    - Errors: closed four-category failure taxonomy (errors.py)
    - Integrations: normalizers and service layer per external API (integrations/)
    - Tools: registry and dispatcher at the runtime boundary (core/tools/)

Example:
    >>> from conduit.settings import resolve
    >>> from conduit.transport import ApiClient
    >>> from conduit.runner.main import build_dispatcher
    >>>
    >>> settings = resolve()
    >>> async with ApiClient(settings) as client:
    ...     dispatcher = build_dispatcher(client)
    ...     result = await dispatcher.invoke("list_tasks", {"state": "open"})
"""

__version__ = "0.1.0"
__author__ = "conduit contributors"
__license__ = "Apache-2.0"

__all__ = ["__version__"]

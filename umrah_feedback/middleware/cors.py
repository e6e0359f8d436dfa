"""
CORS policy with per-path exemptions.

The analysis function answers its own preflight with a wildcard origin so
any dashboard can invoke it. Every other route follows the configured
origin list.
"""

from typing import Iterable

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class FunctionAwareCORSMiddleware(CORSMiddleware):
    """``CORSMiddleware`` that passes ``exempt_paths`` straight to the app."""

    def __init__(self, app: ASGIApp, exempt_paths: Iterable[str] = (), **kwargs):
        super().__init__(app, **kwargs)
        self.exempt_paths = frozenset(path.rstrip("/") for path in exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].rstrip("/") in self.exempt_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)

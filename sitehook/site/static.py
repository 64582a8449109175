"""Static file handler for the site framework's build output."""

from __future__ import annotations

from pathlib import Path

from aiohttp import web

from sitehook.config import SiteConfig
from sitehook.utils.logging import get_logger
from sitehook.utils.platform import normalize_path

log = get_logger(__name__)

INDEX_FILE = "index.html"


class SiteHandler:
    """Maps request paths under ``base`` onto files in ``static_dir``.

    The directory is resolved per request, so a rebuild that replaces it is
    picked up without restarting.
    """

    def __init__(self, config: SiteConfig) -> None:
        self._root = normalize_path(config.static_dir)
        base = "/" + config.base.strip("/")
        self._base = base if base == "/" else base + "/"

    @property
    def root(self) -> Path:
        return self._root

    def register(self, app: web.Application) -> None:
        app.router.add_get(self._base + "{tail:.*}", self.handle)

    def resolve(self, tail: str) -> Path | None:
        """Return the file for ``tail``, or None if it is missing or escapes the root."""
        try:
            candidate = (self._root / tail.lstrip("/")).resolve()
            if not candidate.is_relative_to(self._root):
                return None
            if candidate.is_dir():
                candidate = candidate / INDEX_FILE
            elif not candidate.exists() and not candidate.suffix:
                # /guide -> guide.html, the way the framework emits pretty URLs
                candidate = candidate.with_suffix(".html")
            return candidate if candidate.is_file() else None
        except (ValueError, OSError):
            # NUL bytes, over-long names and the like are simply not files
            return None

    async def handle(self, request: web.Request) -> web.StreamResponse:
        path = self.resolve(request.match_info.get("tail", ""))
        if path is None:
            raise web.HTTPNotFound(text="Not found")
        return web.FileResponse(path)

"""Webhook server -- app factory and entry point."""

from __future__ import annotations

import logging

from aiohttp import web
from aiohttp.abc import AbstractAccessLogger

from .. import __version__
from ..config.settings import cfg
from ..context import AppContext
from ..messaging.bot import Bot
from ..messaging.standup import StandupDispatcher
from .chat_endpoint import ChatEndpoint

logger = logging.getLogger(__name__)

_QUIET_PATHS = frozenset({"/health"})

CTX_KEY = web.AppKey("ctx", AppContext)


class QuietAccessLogger(AbstractAccessLogger):
    """Demotes health-probe log entries to DEBUG."""

    def log(self, request: web.BaseRequest, response: web.StreamResponse, time: float) -> None:
        level = logging.DEBUG if request.path in _QUIET_PATHS else logging.INFO
        self.logger.log(
            level,
            "%s %s %s %s %.3fs",
            request.remote,
            request.method,
            request.path,
            response.status,
            time,
        )


class AppFactory:
    """Builds the aiohttp application with all dependencies wired."""

    def __init__(self, ctx: AppContext | None = None) -> None:
        self._ctx = ctx

    def build(self) -> web.Application:
        if self._ctx is None:
            cfg.ensure_dirs()
            self._ctx = AppContext.from_settings(cfg)
        ctx = self._ctx

        app = web.Application()
        app[CTX_KEY] = ctx
        bot = Bot(ctx)
        ChatEndpoint(bot, StandupDispatcher(ctx), ctx.default_space_id).register(app.router)
        app.router.add_get("/health", _health)
        logger.info(
            "[init] Standup Bot ready (project=%s, location=%s, target=%s)",
            ctx.job_location.project or "(unset)",
            ctx.job_location.location,
            ctx.job_location.target_url or "(unset)",
        )
        return app


def create_app(ctx: AppContext | None = None) -> web.Application:
    return AppFactory(ctx).build()


async def _health(_req: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
    )
    port = cfg.port
    logger.info("Starting Standup Bot on port %d ...", port)
    web.run_app(create_app(), host="0.0.0.0", port=port, access_log_class=QuietAccessLogger)


if __name__ == "__main__":
    main()

"""Webhook HTTP server using aiohttp."""

from __future__ import annotations

from aiohttp import web

from sitehook.config import Settings
from sitehook.deploy.journal import DeploymentLogger
from sitehook.deploy.trigger import DeploymentTrigger
from sitehook.site.static import SiteHandler
from sitehook.utils.logging import get_logger
from sitehook.webhooks.models import WebhookRequest
from sitehook.webhooks.signature import verify

log = get_logger(__name__)


class WebhookServer:
    """Serves the site and redeploys it when a signed push arrives.

    The deploy runs while the delivery's connection stays open; the response
    goes out only once the command sequence and the log write are done, so
    the sender sees the real outcome at the cost of waiting for the build.
    """

    def __init__(
        self,
        settings: Settings,
        trigger: DeploymentTrigger | None = None,
        journal: DeploymentLogger | None = None,
        site: SiteHandler | None = None,
    ) -> None:
        self._settings = settings
        self._webhook = settings.webhook
        self._trigger = trigger or DeploymentTrigger(settings.deploy)
        self._journal = journal or DeploymentLogger(settings.deploy.log_file)
        self._site = site or SiteHandler(settings.site)
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self._webhook.secret_bytes() is None:
            log.warning(
                "webhook_no_secret",
                path=self._webhook.path,
                msg="No webhook secret configured; deliveries will be answered with 500.",
            )
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        server = self._settings.server
        site = web.TCPSite(self._runner, server.bind, server.port)
        await site.start()
        log.info(
            "webhook_server_started",
            bind=server.bind,
            port=server.port,
            webhook_path=self._webhook.path,
            static_dir=str(self._site.root),
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        log.info("webhook_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application()
        path = self._webhook.path
        if not path.startswith("/"):
            path = f"/{path}"
        app.router.add_post(path, self._handle_webhook)
        self._site.register(app)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        # Signature covers the exact bytes, so read them before anything else
        delivery = WebhookRequest(
            raw_body=await request.read(),
            headers=request.headers,
            event_type=request.headers.get(self._webhook.event_header, ""),
            delivery_id=request.headers.get(self._webhook.delivery_header, ""),
        )
        bound = log.bind(delivery=delivery.delivery_id or None)

        if delivery.event_type != self._webhook.expected_event:
            bound.warning("webhook_rejected", reason="unsupported_event", event_type=delivery.event_type)
            return web.Response(status=400, text="Unsupported event")

        signature = delivery.headers.get(self._webhook.signature_header)
        if not signature:
            bound.warning("webhook_rejected", reason="missing_signature")
            return web.Response(status=400, text="Missing signature")

        secret = self._webhook.secret_bytes()
        if secret is None:
            bound.error("webhook_rejected", reason="missing_secret")
            return web.Response(status=500, text="Missing secret")

        if not verify(secret, signature, delivery.raw_body):
            bound.warning("webhook_rejected", reason="invalid_signature")
            return web.Response(status=400, text="Invalid signature")

        bound.info("webhook_accepted", event_type=delivery.event_type, bytes=len(delivery.raw_body))
        attempt = await self._trigger.run()

        try:
            await self._journal.append(attempt)
        except OSError:
            bound.exception("deploy_log_write_failed", path=str(self._journal.path))

        if attempt.succeeded:
            return web.Response(status=200, text="Deployment successful")
        return web.Response(status=500, text="Deployment failed")

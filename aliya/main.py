from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

from sqlalchemy.exc import SQLAlchemyError
from telegram import Update
from telegram.error import TelegramError
from telegram.ext import Application

from aliya.bot.engine import DialogueEngine
from aliya.bot.handlers import build_handlers
from aliya.bot.router import CommandRouter
from aliya.bot.transport import TelegramTransport
from aliya.core.config import Settings, load_settings
from aliya.core.state import SessionStore
from aliya.core.timeparse import set_local_timezone
from aliya.db.session import init_db
from aliya.services.advisor import HealthAdvisor
from aliya.services.records import HealthRecords
from aliya.services.reminders import ReminderScheduler

logger = logging.getLogger("aliya-bot")


class CollaboratorUnavailable(RuntimeError):
    pass


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=getattr(logging, settings.log_level, logging.INFO),
    )
    if settings.log_file:
        handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)
    # httpx logs every Bot API request at INFO, including the token in the URL.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _init_storage(settings: Settings) -> HealthRecords:
    records = HealthRecords()
    try:
        init_db(settings.database_url, settings.db_path, require_ssl=settings.database_require_ssl)
        records.ping()
    except SQLAlchemyError as e:
        raise CollaboratorUnavailable(f"database unavailable: {e}") from e
    logger.info("Database ready (%s)", "DATABASE_URL" if settings.database_url else settings.db_path)
    return records


async def _log_identity(app: Application) -> None:
    me = await app.bot.get_me()
    logger.info("Connected to Telegram as @%s (id=%s)", me.username, me.id)


def _build_application(settings: Settings, records: HealthRecords) -> Application:
    app = (
        Application.builder()
        .token(settings.bot_token)
        .concurrent_updates(True)
        .post_init(_log_identity)
        .build()
    )
    if app.job_queue is None:
        raise CollaboratorUnavailable("JobQueue unavailable; install python-telegram-bot[job-queue]")

    advisor = HealthAdvisor(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout_s=settings.openai_timeout_s,
        max_retries=settings.openai_max_retries,
    )
    reminders = ReminderScheduler(
        app.job_queue,
        TelegramTransport(app.bot),
        records,
        timezone=settings.default_timezone,
    )
    engine = DialogueEngine(records=records, advisor=advisor, reminders=reminders)
    router = CommandRouter(sessions=SessionStore(), engine=engine, records=records, advisor=advisor)
    build_handlers(app, router=router)
    return app


def _start_http_server(
    *,
    port: int,
    webhook_path: str,
    loop: asyncio.AbstractEventLoop,
    app: Application,
    webhook_secret_token: str | None,
) -> HTTPServer:
    """
    Start a minimal HTTP server for health checks + the Telegram webhook.

    Webhook updates are forwarded into python-telegram-bot's Application via the running asyncio loop.
    """
    normalized_path = (webhook_path or "/telegram").strip() or "/telegram"
    if not normalized_path.startswith("/"):
        normalized_path = f"/{normalized_path}"

    class Handler(BaseHTTPRequestHandler):
        def _read_body(self) -> bytes:
            length = int(self.headers.get("Content-Length") or 0)
            if length <= 0:
                return b""
            return self.rfile.read(length)

        def _reply(self, status: int, body: bytes = b"") -> None:
            self.send_response(status)
            if body:
                self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.end_headers()
            if body:
                self.wfile.write(body)

        def do_GET(self) -> None:  # noqa: N802
            path = self.path.split("?", 1)[0]
            if path in ("/", "/health", "/healthz"):
                self._reply(200, b"ok")
                return
            self._reply(404)

        def do_POST(self) -> None:  # noqa: N802
            path = self.path.split("?", 1)[0]
            if path != normalized_path:
                self._reply(404)
                return

            if webhook_secret_token:
                got = self.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
                if got != webhook_secret_token:
                    self._reply(403)
                    return

            raw = self._read_body()
            if not raw:
                self._reply(400)
                return
            try:
                update = Update.de_json(json.loads(raw.decode("utf-8")), app.bot)
            except (UnicodeDecodeError, ValueError):
                logger.exception("Failed to decode incoming webhook update")
                self._reply(400)
                return

            # Schedule processing on the main asyncio loop and return immediately.
            asyncio.run_coroutine_threadsafe(app.process_update(update), loop)
            self._reply(200, b"ok")

        def log_message(self, format: str, *args) -> None:
            # Silence default http.server logs; our bot has its own logger.
            return

    server = HTTPServer(("0.0.0.0", port), Handler)
    threading.Thread(target=server.serve_forever, daemon=True).start()
    logger.info("HTTP server listening on 0.0.0.0:%s (webhook path: %s)", port, normalized_path)
    return server


async def _run_webhook(settings: Settings, app: Application) -> None:
    try:
        await app.initialize()
    except TelegramError as e:
        raise CollaboratorUnavailable(f"Telegram unavailable: {e}") from e
    if app.post_init:
        await app.post_init(app)
    await app.start()

    loop = asyncio.get_running_loop()
    server = _start_http_server(
        port=settings.port,
        webhook_path=settings.webhook_path,
        loop=loop,
        app=app,
        webhook_secret_token=settings.webhook_secret_token,
    )

    webhook_base = (settings.webhook_url or "").rstrip("/")
    webhook_path = settings.webhook_path if settings.webhook_path.startswith("/") else f"/{settings.webhook_path}"
    webhook_full_url = f"{webhook_base}{webhook_path}"

    logger.info("Setting Telegram webhook to %s", webhook_full_url)
    await app.bot.set_webhook(
        url=webhook_full_url,
        drop_pending_updates=True,
        secret_token=settings.webhook_secret_token,
    )

    stop_event = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Some platforms (e.g., Windows) don't support signal handlers in asyncio.
            pass

    await stop_event.wait()

    server.shutdown()
    server.server_close()
    await app.stop()
    await app.shutdown()


def main() -> None:
    settings = load_settings()
    _configure_logging(settings)
    set_local_timezone(settings.default_timezone)

    try:
        records = _init_storage(settings)
        app = _build_application(settings, records)
        if settings.webhook_url:
            logger.info("Starting bot (webhook mode)...")
            asyncio.run(_run_webhook(settings, app))
            return

        logger.info("Starting bot (polling; set WEBHOOK_URL to enable webhooks)...")
        try:
            app.run_polling(allowed_updates=["message"])
        except TelegramError as e:
            raise CollaboratorUnavailable(f"Telegram unavailable: {e}") from e
    except CollaboratorUnavailable:
        logger.exception("Startup failed")
        sys.exit(1)


if __name__ == "__main__":
    main()

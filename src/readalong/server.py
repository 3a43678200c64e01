# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Web server for the read-along interface.
Serves the HTML UI and pushes word statuses to browsers over WebSockets.
"""

import contextlib
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from aiohttp import web

from .config import DEFAULT_CONFIG, DisplaySettings, load_config, save_config, update_config_display
from .passages import PassageLibrary
from .session import ReadingSession

logger = logging.getLogger(__name__)

STATIC_DIR: Path = Path(__file__).parent / "static"

MessageHandler = Callable[[web.WebSocketResponse, dict[str, Any]], Awaitable[None]]


class WebServer:
    """
    Serves the read-along page and manages WebSocket connections.

    Start and stop requests from the browser are recorded as flags that
    the application loop picks up, since that loop owns the microphone
    and the recognizer.
    """

    def __init__(
        self,
        session: ReadingSession,
        library: PassageLibrary,
        host: str = "127.0.0.1",
        port: int = 8000,
        initial_settings: DisplaySettings | None = None,
    ) -> None:
        self.session: ReadingSession = session
        self.library: PassageLibrary = library
        self.host: str = host
        self.port: int = port
        self.app: web.Application = web.Application()
        self.websockets: set[web.WebSocketResponse] = set()
        self.runner: web.AppRunner | None = None

        self.start_requested: bool = False
        self.stop_requested: bool = False

        self.settings: DisplaySettings = DEFAULT_CONFIG["display"].copy()
        if initial_settings:
            self.settings.update(initial_settings)

        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get('/', self._handle_index)
        self.app.router.add_get('/ws', self._handle_websocket)
        self.app.router.add_get('/state', self._handle_get_state)
        self.app.router.add_get('/passages', self._handle_get_passages)
        self.app.router.add_get('/settings', self._handle_get_settings)
        self.app.router.add_post('/settings', self._handle_settings)
        self.app.router.add_post('/save-config', self._handle_save_config)
        self.app.router.add_get('/audio-devices', self._handle_get_audio_devices)

    def state_message(self, message_type: str = "state") -> dict[str, Any]:
        """Full session state, as sent to newly connected clients."""
        message: dict[str, Any] = {"type": message_type}
        message.update(self.session.to_dict())
        message["passageIndex"] = self.library.current_index
        message["passageTitles"] = self.library.titles()
        message["settings"] = self.settings
        return message

    async def _handle_index(self, request: web.Request) -> web.Response:
        html = (STATIC_DIR / "index.html").read_text(encoding="utf-8")
        return web.Response(text=html, content_type='text/html')

    async def _handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self.websockets.add(ws)
        logger.info("WebSocket connected. Total: %d", len(self.websockets))

        try:
            await ws.send_json(self.state_message("init"))

            async for msg in ws:
                if msg.type == web.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                    except json.JSONDecodeError:
                        logger.warning("Ignoring malformed WebSocket message")
                        continue
                    if isinstance(data, dict):
                        await self._handle_ws_message(ws, data)
                elif msg.type == web.WSMsgType.ERROR:
                    logger.warning("WebSocket error: %s", ws.exception())
        finally:
            self.websockets.discard(ws)
            logger.info("WebSocket disconnected. Total: %d", len(self.websockets))

        return ws

    async def _handle_ws_message(self, ws: web.WebSocketResponse, data: dict[str, Any]) -> None:
        """Dispatch an incoming WebSocket message by its type."""
        msg_type = data.get("type")
        if not msg_type:
            return

        handlers: dict[str, MessageHandler] = {
            "start_listening": self._on_start_listening,
            "stop_listening": self._on_stop_listening,
            "change_passage": self._on_change_passage,
            "select_passage": self._on_select_passage,
            "settings": self._on_settings_message,
            "save_config": self._on_save_config_message,
        }

        handler = handlers.get(msg_type)
        if handler:
            await handler(ws, data)
        else:
            logger.warning("Unhandled WebSocket message: %s", msg_type)

    async def _on_start_listening(self, _ws: web.WebSocketResponse, _data: dict[str, Any]) -> None:
        if self.session.start():
            self.start_requested = True
            await self.send_state()

    async def _on_stop_listening(self, _ws: web.WebSocketResponse, _data: dict[str, Any]) -> None:
        self.stop_requested = True

    async def _on_change_passage(self, ws: web.WebSocketResponse, _data: dict[str, Any]) -> None:
        if self.session.is_listening:
            await ws.send_json({
                "type": "passage_changed",
                "success": False,
                "error": "Stop listening before changing passage"
            })
            return
        self.session.change_passage(self.library.next())
        await self.send_state("passage")

    async def _on_select_passage(self, ws: web.WebSocketResponse, data: dict[str, Any]) -> None:
        if self.session.is_listening:
            await ws.send_json({
                "type": "passage_changed",
                "success": False,
                "error": "Stop listening before changing passage"
            })
            return
        try:
            passage = self.library.select(int(data.get("index", 0)))
        except (TypeError, ValueError, IndexError) as e:
            await ws.send_json({
                "type": "passage_changed",
                "success": False,
                "error": str(e)
            })
            return
        self.session.change_passage(passage)
        await self.send_state("passage")

    async def _on_settings_message(self, _ws: web.WebSocketResponse, data: dict[str, Any]) -> None:
        settings_update = data.get("settings", {})
        if isinstance(settings_update, dict):
            self.settings.update(settings_update)  # type: ignore[typeddict-item]
        await self.broadcast({
            "type": "settings_updated",
            "settings": self.settings
        })

    async def _on_save_config_message(self, ws: web.WebSocketResponse, _data: dict[str, Any]) -> None:
        success = self._save_display_settings()
        await ws.send_json({
            "type": "config_saved",
            "success": success
        })

    def _save_display_settings(self) -> bool:
        config = update_config_display(load_config(), self.settings)
        return save_config(config)

    async def _handle_get_state(self, request: web.Request) -> web.Response:
        return web.json_response(self.state_message())

    async def _handle_get_passages(self, request: web.Request) -> web.Response:
        return web.json_response({
            "current": self.library.current_index,
            "passages": [
                {"index": i, "title": p.title, "words": len(p.words)}
                for i, p in enumerate(self.library.passages)
            ]
        })

    async def _handle_get_settings(self, request: web.Request) -> web.Response:
        return web.json_response(self.settings)

    async def _handle_settings(self, request: web.Request) -> web.Response:
        data = await request.json()
        self.settings.update(data)
        await self.broadcast({
            "type": "settings_updated",
            "settings": self.settings
        })
        return web.json_response({"status": "ok", "settings": self.settings})

    async def _handle_save_config(self, request: web.Request) -> web.Response:
        if self._save_display_settings():
            return web.json_response({"status": "ok", "message": "Settings saved"})
        return web.json_response(
            {"status": "error", "message": "Failed to save config"},
            status=500
        )

    async def _handle_get_audio_devices(self, request: web.Request) -> web.Response:
        try:
            # Imported here so the server runs without PortAudio installed
            from .audio import input_devices

            devices = input_devices()
        except Exception as e:  # sounddevice raises OSError or PortAudioError
            logger.error("Could not list audio devices: %s", e)
            return web.json_response(
                {"status": "error", "message": str(e)},
                status=500
            )
        return web.json_response({"status": "ok", "devices": devices})

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send a message to all connected WebSocket clients."""
        if not self.websockets:
            return

        dead: set[web.WebSocketResponse] = set()
        for ws in list(self.websockets):
            try:
                await ws.send_json(message)
            except (ConnectionError, RuntimeError) as e:
                logger.warning("Error sending to WebSocket: %s", e)
                dead.add(ws)

        self.websockets -= dead

    async def send_state(self, message_type: str = "state") -> None:
        """Broadcast the full session state."""
        await self.broadcast(self.state_message(message_type))

    async def send_statuses(self) -> None:
        """Broadcast just the word statuses and transcript."""
        statuses = self.session.to_dict()
        await self.broadcast({
            "type": "statuses",
            "statuses": statuses["statuses"],
            "summary": statuses["summary"],
            "transcript": statuses["transcript"],
            "finalTranscript": statuses["finalTranscript"],
        })

    async def send_session_status(self) -> None:
        await self.broadcast({
            "type": "session_status",
            "isListening": self.session.is_listening,
            "status": self.session.status.to_dict(),
        })

    async def start(self) -> None:
        """Start the web server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site: web.TCPSite = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        print(f"Web server running at http://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Close client connections and stop the web server."""
        for ws in list(self.websockets):
            with contextlib.suppress(Exception):
                await ws.close()
        self.websockets.clear()

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

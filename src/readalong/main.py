"""
Main read-along application.
Orchestrates audio capture, speech recognition, word alignment and the web UI.
"""

import argparse
import asyncio
import contextlib
import logging
import signal
from typing import TYPE_CHECKING

from . import debug_log
from .aligner import WordStatus
from .config import (
    DEFAULT_CONFIG,
    Config,
    DisplaySettings,
    TranscriptionConfig,
    get_config_path,
    get_display_settings,
    get_transcription_settings,
    get_window_size,
    load_config,
    save_config,
)
from .passages import PassageLibrary
from .providers import create_provider, download_model, get_all_available_models
from .server import WebServer
from .session import ReadingSession
from .transcription_provider import TranscriptionProvider, TranscriptionResult

if TYPE_CHECKING:
    from .audio import AudioCapture

logger = logging.getLogger(__name__)


class ReadAlongApp:
    """
    Coordinates the microphone, recognizer, session and web server.

    Statuses are recomputed from the whole transcript after every
    recognizer result and broadcast only when they change.
    """

    def __init__(
        self,
        transcription_config: TranscriptionConfig | None = None,
        host: str = "127.0.0.1",
        port: int = 8000,
        audio_device: int | None = None,
        chunk_ms: int = 100,
        display_settings: DisplaySettings | None = None,
        passages_folder: str | None = None,
        window_size: int = DEFAULT_CONFIG["alignment"]["window_size"],
    ) -> None:
        self.transcription_config: TranscriptionConfig = (
            transcription_config or DEFAULT_CONFIG["transcription"]
        )
        self.host: str = host
        self.port: int = port
        self.audio_device: int | None = audio_device
        self.chunk_ms: int = chunk_ms

        self.library: PassageLibrary = PassageLibrary.from_folder(passages_folder)
        self.session: ReadingSession = ReadingSession(self.library.current, window_size)
        self.server: WebServer = WebServer(
            self.session,
            self.library,
            host=host,
            port=port,
            initial_settings=display_settings,
        )

        self.audio: AudioCapture | None = None
        self.provider: TranscriptionProvider | None = None
        self.running: bool = False

        self._last_sent_statuses: list[WordStatus] | None = None
        self._last_sent_transcript: str | None = None

    async def _start_listening(self) -> None:
        """Open the microphone and load the recognizer, then mark the session live."""
        loop = asyncio.get_running_loop()
        try:
            if self.provider is None:
                provider_name = self.transcription_config["provider"]
                model_id = (self.transcription_config.get("model_path")
                            or self.transcription_config["model_id"])
                print(f"Loading recognition model: {provider_name} / {model_id}")
                self.provider = await loop.run_in_executor(
                    None, create_provider, provider_name, model_id
                )
            else:
                self.provider.reset()

            if self.audio is None:
                # Imported here so the app loads without PortAudio installed
                from .audio import AudioCapture

                self.audio = AudioCapture(
                    chunk_duration_ms=self.chunk_ms,
                    device=self.audio_device
                )
            self.audio.clear_queue()
            self.audio.start()
        except Exception as e:  # model loading and PortAudio both raise assorted errors
            logger.error("Speech recognition setup error: %s", e)
            self._stop_audio()
            self.session.on_connect_failed()
            debug_log.log_event("connect_failed", str(e))
        else:
            self.session.on_started()
            debug_log.log_event("started", self.session.passage.title)
        await self.server.send_state()

    def _stop_audio(self) -> None:
        if self.audio:
            self.audio.stop()

    async def _stop_listening(self) -> None:
        """Flush the recognizer, close the microphone and end the session."""
        self._stop_audio()
        if self.provider is not None and self.session.is_listening:
            loop = asyncio.get_running_loop()
            final = await loop.run_in_executor(None, self.provider.get_final)
            if final:
                await self._apply_result(final)
        self.session.on_stopped()
        debug_log.log_event("stopped")
        await self.server.send_session_status()

    async def _apply_result(self, result: TranscriptionResult) -> None:
        """Feed one recognizer result into the session and push any change."""
        self.session.apply(result)
        transcript = self.session.transcript
        statuses = self.session.word_statuses()
        debug_log.log_alignment(transcript, statuses)

        if statuses == self._last_sent_statuses and transcript == self._last_sent_transcript:
            return
        self._last_sent_statuses = statuses
        self._last_sent_transcript = transcript
        await self.server.send_statuses()

    async def _recognize_chunk(self) -> None:
        """Read one audio chunk and run it through the recognizer."""
        assert self.audio is not None and self.provider is not None
        loop = asyncio.get_running_loop()
        chunk = await loop.run_in_executor(None, self.audio.get_chunk, 0.05)
        if not chunk:
            return
        try:
            result = await loop.run_in_executor(None, self.provider.process_audio, chunk)
        except Exception as e:  # recognizer failures end the session, not the app
            self._stop_audio()
            self.session.on_error(str(e))
            debug_log.log_event("error", str(e))
            await self.server.send_session_status()
            return
        if result and result.text:
            await self._apply_result(result)

    async def _process_loop(self) -> None:
        """Main loop: handle start/stop requests and feed audio to the recognizer."""
        current_passage = self.session.passage

        while self.running:
            if self.session.passage is not current_passage:
                current_passage = self.session.passage
                self._last_sent_statuses = None
                self._last_sent_transcript = None
                debug_log.clear_logs(current_passage.title)
                print(f"Passage selected: {current_passage.title} "
                      f"({len(current_passage.words)} words)")

            if self.server.start_requested:
                self.server.start_requested = False
                self._last_sent_statuses = None
                self._last_sent_transcript = None
                await self._start_listening()

            if self.server.stop_requested:
                self.server.stop_requested = False
                if self.session.is_listening:
                    await self._stop_listening()

            if self.session.is_listening and self.audio and self.provider:
                await self._recognize_chunk()
            else:
                await asyncio.sleep(0.05)

    async def start(self) -> None:
        """Start the web server and run until stopped."""
        print("Starting Read-Along...")
        await self.server.start()
        self.running = True
        debug_log.clear_logs(self.session.passage.title)

        print("\n✓ Read-Along ready!")
        print(f"  Open http://{self.host}:{self.port} in your browser")
        print("  Press Ctrl+C to stop\n")

        process_task = asyncio.create_task(self._process_loop())
        with contextlib.suppress(asyncio.CancelledError):
            await process_task

    async def stop(self) -> None:
        """Stop listening and shut down the web server."""
        print("\nStopping Read-Along...")
        self.running = False
        self._stop_audio()
        await self.server.stop()
        print("Read-Along stopped.")


def build_parser(config: Config) -> argparse.ArgumentParser:
    """Command-line options, with defaults taken from the config file."""
    transcription_config = get_transcription_settings(config)

    parser = argparse.ArgumentParser(
        description="Read-Along - follow along as you read a passage aloud"
    )
    parser.add_argument(
        "--model-id",
        default=transcription_config.get("model_id"),
        help="Recognition model (e.g. 'vosk-en-us-small')"
    )
    parser.add_argument(
        "--model-path",
        default=transcription_config.get("model_path"),
        help="Path to a custom model directory"
    )
    parser.add_argument(
        "--host",
        default=config.get("host", "127.0.0.1"),
        help="Web server host (default: from config or 127.0.0.1)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=config.get("port", 8000),
        help="Web server port (default: from config or 8000)"
    )
    parser.add_argument(
        "--device", "-d",
        type=int,
        default=config.get("audio_device"),
        help="Audio input device index"
    )
    parser.add_argument(
        "--chunk-ms",
        type=int,
        default=config.get("chunk_ms", 100),
        help="Audio chunk size in milliseconds (default: from config or 100)"
    )
    parser.add_argument(
        "--passages-folder",
        default=config.get("passages_folder"),
        help="Folder of extra .txt/.md passages"
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=None,
        help="Passage words checked per spoken word (default: from config or 3)"
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio input devices and exit"
    )
    parser.add_argument(
        "--list-models",
        action="store_true",
        help="List available recognition models and exit"
    )
    parser.add_argument(
        "--download-model",
        action="store_true",
        help="Download the selected model and exit"
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Save current CLI options to the config file and exit"
    )
    parser.add_argument(
        "--debug-log",
        action="store_true",
        help="Write transcripts and statuses to ./logs/alignment.log"
    )
    return parser


def main() -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    config: Config = load_config()
    parser = build_parser(config)
    args: argparse.Namespace = parser.parse_args()

    if args.list_devices:
        from .audio import list_devices

        list_devices()
        return

    if args.list_models:
        print("\nAvailable recognition models:")
        for model in get_all_available_models():
            print(f"  {model.id}  ({model.name}, {model.size_mb}MB)")
        return

    provider_name = get_transcription_settings(config).get("provider", "vosk")

    if args.download_model:
        print(f"Downloading model: {args.model_id}")
        try:
            download_model(provider_name, args.model_id)
        except ValueError as e:
            parser.error(str(e))
        return

    try:
        window_size = args.window_size if args.window_size is not None else get_window_size(config)
    except ValueError as e:
        parser.error(str(e))
    if window_size < 1:
        parser.error("--window-size must be at least 1")

    if args.save_config:
        config["transcription"]["model_id"] = args.model_id
        config["transcription"]["model_path"] = args.model_path
        config["host"] = args.host
        config["port"] = args.port
        config["audio_device"] = args.device
        config["chunk_ms"] = args.chunk_ms
        config["passages_folder"] = args.passages_folder
        config["alignment"]["window_size"] = window_size
        if save_config(config):
            print(f"Configuration saved to {get_config_path()}")
        return

    if args.debug_log:
        debug_log.enable()
        print("Debug logging enabled (logs will be saved to ./logs/)")

    app = ReadAlongApp(
        transcription_config={
            "provider": provider_name,
            "model_id": args.model_id,
            "model_path": args.model_path,
        },
        host=args.host,
        port=args.port,
        audio_device=args.device,
        chunk_ms=args.chunk_ms,
        display_settings=get_display_settings(config),
        passages_folder=args.passages_folder,
        window_size=window_size,
    )

    loop: asyncio.AbstractEventLoop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def shutdown(sig: int, frame: object) -> None:
        """Stop the main loop on SIGINT/SIGTERM."""
        print("\nReceived shutdown signal...")
        app.running = False

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        app.running = False
    finally:
        with contextlib.suppress(Exception):
            loop.run_until_complete(app.stop())
        pending: set[asyncio.Task[object]] = asyncio.all_tasks(loop)
        for task in pending:
            task.cancel()
        if pending:
            loop.run_until_complete(asyncio.gather(
                *pending, return_exceptions=True))
        loop.close()


if __name__ == "__main__":
    main()

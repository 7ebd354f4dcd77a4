"""
recorder.py — Voice Recorder
==============================
Record a voice note, transcribe it, hand the text back.

States:

    idle ──start──▶ recording ──pause──▶ paused
                      ▲   │                │
                      │   └──◀──resume─────┘
                      │   │
                      │  stop (from recording or paused)
                      │   ▼
                    idle ◀── stopping   (transcribe, then callback)

`transcribing` is a separate flag. While it is set, `start` is refused,
so a second recording can't begin before the first one's text arrives.

Stopping does, in order: stop the capture, release the device, join the
buffered chunks into one payload, await the transcriber, then call
`on_transcription(text)`, or `on_error(exc)` if anything failed.

An elapsed-seconds ticker runs only while recording. It is cancelled on
every way out: pause, stop and close.

The capture device is anything that satisfies `AudioSource`; the
transcriber is any async callable taking bytes, by default
services/transcription.transcribe_audio.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPING = "stopping"


class RecorderError(Exception):
    """An action was requested in a state that doesn't allow it."""


class AudioSource(Protocol):
    """The interface a capture device must follow."""

    async def start(self) -> None:
        ...

    async def pause(self) -> None:
        ...

    async def resume(self) -> None:
        ...

    async def stop(self) -> list[bytes]:
        """Stop capturing and return the buffered chunks."""
        ...

    async def release(self) -> None:
        """Give the device back (close the stream, free the mic)."""
        ...


Transcriber = Callable[[bytes], Awaitable[str]]


def _default_transcriber() -> Transcriber:
    from daybook.services.transcription import transcribe_audio
    return transcribe_audio


class VoiceRecorder:
    def __init__(
        self,
        source: AudioSource,
        on_transcription: Callable[[str], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        transcriber: Optional[Transcriber] = None,
        tick_seconds: float = 1.0,
    ):
        self.source = source
        self.on_transcription = on_transcription
        self.on_error = on_error
        self.transcriber = transcriber or _default_transcriber()
        self.tick_seconds = tick_seconds

        self.state = RecorderState.IDLE
        self.transcribing = False
        self.elapsed_seconds = 0
        self._ticker: Optional[asyncio.Task] = None

    # --- ticker ---

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            self.elapsed_seconds += 1

    def _start_ticker(self) -> None:
        self._stop_ticker()
        self._ticker = asyncio.create_task(self._tick())

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    @property
    def ticking(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def can_record(self) -> bool:
        return self.state == RecorderState.IDLE and not self.transcribing

    # --- transitions ---

    async def start(self) -> None:
        if not self.can_record:
            raise RecorderError(f"Cannot start while {self.state.value}"
                                + (" (transcribing)" if self.transcribing else ""))
        await self.source.start()
        self.elapsed_seconds = 0
        self.state = RecorderState.RECORDING
        self._start_ticker()

    async def pause(self) -> None:
        if self.state != RecorderState.RECORDING:
            raise RecorderError(f"Cannot pause while {self.state.value}")
        self._stop_ticker()
        await self.source.pause()
        self.state = RecorderState.PAUSED

    async def resume(self) -> None:
        if self.state != RecorderState.PAUSED:
            raise RecorderError(f"Cannot resume while {self.state.value}")
        await self.source.resume()
        self.state = RecorderState.RECORDING
        self._start_ticker()

    async def stop(self) -> Optional[str]:
        """Finish recording and transcribe. Returns the text, or None on failure."""
        if self.state not in (RecorderState.RECORDING, RecorderState.PAUSED):
            raise RecorderError(f"Cannot stop while {self.state.value}")

        self._stop_ticker()
        self.state = RecorderState.STOPPING
        self.transcribing = True
        try:
            try:
                chunks = await self.source.stop()
            finally:
                await self.source.release()
            payload = b"".join(chunks)
            logger.info(f"Recorded {self.elapsed_seconds}s, {len(payload)} bytes; transcribing")
            text = await self.transcriber(payload)
        except Exception as e:
            logger.warning(f"Recording failed: {e}")
            if self.on_error is None:
                raise
            self.on_error(e)
            return None
        finally:
            self.transcribing = False
            self.state = RecorderState.IDLE

        self.on_transcription(text)
        return text

    async def close(self) -> None:
        """Tear down without transcribing (the widget went away)."""
        self._stop_ticker()
        if self.state in (RecorderState.RECORDING, RecorderState.PAUSED):
            try:
                await self.source.stop()
            finally:
                await self.source.release()
        self.state = RecorderState.IDLE

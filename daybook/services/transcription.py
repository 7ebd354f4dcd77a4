"""
transcription.py — Audio → Text via OpenAI
============================================
The browser recorder produces webm/opus, so that is the default filename.
The SDK sends the bytes as multipart form data; we only have to give the
in-memory file a name with the right extension.

Supports: flac, mp3, mp4, mpeg, mpga, m4a, ogg, wav, webm
"""

import base64
import binascii
import io

import openai
from fastapi.concurrency import run_in_threadpool

from daybook.config import settings
from daybook.exceptions import RelayError, UpstreamError
from daybook.services.llm import get_openai_client


def decode_audio(audio_base64: str) -> bytes:
    """Base64 payload from the relay body → raw bytes. Tolerates a data: URL prefix."""
    if not audio_base64 or not isinstance(audio_base64, str):
        raise RelayError("No audio data provided")
    if audio_base64.startswith("data:") and "," in audio_base64:
        audio_base64 = audio_base64.split(",", 1)[1]
    try:
        return base64.b64decode(audio_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RelayError(f"Audio is not valid base64: {e}") from e


async def transcribe_audio(audio_bytes: bytes, filename: str = "recording.webm") -> str:
    """Convert audio bytes to text with the configured transcription model."""
    client = get_openai_client()

    audio_file = io.BytesIO(audio_bytes)
    audio_file.name = filename

    try:
        # the SDK call blocks; keep it off the event loop
        response = await run_in_threadpool(
            client.audio.transcriptions.create,
            model=settings.transcription_model,  # "whisper-1"
            file=audio_file,
        )
    except openai.OpenAIError as e:
        raise UpstreamError(f"OpenAI API error: {e}") from e

    return response.text.strip()

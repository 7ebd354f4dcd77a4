import asyncio
import base64
import threading

import pytest

from daybook.exceptions import RelayError
from daybook.services import relay
from daybook.services.transcription import decode_audio, transcribe_audio


# ============================================================
# ai-chat
# ============================================================

def test_ai_chat_with_messages(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/ai-chat", json={
        "messages": [{"role": "user", "content": "I feel stuck at work"}],
        "systemPrompt": "You are a career coach.",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == {"role": "assistant", "content": fake_openai.reply}
    assert data["usage"]["total_tokens"] == 20

    sent = fake_openai.chat_calls[0]["messages"]
    assert sent == [
        {"role": "system", "content": "You are a career coach."},
        {"role": "user", "content": "I feel stuck at work"},
    ]


def test_ai_chat_missing_messages_is_500(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/ai-chat", json={"systemPrompt": "hi"})
    assert response.status_code == 500
    assert response.json() == {"error": "Messages array is required"}
    assert fake_openai.chat_calls == []


def test_ai_chat_session_without_message_is_500(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/ai-chat", json={"sessionId": "abc"})
    assert response.status_code == 500
    assert isinstance(response.json()["error"], str)
    assert response.json()["error"]


def test_ai_chat_unknown_session_is_500(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/ai-chat", json={"sessionId": "abc", "message": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "Session not found"}


def test_ai_chat_with_session(authorized_client, fake_openai):
    session = authorized_client.post("/api/v1/coach/sessions", json={"title": "Stress"}).json()
    response = authorized_client.post(
        "/functions/v1/ai-chat", json={"sessionId": session["id"], "message": "Work is busy"}
    )
    assert response.status_code == 200
    assert response.json() == {"content": fake_openai.reply, "tokens": 20}

    sent = fake_openai.chat_calls[0]["messages"]
    assert sent[0] == {"role": "system", "content": relay.default_system_prompt(None)}
    assert sent[-1] == {"role": "user", "content": "Work is busy"}


def test_ai_chat_without_key_is_500(authorized_client):
    response = authorized_client.post("/functions/v1/ai-chat", json={
        "messages": [{"role": "user", "content": "hello"}],
    })
    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key not configured"}


def test_ai_chat_non_json_body_is_500(authorized_client):
    response = authorized_client.post(
        "/functions/v1/ai-chat", content=b"not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 500
    assert response.json()["error"] == "Request body must be JSON"


def test_relays_require_api_key(client, profile):
    response = client.post("/functions/v1/ai-chat", json={"messages": []})
    assert response.status_code == 401


def test_parse_messages_rejects_bad_roles():
    with pytest.raises(RelayError):
        relay.parse_messages([{"role": "narrator", "content": "Once upon a time"}])
    with pytest.raises(RelayError):
        relay.parse_messages([])


def test_format_messages_puts_system_prompt_first():
    formatted = relay.format_messages("Be kind.", [{"role": "user", "content": "hi"}])
    assert formatted == [{"role": "system", "content": "Be kind."}, {"role": "user", "content": "hi"}]
    assert relay.format_messages(None, []) == []


def test_default_system_prompt_fallback():
    assert "specializing in personal growth" in relay.default_system_prompt(None)


# ============================================================
# transcribe-audio
# ============================================================

def test_transcribe_audio(authorized_client, fake_openai):
    audio = b"\x1aE\xdf\xa3fake-webm-bytes"
    response = authorized_client.post(
        "/functions/v1/transcribe-audio", json={"audio": base64.b64encode(audio).decode()}
    )
    assert response.status_code == 200
    assert response.json() == {"text": fake_openai.transcript}

    call = fake_openai.transcriptions[0]
    assert call["model"] == "whisper-1"
    assert call["name"] == "recording.webm"
    assert call["bytes"] == audio


def test_transcribe_audio_missing_payload_is_500(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/transcribe-audio", json={})
    assert response.status_code == 500
    assert response.json() == {"error": "No audio data provided"}
    assert fake_openai.transcriptions == []


def test_transcribe_audio_provider_failure_is_500(authorized_client, fake_openai):
    import openai
    fake_openai.error = openai.OpenAIError("bad audio")
    response = authorized_client.post(
        "/functions/v1/transcribe-audio", json={"audio": base64.b64encode(b"abc").decode()}
    )
    assert response.status_code == 500
    assert "bad audio" in response.json()["error"]


def test_decode_audio_accepts_data_url():
    encoded = base64.b64encode(b"hello").decode()
    assert decode_audio(f"data:audio/webm;base64,{encoded}") == b"hello"


def test_decode_audio_rejects_garbage():
    with pytest.raises(RelayError):
        decode_audio("!!not base64!!")
    with pytest.raises(RelayError):
        decode_audio("")


def test_transcribe_audio_strips_whitespace(fake_openai):
    text = asyncio.run(transcribe_audio(b"abc"))
    assert text == "I went for a run this morning"


def test_transcription_runs_off_the_event_loop_thread(fake_openai):
    async def scenario():
        return threading.get_ident(), await transcribe_audio(b"abc")

    loop_thread, _ = asyncio.run(scenario())
    assert fake_openai.transcriptions[0]["thread"] != loop_thread


# ============================================================
# test-openai-key
# ============================================================

def test_check_valid_key(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/test-openai-key", json={"key": "sk-valid"})
    assert response.status_code == 200
    assert response.json() == {"isValid": True, "message": "API key is valid"}


def test_check_invalid_key(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/test-openai-key", json={"key": "sk-wrong"})
    assert response.json() == {"isValid": False, "message": "Invalid API key"}


def test_check_missing_key(authorized_client, fake_openai):
    response = authorized_client.post("/functions/v1/test-openai-key", json={})
    assert response.json() == {"isValid": False, "message": "No API key provided"}

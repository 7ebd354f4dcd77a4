import asyncio

import pytest

from daybook.recorder import RecorderError, RecorderState, VoiceRecorder


class FakeSource:
    def __init__(self, chunks=(b"abc", b"def"), fail_on_stop=False):
        self.chunks = list(chunks)
        self.fail_on_stop = fail_on_stop
        self.calls = []

    async def start(self):
        self.calls.append("start")

    async def pause(self):
        self.calls.append("pause")

    async def resume(self):
        self.calls.append("resume")

    async def stop(self):
        self.calls.append("stop")
        if self.fail_on_stop:
            raise OSError("microphone unplugged")
        return self.chunks

    async def release(self):
        self.calls.append("release")


def _recorder(source=None, transcriber=None, with_errors=True):
    results = {"texts": [], "errors": [], "payloads": []}

    async def fake_transcriber(payload):
        results["payloads"].append(payload)
        return "Today I ran five kilometres"

    recorder = VoiceRecorder(
        source or FakeSource(),
        on_transcription=results["texts"].append,
        on_error=results["errors"].append if with_errors else None,
        transcriber=transcriber or fake_transcriber,
        tick_seconds=0.01,
    )
    return recorder, results


def test_record_and_transcribe():
    async def scenario():
        recorder, results = _recorder()
        await recorder.start()
        assert recorder.state == RecorderState.RECORDING
        assert recorder.ticking
        await asyncio.sleep(0.05)

        text = await recorder.stop()
        return recorder, results, text

    recorder, results, text = asyncio.run(scenario())
    assert text == "Today I ran five kilometres"
    assert results["texts"] == ["Today I ran five kilometres"]
    assert results["payloads"] == [b"abcdef"]
    assert recorder.elapsed_seconds >= 1
    assert recorder.state == RecorderState.IDLE
    assert recorder.transcribing is False
    assert recorder.ticking is False
    assert recorder.source.calls == ["start", "stop", "release"]


def test_pause_stops_the_ticker_and_resume_restarts_it():
    async def scenario():
        recorder, _ = _recorder()
        await recorder.start()
        await recorder.pause()
        assert recorder.state == RecorderState.PAUSED
        assert not recorder.ticking

        paused_at = recorder.elapsed_seconds
        await asyncio.sleep(0.05)
        assert recorder.elapsed_seconds == paused_at

        await recorder.resume()
        assert recorder.ticking
        await recorder.stop()
        return recorder

    recorder = asyncio.run(scenario())
    assert recorder.source.calls == ["start", "pause", "resume", "stop", "release"]


def test_stop_from_paused():
    async def scenario():
        recorder, results = _recorder()
        await recorder.start()
        await recorder.pause()
        await recorder.stop()
        return results

    assert asyncio.run(scenario())["texts"] == ["Today I ran five kilometres"]


def test_start_is_refused_while_transcribing():
    async def scenario():
        release = asyncio.Event()

        async def slow_transcriber(payload):
            await release.wait()
            return "done"

        recorder, results = _recorder(transcriber=slow_transcriber)
        await recorder.start()
        stopping = asyncio.create_task(recorder.stop())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert recorder.transcribing is True
        assert recorder.can_record is False
        with pytest.raises(RecorderError):
            await recorder.start()

        release.set()
        await stopping
        assert recorder.can_record is True
        return results

    assert asyncio.run(scenario())["texts"] == ["done"]


def test_transcription_failure_calls_on_error():
    async def failing(payload):
        raise RuntimeError("OpenAI API error: timeout")

    async def scenario():
        recorder, results = _recorder(transcriber=failing)
        await recorder.start()
        text = await recorder.stop()
        return recorder, results, text

    recorder, results, text = asyncio.run(scenario())
    assert text is None
    assert results["texts"] == []
    assert [str(e) for e in results["errors"]] == ["OpenAI API error: timeout"]
    assert recorder.state == RecorderState.IDLE
    assert recorder.transcribing is False


def test_device_is_released_even_if_stop_fails():
    async def scenario():
        recorder, results = _recorder(source=FakeSource(fail_on_stop=True))
        await recorder.start()
        await recorder.stop()
        return recorder, results

    recorder, results = asyncio.run(scenario())
    assert recorder.source.calls == ["start", "stop", "release"]
    assert isinstance(results["errors"][0], OSError)


def test_failure_without_on_error_is_raised():
    async def failing(payload):
        raise RuntimeError("boom")

    async def scenario():
        recorder, _ = _recorder(transcriber=failing, with_errors=False)
        await recorder.start()
        try:
            await recorder.stop()
        finally:
            assert recorder.state == RecorderState.IDLE

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())


def test_invalid_transitions():
    async def scenario():
        recorder, _ = _recorder()
        with pytest.raises(RecorderError):
            await recorder.pause()
        with pytest.raises(RecorderError):
            await recorder.resume()
        with pytest.raises(RecorderError):
            await recorder.stop()

        await recorder.start()
        with pytest.raises(RecorderError):
            await recorder.start()
        await recorder.close()

    asyncio.run(scenario())


def test_close_cancels_ticker_and_releases_device():
    async def scenario():
        recorder, results = _recorder()
        await recorder.start()
        await recorder.close()
        assert not recorder.ticking
        ticks = recorder.elapsed_seconds
        await asyncio.sleep(0.05)
        assert recorder.elapsed_seconds == ticks
        return recorder, results

    recorder, results = asyncio.run(scenario())
    assert recorder.state == RecorderState.IDLE
    assert recorder.source.calls == ["start", "stop", "release"]
    assert results["texts"] == []

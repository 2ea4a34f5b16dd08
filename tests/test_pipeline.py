from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from telegram.error import BadRequest
from telegram.error import NetworkError as TelegramNetworkError

from conftest import FakeBot, FakeFile, FakeTranscriber, make_client, make_update
from voicebot.exceptions import (
    AudioTooLargeError,
    NetworkError,
    SendError,
    TranscodeError,
    UploadError,
)
from voicebot.pipeline import VoiceMessage, process_voice_message


class RecordingTranscoder:
    def __init__(self, output: bytes = b"pcm-sample", error: Exception | None = None):
        self.output = output
        self.error = error
        self.inputs: list[bytes] = []

    def __call__(self, data: bytes) -> bytes:
        self.inputs.append(data)
        if self.error:
            raise self.error
        return self.output


def _run(bot, message, transcoder, transcriber, **kwargs):
    return asyncio.run(
        process_voice_message(bot, message, transcoder=transcoder, transcriber=transcriber, **kwargs)
    )


def test_end_to_end_replies_with_transcript():
    uploads: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        uploads.append(request.read())
        return httpx.Response(200, content=json.dumps({"text": "bom dia"}).encode())

    bot = FakeBot(FakeFile(b"oga-sample"))
    transcoder = RecordingTranscoder(b"pcm-sample")
    message = VoiceMessage(chat_id="C1", file_id="F1")

    text = _run(bot, message, transcoder, make_client(handler))

    assert text == "bom dia"
    assert bot.get_file_calls == ["F1"]
    assert transcoder.inputs == [b"oga-sample"]
    assert len(uploads) == 1 and b"pcm-sample" in uploads[0]
    assert bot.sent == [{"chat_id": "C1", "text": "bom dia"}]


def test_mocked_endpoint_text_is_sent_verbatim(fake_bot):
    client = make_client(lambda request: httpx.Response(200, json={"text": "hello"}))
    _run(fake_bot, VoiceMessage(chat_id=1, file_id="F1"), RecordingTranscoder(), client)
    assert [m["text"] for m in fake_bot.sent] == ["hello"]


def test_upload_error_sends_no_reply(fake_bot):
    client = make_client(lambda request: httpx.Response(500, content=b"rate limited"))

    with pytest.raises(UploadError) as exc:
        _run(fake_bot, VoiceMessage(chat_id=42, file_id="F1"), RecordingTranscoder(), client)

    assert exc.value.status_code == 500
    assert exc.value.body == "rate limited"
    assert exc.value.chat_id == 42
    assert fake_bot.sent == []


def test_transcode_error_skips_transcription(fake_bot):
    transcriber = FakeTranscriber()
    transcoder = RecordingTranscoder(error=TranscodeError("corrupto"))

    with pytest.raises(TranscodeError) as exc:
        _run(fake_bot, VoiceMessage(chat_id=5, file_id="F1"), transcoder, transcriber)

    assert exc.value.chat_id == 5
    assert transcriber.calls == []
    assert fake_bot.sent == []


def test_resolve_failure_is_network_error(fake_bot):
    fake_bot.get_file_error = BadRequest("Wrong file_id")
    transcoder = RecordingTranscoder()

    with pytest.raises(NetworkError) as exc:
        _run(fake_bot, VoiceMessage(chat_id=5, file_id="F1"), transcoder, FakeTranscriber())

    assert exc.value.step == "resolve"
    assert transcoder.inputs == []


def test_download_failure_is_network_error():
    bot = FakeBot(FakeFile(error=TelegramNetworkError("timed out")))

    with pytest.raises(NetworkError) as exc:
        _run(bot, VoiceMessage(chat_id=5, file_id="F1"), RecordingTranscoder(), FakeTranscriber())

    assert exc.value.step == "download"
    assert bot.sent == []


def test_send_failure_is_send_error(fake_bot):
    fake_bot.send_error = TelegramNetworkError("boom")

    with pytest.raises(SendError) as exc:
        _run(fake_bot, VoiceMessage(chat_id=9, file_id="F1"), RecordingTranscoder(), FakeTranscriber())

    assert exc.value.step == "send"
    assert exc.value.chat_id == 9


def test_too_large_audio_is_rejected_before_download(fake_bot):
    message = VoiceMessage(chat_id=1, file_id="F1", file_size=30 * 1024 * 1024)

    with pytest.raises(AudioTooLargeError):
        _run(fake_bot, message, RecordingTranscoder(), FakeTranscriber(), max_audio_bytes=25 * 1024 * 1024)

    assert fake_bot.get_file_calls == []


def test_long_transcript_is_split_into_several_messages(fake_bot):
    long_text = " ".join(["palavra"] * 1500)

    _run(fake_bot, VoiceMessage(chat_id=1, file_id="F1"), RecordingTranscoder(), FakeTranscriber(long_text))

    assert len(fake_bot.sent) > 1
    assert all(len(m["text"]) <= 4096 for m in fake_bot.sent)
    assert " ".join(m["text"] for m in fake_bot.sent) == long_text


def test_empty_transcript_sends_nothing(fake_bot):
    text = _run(fake_bot, VoiceMessage(chat_id=1, file_id="F1"), RecordingTranscoder(), FakeTranscriber(""))
    assert text == ""
    assert fake_bot.sent == []


def test_voice_message_from_update():
    message = VoiceMessage.from_update(make_update(chat_id=77))
    assert message.chat_id == 77
    assert message.file_id == "F1"
    assert message.file_size == 2048

    assert VoiceMessage.from_update(make_update(voice=False, text="oi")) is None

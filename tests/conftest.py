from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest
from telegram import Chat, Message, Update, Voice

from config.settings import Settings
from voicebot.transcription import TranscriptionClient


class FakeFile:
    def __init__(self, data: bytes = b"oga-sample", error: Exception | None = None):
        self.data = data
        self.error = error
        self.downloads = 0

    async def download_as_bytearray(self) -> bytearray:
        self.downloads += 1
        if self.error:
            raise self.error
        return bytearray(self.data)


class FakeBot:
    """Bot falso: registra chamadas de get_file e send_message."""

    def __init__(self, file: FakeFile | None = None):
        self.file = file or FakeFile()
        self.get_file_calls: list[str] = []
        self.sent: list[dict] = []
        self.get_file_error: Exception | None = None
        self.send_error: Exception | None = None

    async def get_file(self, file_id):
        self.get_file_calls.append(file_id)
        if self.get_file_error:
            raise self.get_file_error
        return self.file

    async def send_message(self, chat_id, text, **kwargs):
        if self.send_error:
            raise self.send_error
        self.sent.append({"chat_id": chat_id, "text": text})


class FakeTranscriber:
    def __init__(self, text: str = "bom dia", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[bytes] = []

    async def transcribe(self, audio: bytes) -> str:
        self.calls.append(audio)
        if self.error:
            raise self.error
        return self.text


def make_client(handler, **kwargs) -> TranscriptionClient:
    """TranscriptionClient com transporte HTTP falso."""
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return TranscriptionClient("test-key", http_client=http_client, **kwargs)


def make_update(
    *, voice: bool = True, chat_id: int = 1001, text: str | None = None, file_id: str = "F1", update_id: int = 1
) -> Update:
    message = Message(
        message_id=7,
        date=datetime.now(timezone.utc),
        chat=Chat(id=chat_id, type=Chat.PRIVATE),
        voice=Voice(file_id=file_id, file_unique_id=f"U-{file_id}", duration=3, file_size=2048) if voice else None,
        text=text,
    )
    return Update(update_id=update_id, message=message)


@pytest.fixture
def settings() -> Settings:
    return Settings(TELEGRAM_BOT_TOKEN="123:ABC", GROQ_API_KEY="test-key")


@pytest.fixture
def fake_bot() -> FakeBot:
    return FakeBot()

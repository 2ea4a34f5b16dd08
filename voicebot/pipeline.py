"""
voicebot/pipeline.py - Processamento de uma mensagem de voz.

Uma invocação do pipeline cuida de UMA mensagem, em sequência
estrita e sem retries:

    1. Resolve o arquivo no Telegram (get_file)
    2. Baixa o áudio
    3. Converte para ogg mono 16kHz
    4. Transcreve via Groq
    5. Responde no chat de origem com o texto

Qualquer falha vira uma exceção de voicebot.exceptions com a etapa
e o chat preenchidos; quem chama (o handler) deixa ela subir para o
error handler global, que loga e descarta. Invocações não
compartilham estado entre si.
"""

import asyncio
import logging
from dataclasses import dataclass

from telegram.error import TelegramError

from voicebot.audio_processor import validate_audio_size
from voicebot.exceptions import NetworkError, SendError, VoiceRelayError
from voicebot.utils import format_file_size, mask_chat_id, split_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoiceMessage:
    """Mensagem de voz recebida (só os campos que o pipeline usa)."""

    chat_id: int
    file_id: str
    file_size: int | None = None
    message_id: int | None = None

    @classmethod
    def from_update(cls, update) -> "VoiceMessage | None":
        """Extrai a mensagem de voz do update, ou None se não houver."""
        message = getattr(update, "effective_message", None)
        voice = getattr(message, "voice", None) if message else None
        if voice is None:
            return None
        return cls(
            chat_id=message.chat_id,
            file_id=voice.file_id,
            file_size=voice.file_size,
            message_id=message.message_id,
        )


async def process_voice_message(
    bot,
    message: VoiceMessage,
    *,
    transcoder,
    transcriber,
    max_audio_bytes: int | None = None,
) -> str:
    """
    Executa o pipeline completo para uma mensagem de voz.

    Args:
        bot: Bot do python-telegram-bot (get_file / send_message).
        message: Mensagem de voz a processar.
        transcoder: Função síncrona bytes -> bytes (roda em thread).
        transcriber: Objeto com `async transcribe(bytes) -> str`.
        max_audio_bytes: Limite de tamanho verificado antes do download.

    Retorna:
        O texto transcrito (já enviado ao chat).

    Raises:
        VoiceRelayError: Qualquer falha, com `step` e `chat_id` preenchidos.
    """
    chat = mask_chat_id(message.chat_id)

    try:
        if max_audio_bytes is not None:
            validate_audio_size(message.file_size, max_audio_bytes)

        # ---------- 1. Resolve o link do arquivo ----------
        try:
            telegram_file = await bot.get_file(message.file_id)
        except TelegramError as e:
            raise NetworkError("resolve", e) from e

        # ---------- 2. Download ----------
        try:
            data = bytes(await telegram_file.download_as_bytearray())
        except TelegramError as e:
            raise NetworkError("download", e) from e
        logger.info(f"[PIPELINE] chat={chat} download concluído: {format_file_size(len(data))}")

        # ---------- 3. Conversão (ffmpeg bloqueia, roda em thread) ----------
        audio = await asyncio.to_thread(transcoder, data)

        # ---------- 4. Transcrição ----------
        text = await transcriber.transcribe(audio)

        # ---------- 5. Resposta ----------
        if not text:
            logger.warning(f"[PIPELINE] chat={chat} transcrição vazia, nada a enviar")
            return text

        try:
            for chunk in split_message(text):
                await bot.send_message(chat_id=message.chat_id, text=chunk)
        except TelegramError as e:
            raise SendError(e) from e

    except VoiceRelayError as e:
        e.chat_id = message.chat_id
        raise

    logger.info(f"[PIPELINE] chat={chat} transcrição enviada ({len(text)} caracteres)")
    return text

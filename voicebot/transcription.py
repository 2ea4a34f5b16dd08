"""
voicebot/transcription.py - Integração com a API Whisper da Groq.

Envia áudio para o endpoint de transcrição compatível com OpenAI
(https://api.groq.com/openai/v1/audio/transcriptions) e retorna o texto.

Configuração:
    - model: Modelo Whisper (ex: "whisper-large-v3",
      ou "distil-whisper-large-v3-en" para inglês rápido)
    - language: Idioma fixo por configuração ("pt", "en"...)
    - temperature=0: Saída determinística, sem "criatividade"
    - response_format='json': Retorna apenas {"text": "..."}

O idioma é configuração estática do processo, não um parâmetro
por mensagem: um bot, um modelo, um idioma.

Uso:
    from voicebot.transcription import TranscriptionClient

    client = TranscriptionClient(api_key="...", language="pt")
    text = await client.transcribe(audio_bytes)
"""

import asyncio
import json
import logging

from openai import APIConnectionError, APIStatusError, OpenAI

from config.settings import GROQ_BASE_URL, Settings
from voicebot.exceptions import NetworkError, ParseError, UploadError

logger = logging.getLogger(__name__)

RESPONSE_FORMAT = "json"

# Nome do arquivo enviado no campo multipart `file`
UPLOAD_FILENAME = "voice.ogg"
UPLOAD_CONTENT_TYPE = "audio/ogg"


class TranscriptionClient:
    """
    Cliente da API de transcrição (um único componente parametrizado).

    Atributos:
        model: Modelo usado na transcrição.
        language: Código ISO 639-1 ou None para detecção automática.
        temperature: Temperatura da decodificação.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = GROQ_BASE_URL,
        model: str = "whisper-large-v3",
        language: str | None = "pt",
        temperature: float = 0.0,
        timeout: float = 300.0,
        max_retries: int = 0,
        http_client=None,
    ):
        self.model = model
        self.language = language or None
        self.temperature = temperature
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            http_client=http_client,
        )

    @classmethod
    def from_settings(cls, settings: Settings, http_client=None) -> "TranscriptionClient":
        """Cria o cliente a partir das configurações do processo."""
        return cls(
            settings.GROQ_API_KEY,
            base_url=settings.TRANSCRIPTION_BASE_URL,
            model=settings.TRANSCRIPTION_MODEL,
            language=settings.TRANSCRIPTION_LANGUAGE,
            temperature=settings.TRANSCRIPTION_TEMPERATURE,
            timeout=settings.TRANSCRIPTION_TIMEOUT,
            max_retries=settings.TRANSCRIPTION_MAX_RETRIES,
            http_client=http_client,
        )

    async def transcribe(self, audio: bytes) -> str:
        """
        Transcreve o áudio e retorna o texto.

        A chamada do SDK é síncrona, então roda em thread separada
        para não bloquear o event loop do bot.

        Raises:
            UploadError: Status HTTP diferente de sucesso.
            ParseError: Resposta sem JSON válido ou sem campo `text`.
            NetworkError: Falha de transporte ou timeout.
        """
        return await asyncio.to_thread(self.transcribe_sync, audio)

    def transcribe_sync(self, audio: bytes) -> str:
        """Versão síncrona de `transcribe` (usada em thread)."""
        params = {
            "model": self.model,
            "file": (UPLOAD_FILENAME, audio, UPLOAD_CONTENT_TYPE),
            "response_format": RESPONSE_FORMAT,
            "temperature": self.temperature,
        }
        if self.language:
            params["language"] = self.language

        logger.info(
            f"[GROQ] Enviando {len(audio)} bytes "
            f"(modelo={self.model}, idioma={self.language or 'auto'})"
        )

        try:
            raw = self._client.audio.transcriptions.with_raw_response.create(**params)
        except APIStatusError as e:
            logger.error(f"[GROQ] Erro da API: status={e.status_code}")
            raise UploadError(e.status_code, e.response.text) from e
        except APIConnectionError as e:
            # Inclui APITimeoutError
            raise NetworkError("transcribe", e) from e

        text = parse_transcription(raw.http_response.text)
        logger.info(f"[GROQ] Transcrição concluída: caracteres={len(text)}")
        return text


def parse_transcription(body: str) -> str:
    """
    Extrai o campo `text` da resposta JSON da API.

    Exemplos:
        >>> parse_transcription('{"text": " bom dia "}')
        'bom dia'

    Raises:
        ParseError: Se o corpo não for JSON ou não tiver `text` (string).
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ParseError(f"resposta não é JSON válido: {e}", body) from e

    if not isinstance(data, dict) or not isinstance(data.get("text"), str):
        raise ParseError("resposta sem o campo 'text'", body)

    return data["text"].strip()

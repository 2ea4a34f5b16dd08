"""
voicebot/exceptions.py - Taxonomia de erros do pipeline.

Cada etapa do pipeline levanta sua própria exceção, sempre com a
etapa (`step`) e, quando conhecido, o chat de origem (`chat_id`).
O error handler global (voicebot/handlers.py) usa esses campos para
logar o contexto da falha sem derrubar o bot.
"""


class VoiceRelayError(Exception):
    """
    Base de todos os erros de processamento de uma mensagem de voz.

    Atributos:
        step: Etapa do pipeline que falhou (resolve, download, ...).
        chat_id: Chat de origem (preenchido pelo pipeline).
        user_message: Mensagem amigável para enviar ao usuário.
    """

    step = "pipeline"
    user_message = "❌ Não consegui transcrever o áudio. Tente novamente."

    def __init__(self, detail: str, *, step: str | None = None, chat_id=None):
        if step is not None:
            self.step = step
        self.detail = detail
        self.chat_id = chat_id
        super().__init__(detail)


class NetworkError(VoiceRelayError):
    """Falha de transporte (resolução, download ou upload)."""

    user_message = "❌ Erro de rede ao processar o áudio. Tente novamente."

    def __init__(self, step: str, cause: Exception | None = None, *, chat_id=None):
        self.cause = cause
        super().__init__(f"[{step}] {cause}", step=step, chat_id=chat_id)


class AudioTooLargeError(VoiceRelayError):
    """Áudio maior que o limite aceito pela API de transcrição."""

    step = "validate"

    def __init__(self, file_size: int, max_size: int, *, chat_id=None):
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(
            f"áudio com {file_size} bytes excede o limite de {max_size} bytes",
            chat_id=chat_id,
        )
        self.user_message = "❌ Áudio muito grande para transcrever."


class TranscodeError(VoiceRelayError):
    """O ffmpeg falhou ao converter o áudio (ou o áudio é inválido)."""

    step = "transcode"
    user_message = "❌ O áudio enviado não é válido ou está corrompido."


class UploadError(VoiceRelayError):
    """A API de transcrição respondeu com status diferente de sucesso."""

    step = "transcribe"

    def __init__(self, status_code: int, body: str, *, chat_id=None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"bad status ({status_code}): {body}", chat_id=chat_id)


class ParseError(VoiceRelayError):
    """Resposta da API não é JSON válido ou não tem o campo `text`."""

    step = "transcribe"

    def __init__(self, detail: str, body: str = "", *, chat_id=None):
        self.body = body
        super().__init__(detail, chat_id=chat_id)


class SendError(VoiceRelayError):
    """Falha ao enviar a transcrição de volta para o chat."""

    step = "send"

    def __init__(self, cause: Exception | None = None, *, chat_id=None):
        self.cause = cause
        super().__init__(f"falha ao enviar resposta: {cause}", chat_id=chat_id)

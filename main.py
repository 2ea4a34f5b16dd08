"""
main.py - Entry point do Bot de Transcrição de Voz.

Este é o ponto de entrada principal do bot. Ele:
    1. Carrega e valida as configurações (falha rápido se faltar algo)
    2. Configura o sistema de logging
    3. Cria a instância do bot Telegram
    4. Registra todos os handlers
    5. Inicia o polling (escuta de mensagens)

Modo de operação: Long Polling
    O bot se conecta ao Telegram e "pergunta" periodicamente
    se há novas mensagens. Mais simples que webhooks e não
    requer URL pública ou certificado SSL.

Para rodar:
    # Localmente (com .env configurado):
    python main.py
"""

import functools
import logging
import sys

from telegram.ext import Application

from config.settings import ConfigError, Settings, load_settings
from voicebot.audio_processor import transcode_audio
from voicebot.handlers import (
    SETTINGS_KEY,
    TRANSCODER_KEY,
    TRANSCRIBER_KEY,
    setup_handlers,
)
from voicebot.transcription import TranscriptionClient


def setup_logging(level: str = "INFO") -> None:
    """
    Configura o sistema de logging.

    Formato:
        2026-02-16 18:30:00 | INFO    | voicebot.pipeline | Mensagem aqui
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduz ruído de libs externas (só mostra warnings+)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.WARNING)


def build_application(settings: Settings) -> Application:
    """
    Cria o Application do python-telegram-bot já com handlers e dependências.

    - concurrent_updates(N): cada update roda em sua própria task,
      no máximo N ao mesmo tempo (o resto espera)
    - bot_data: configurações, conversor e cliente de transcrição
      injetados para os handlers
    """
    application = (
        Application.builder()
        .token(settings.TELEGRAM_BOT_TOKEN)
        .concurrent_updates(settings.MAX_CONCURRENT_PIPELINES)
        .build()
    )

    application.bot_data[SETTINGS_KEY] = settings
    application.bot_data[TRANSCODER_KEY] = functools.partial(
        transcode_audio, temp_dir=settings.temp_dir
    )
    application.bot_data[TRANSCRIBER_KEY] = TranscriptionClient.from_settings(settings)

    setup_handlers(application)
    return application


def main() -> None:
    """Função principal — configura e inicia o bot."""
    try:
        settings = load_settings()
    except ConfigError as e:
        setup_logging()
        logging.getLogger(__name__).critical(f"❌ ERRO FATAL: {e}")
        sys.exit(1)

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger(__name__)

    logger.info("=" * 50)
    logger.info("🎙️ Bot de Transcrição de Voz — Iniciando")
    logger.info("=" * 50)

    # Mostra configurações (sem expor chaves!)
    logger.info(f"🤖 Modelo: {settings.TRANSCRIPTION_MODEL}")
    logger.info(f"🌐 Idioma: {settings.TRANSCRIPTION_LANGUAGE or 'auto'}")
    logger.info(f"🔀 Pipelines simultâneos: {settings.MAX_CONCURRENT_PIPELINES}")
    logger.info(f"📏 Tamanho máximo de áudio: {settings.MAX_AUDIO_SIZE_MB}MB")

    application = build_application(settings)

    logger.info("🚀 Bot iniciado! Aguardando mensagens...")

    application.run_polling(
        poll_interval=1.0,
        drop_pending_updates=True,
    )


if __name__ == "__main__":
    main()

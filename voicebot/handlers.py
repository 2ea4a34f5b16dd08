"""
voicebot/handlers.py - Handlers de comandos e mensagens do Telegram.

Define todos os handlers que o bot registra para responder a
eventos do Telegram. Cada handler é uma função async que recebe
o contexto do Telegram e processa a ação.

Handlers registrados:
    /start      — Boas-vindas
    /help       — Instruções de uso
    (voz)       — Recebe e transcreve mensagens de voz

Concorrência:
    O Application é criado com concurrent_updates(N) (ver main.py):
    cada update roda na sua própria task asyncio, com no máximo N
    pipelines em paralelo; o excedente espera na fila.

Isolamento de falhas:
    Erros do pipeline sobem até o error_handler, que loga o contexto
    (chat, etapa, causa) e descarta. O polling continua normalmente
    e as outras mensagens em andamento não são afetadas.

Uso:
    from voicebot.handlers import setup_handlers
    setup_handlers(application)
"""

import logging

from telegram import Update
from telegram.error import Conflict, TelegramError
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from voicebot.exceptions import VoiceRelayError
from voicebot.pipeline import VoiceMessage, process_voice_message
from voicebot.utils import mask_chat_id

logger = logging.getLogger(__name__)

# Chaves usadas em application.bot_data
SETTINGS_KEY = "settings"
TRANSCODER_KEY = "transcoder"
TRANSCRIBER_KEY = "transcriber"


# ============================================================
# Mensagens do Bot
# ============================================================

WELCOME_MESSAGE = (
    "🎙️ Bot de Transcrição de Voz\n\n"
    "Envie uma mensagem de voz e eu respondo com o texto transcrito."
)

HELP_MESSAGE = (
    "📖 Como usar o bot\n\n"
    "1. Grave e envie uma mensagem de voz\n"
    "2. Aguarde alguns segundos\n"
    "3. Receba a transcrição aqui no chat\n\n"
    "Comandos:\n"
    "  /start — Boas-vindas\n"
    "  /help — Esta mensagem"
)


# ============================================================
# Handlers
# ============================================================


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handler para o comando /start."""
    logger.info(f"[CMD] /start no chat {mask_chat_id(update.effective_chat.id)}")
    await update.effective_message.reply_text(WELCOME_MESSAGE)


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handler para o comando /help."""
    logger.info(f"[CMD] /help no chat {mask_chat_id(update.effective_chat.id)}")
    await update.effective_message.reply_text(HELP_MESSAGE)


async def voice_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handler para mensagens de voz.

    Dispara uma invocação do pipeline para a mensagem. Updates sem
    mensagem de voz são ignorados sem nenhum efeito colateral.
    """
    message = VoiceMessage.from_update(update)
    if message is None:
        return

    logger.info(
        f"[VOICE] Recebida no chat {mask_chat_id(message.chat_id)} "
        f"(file_id={message.file_id})"
    )

    settings = context.bot_data[SETTINGS_KEY]
    await process_voice_message(
        context.bot,
        message,
        transcoder=context.bot_data[TRANSCODER_KEY],
        transcriber=context.bot_data[TRANSCRIBER_KEY],
        max_audio_bytes=settings.max_audio_size_bytes,
    )


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handler global de erros não capturados.

    Loga o erro com chat, etapa e causa. Não relança: a falha fica
    confinada à mensagem que a causou.
    """
    error = context.error

    # Trata erro de conflito (múltiplas instâncias)
    if isinstance(error, Conflict):
        logger.critical(
            "🛑 CONFLITO DETECTADO: Outra instância do bot está rodando com o mesmo token!"
        )
        return

    if isinstance(error, VoiceRelayError):
        logger.error(
            f"[PIPELINE] Falha no chat {mask_chat_id(error.chat_id)} "
            f"(etapa={error.step}): {error.detail}",
            exc_info=error.__cause__,
        )
    else:
        chat = "?"
        if isinstance(update, Update) and update.effective_chat:
            chat = mask_chat_id(update.effective_chat.id)
        logger.exception(
            f"[ERRO GLOBAL] Exceção não tratada no chat {chat}: {error}",
            exc_info=error,
        )

    settings = context.bot_data.get(SETTINGS_KEY)
    if not (settings and settings.NOTIFY_ON_ERROR):
        return

    # Notifica o usuário (opcional, via NOTIFY_ON_ERROR)
    if isinstance(update, Update) and update.effective_chat:
        user_message = getattr(error, "user_message", VoiceRelayError.user_message)
        try:
            await context.bot.send_message(chat_id=update.effective_chat.id, text=user_message)
        except TelegramError as e:
            logger.warning(f"[ERRO GLOBAL] Não foi possível notificar o usuário: {e}")


def setup_handlers(application: Application) -> None:
    """
    Registra todos os handlers no application do Telegram.

    Ordem de registro importa! O Telegram processa handlers
    na ordem em que foram adicionados.
    """
    # Comandos
    application.add_handler(CommandHandler("start", start_handler))
    application.add_handler(CommandHandler("help", help_handler))

    # Mensagens de voz (gravadas no Telegram)
    application.add_handler(MessageHandler(filters.VOICE, voice_handler))

    # Handler global de erros
    application.add_error_handler(error_handler)

    logger.info("[SETUP] Todos os handlers registrados com sucesso")

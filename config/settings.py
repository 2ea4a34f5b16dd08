"""
config/settings.py - Configurações centralizadas do bot.

Carrega variáveis de ambiente do arquivo .env (desenvolvimento local)
ou do ambiente do sistema (produção).

Padrão de design: dataclass imutável construída uma única vez no
startup (em main.py) e injetada nos handlers via `application.bot_data`.
Nada de estado global: os testes constroem Settings com credenciais falsas.

Todas as configurações são validadas no startup — se algo faltar,
o bot falha imediatamente com mensagem clara, em vez de falhar
silenciosamente depois.

Uso:
    from config.settings import load_settings
    settings = load_settings()
    print(settings.TRANSCRIPTION_MODEL)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

# Endpoint compatível com OpenAI exposto pela Groq
GROQ_BASE_URL = "https://api.groq.com/openai/v1"

REQUIRED_VARS = ("TELEGRAM_BOT_TOKEN", "GROQ_API_KEY")

_TRUE_VALUES = {"1", "true", "yes", "on", "sim"}
_FALSE_VALUES = {"0", "false", "no", "off", "nao", "não", ""}

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(Exception):
    """
    Configuração ausente ou inválida.

    Fatal no startup: main.py loga e encerra o processo com código 1
    antes de começar a escutar mensagens.
    """


@dataclass(frozen=True)
class Settings:
    """
    Configurações imutáveis do bot.

    Atributos:
        TELEGRAM_BOT_TOKEN: Token do bot obtido via @BotFather.
        GROQ_API_KEY: Chave da API Groq (transcrição).
        TRANSCRIPTION_BASE_URL: URL base da API compatível com OpenAI.
        TRANSCRIPTION_MODEL: Modelo Whisper usado na transcrição.
        TRANSCRIPTION_LANGUAGE: Código ISO 639-1 ("" = detecção automática).
        TRANSCRIPTION_TEMPERATURE: Temperatura (0 = decodificação determinística).
        TRANSCRIPTION_TIMEOUT: Timeout da chamada HTTP em segundos.
        TRANSCRIPTION_MAX_RETRIES: Tentativas extras do SDK (padrão: nenhuma).
        MAX_CONCURRENT_PIPELINES: Limite de mensagens processadas em paralelo.
        MAX_AUDIO_SIZE_MB: Tamanho máximo de áudio em MB (padrão: 25).
        TEMP_DIR: Diretório para arquivos temporários ("" = temp do sistema).
        NOTIFY_ON_ERROR: Avisa o usuário quando a transcrição falha.
        LOG_LEVEL: Nível do logging (INFO, DEBUG...).
    """

    TELEGRAM_BOT_TOKEN: str
    GROQ_API_KEY: str
    TRANSCRIPTION_BASE_URL: str = GROQ_BASE_URL
    TRANSCRIPTION_MODEL: str = "whisper-large-v3"
    TRANSCRIPTION_LANGUAGE: str = "pt"
    TRANSCRIPTION_TEMPERATURE: float = 0.0
    TRANSCRIPTION_TIMEOUT: float = 300.0
    TRANSCRIPTION_MAX_RETRIES: int = 0
    MAX_CONCURRENT_PIPELINES: int = 8
    MAX_AUDIO_SIZE_MB: int = 25
    TEMP_DIR: str = ""
    NOTIFY_ON_ERROR: bool = False
    LOG_LEVEL: str = "INFO"

    @property
    def max_audio_size_bytes(self) -> int:
        """Retorna o tamanho máximo em bytes (para comparação direta)."""
        return self.MAX_AUDIO_SIZE_MB * 1024 * 1024

    @property
    def temp_dir(self) -> str | None:
        """Diretório temporário ou None para usar o padrão do sistema."""
        return self.TEMP_DIR or None


def _parse_number(env: Mapping[str, str], name: str, default: str, cast, *, minimum=None, exclusive=False):
    raw = env.get(name, default).strip()
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} inválido: {raw!r}") from e

    if minimum is not None and (value <= minimum if exclusive else value < minimum):
        bound = f"> {minimum}" if exclusive else f">= {minimum}"
        raise ConfigError(f"{name} deve ser {bound}: {raw!r}")
    return value


def _parse_log_level(env: Mapping[str, str]) -> str:
    level = env.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL inválido: {level!r} (use {', '.join(LOG_LEVELS)})")
    return level


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} inválido: {raw!r} (use true/false)")


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Carrega e valida todas as variáveis de ambiente.

    Args:
        env: Mapeamento explícito de variáveis (testes). Se None,
             carrega o .env (se existir) e usa os.environ.

    Retorna:
        Settings: Objeto imutável com todas as configurações.

    Raises:
        ConfigError: Se alguma variável obrigatória estiver ausente
                     ou se algum valor opcional for inválido.
    """
    if env is None:
        # Carrega .env apenas se existir (em produção, vars vêm do ambiente)
        load_dotenv()
        env = os.environ

    # --- Variáveis obrigatórias ---
    missing = [name for name in REQUIRED_VARS if not env.get(name)]
    if missing:
        raise ConfigError(
            f"Variáveis de ambiente obrigatórias não configuradas: "
            f"{', '.join(missing)}"
        )

    # --- Variáveis opcionais (com valores padrão) ---
    return Settings(
        TELEGRAM_BOT_TOKEN=env["TELEGRAM_BOT_TOKEN"],
        GROQ_API_KEY=env["GROQ_API_KEY"],
        TRANSCRIPTION_BASE_URL=env.get("TRANSCRIPTION_BASE_URL") or GROQ_BASE_URL,
        TRANSCRIPTION_MODEL=env.get("TRANSCRIPTION_MODEL") or "whisper-large-v3",
        TRANSCRIPTION_LANGUAGE=env.get("TRANSCRIPTION_LANGUAGE", "pt").strip(),
        TRANSCRIPTION_TEMPERATURE=_parse_number(env, "TRANSCRIPTION_TEMPERATURE", "0", float),
        TRANSCRIPTION_TIMEOUT=_parse_number(env, "TRANSCRIPTION_TIMEOUT", "300", float, minimum=0, exclusive=True),
        TRANSCRIPTION_MAX_RETRIES=_parse_number(env, "TRANSCRIPTION_MAX_RETRIES", "0", int, minimum=0),
        MAX_CONCURRENT_PIPELINES=_parse_number(env, "MAX_CONCURRENT_PIPELINES", "8", int, minimum=1),
        MAX_AUDIO_SIZE_MB=_parse_number(env, "MAX_AUDIO_SIZE_MB", "25", int, minimum=0, exclusive=True),
        TEMP_DIR=env.get("TEMP_DIR", "").strip(),
        NOTIFY_ON_ERROR=_parse_bool(env, "NOTIFY_ON_ERROR", False),
        LOG_LEVEL=_parse_log_level(env),
    )

"""
voicebot/utils.py - Funções auxiliares compartilhadas.

Funções genéricas usadas por múltiplos módulos do bot.
Centralizar aqui evita duplicação de código.

Uso:
    from voicebot.utils import format_file_size, split_message
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# Limite do Telegram para uma única mensagem de texto
TELEGRAM_MAX_MESSAGE_LENGTH = 4096


def format_file_size(size_bytes: int) -> str:
    """
    Formata tamanho em bytes para formato legível.

    Exemplos:
        >>> format_file_size(2621440)
        '2.5MB'
        >>> format_file_size(524288)
        '512.0KB'
    """
    if size_bytes < 1024:
        return f"{size_bytes}B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f}KB"
    return f"{size_bytes / (1024 * 1024):.1f}MB"


def mask_chat_id(chat_id) -> str:
    """
    Mascara o ID do chat para não expor identificadores completos nos logs.

    Exemplos:
        >>> mask_chat_id(123456789)
        '***6789'
        >>> mask_chat_id(42)
        '42'
    """
    text = str(chat_id)
    if len(text) <= 4:
        return text
    return f"***{text[-4:]}"


def get_temp_filepath(extension: str = "oga", temp_dir: str | None = None) -> str:
    """
    Gera um caminho temporário seguro para arquivos de áudio.

    Args:
        extension: Extensão do arquivo (sem ponto). Padrão: "oga".
        temp_dir: Diretório dos temporários. None = temp do sistema.

    Retorna:
        Caminho absoluto para o arquivo temporário (já criado, vazio).
    """
    if temp_dir:
        Path(temp_dir).mkdir(parents=True, exist_ok=True)

    # tempfile gera nome único automaticamente
    fd, filepath = tempfile.mkstemp(suffix=f".{extension}", dir=temp_dir)
    os.close(fd)  # Fecha o file descriptor (só precisamos do path)

    return filepath


def cleanup_file(filepath: str | None) -> None:
    """
    Remove um arquivo temporário de forma segura.

    Não levanta exceção se o arquivo não existir.
    Loga aviso se falhar por outro motivo.
    """
    try:
        if filepath and os.path.exists(filepath):
            os.remove(filepath)
            logger.debug(f"Arquivo temporário removido: {filepath}")
    except OSError as e:
        logger.warning(f"Falha ao remover arquivo temporário {filepath}: {e}")


def split_message(text: str, max_len: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> list[str]:
    """
    Divide um texto longo em partes que cabem numa mensagem do Telegram.

    Prefere quebrar em newline, depois em espaço; só corta no meio
    de uma palavra se não houver outra opção.

    Exemplos:
        >>> split_message("abc")
        ['abc']
        >>> split_message("aaa bbb", max_len=4)
        ['aaa', 'bbb']
    """
    chunks: list[str] = []

    while text:
        if len(text) <= max_len:
            chunks.append(text)
            break

        # Encontra o último espaço ou newline antes do limite
        split_pos = text.rfind("\n", 0, max_len)
        if split_pos <= 0:
            split_pos = text.rfind(" ", 0, max_len)
        if split_pos <= 0:
            split_pos = max_len

        chunks.append(text[:split_pos])
        text = text[split_pos:].lstrip()

    return chunks

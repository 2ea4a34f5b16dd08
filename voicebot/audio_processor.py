"""
voicebot/audio_processor.py - Validação e conversão de áudio.

Prepara o áudio antes de enviar para a API de transcrição:

    1. Validação de tamanho (antes do download)
    2. Conversão para ogg mono 16kHz

O Telegram envia voice messages em .oga (Opus codec), em taxas e
layouts de canal variados. A API aceita ogg, mas para o Whisper o
formato ideal é mono 16kHz, então normalizamos tudo antes do upload.

Dependência externa: FFmpeg (usado pelo pydub)
    - Local: instalar via apt/brew/choco

Uso:
    from voicebot.audio_processor import transcode_audio, validate_audio_size
"""

import io
import logging

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError, CouldntEncodeError

from voicebot.exceptions import AudioTooLargeError, TranscodeError
from voicebot.utils import cleanup_file, format_file_size, get_temp_filepath

logger = logging.getLogger(__name__)

# Parâmetros de saída otimizados para speech-to-text
TARGET_FRAME_RATE = 16000   # 16kHz  (padrão STT)
TARGET_CHANNELS = 1         # Mono
TARGET_SAMPLE_WIDTH = 2     # 16-bit
OUTPUT_FORMAT = "ogg"


def validate_audio_size(file_size: int | None, max_size: int) -> None:
    """
    Valida se o tamanho do arquivo está dentro do limite.

    O limite de upload da API é 25MB. Validamos antes do download
    para economizar banda e tempo. Tamanho desconhecido passa.

    Raises:
        AudioTooLargeError: Se o arquivo excede o limite.
    """
    if file_size and file_size > max_size:
        raise AudioTooLargeError(file_size, max_size)


def transcode_audio(
    data: bytes,
    *,
    temp_dir: str | None = None,
    frame_rate: int = TARGET_FRAME_RATE,
    channels: int = TARGET_CHANNELS,
    output_format: str = OUTPUT_FORMAT,
    codec: str | None = None,
) -> bytes:
    """
    Converte um áudio comprimido qualquer para ogg mono 16kHz.

    O áudio original é gravado num arquivo temporário (removido em
    qualquer caminho de saída, inclusive erro), decodificado pelo
    ffmpeg via pydub e reexportado para um buffer em memória.

    Args:
        data: Bytes do áudio original (ex: voice note .oga).
        temp_dir: Diretório dos temporários. None = temp do sistema.
        frame_rate: Taxa de amostragem de saída.
        channels: Número de canais de saída.
        output_format: Container de saída.
        codec: Codec de saída (None = padrão do ffmpeg para o container).

    Retorna:
        Bytes do áudio convertido.

    Raises:
        TranscodeError: Se o áudio estiver vazio/corrompido ou o ffmpeg falhar.
    """
    if not data:
        raise TranscodeError("áudio vazio")

    input_path = get_temp_filepath("oga", temp_dir)

    try:
        with open(input_path, "wb") as f:
            f.write(data)

        # Carrega o áudio (pydub detecta formato automaticamente via ffmpeg)
        audio = AudioSegment.from_file(input_path)

        audio = audio.set_channels(channels)
        audio = audio.set_frame_rate(frame_rate)
        audio = audio.set_sample_width(TARGET_SAMPLE_WIDTH)

        buffer = io.BytesIO()
        audio.export(buffer, format=output_format, codec=codec)
        output = buffer.getvalue()

    except CouldntDecodeError as e:
        # A mensagem do pydub já inclui a saída de erro do ffmpeg
        raise TranscodeError(f"ffmpeg não conseguiu decodificar o áudio: {e}") from e
    except CouldntEncodeError as e:
        raise TranscodeError(f"ffmpeg não conseguiu converter o áudio: {e}") from e
    except (OSError, IndexError, KeyError, ValueError) as e:
        # IndexError/KeyError: ffprobe não achou stream de áudio no arquivo
        raise TranscodeError(f"erro ao processar o áudio: {e}") from e
    finally:
        cleanup_file(input_path)

    if not output:
        raise TranscodeError("ffmpeg não gerou nenhuma saída")

    logger.info(
        f"[AUDIO] Conversão OK: {format_file_size(len(data))} → "
        f"{format_file_size(len(output))} ({output_format}, {channels}ch, {frame_rate}Hz)"
    )
    return output

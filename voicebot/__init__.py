"""
Módulo principal do bot de transcrição de voz.

Contém:
    - handlers.py: Handlers de comandos e mensagens do Telegram
    - pipeline.py: Download → conversão → transcrição → resposta
    - audio_processor.py: Validação e conversão de áudio (ffmpeg)
    - transcription.py: Integração com a API Whisper da Groq
    - exceptions.py: Erros de cada etapa do pipeline
    - utils.py: Funções auxiliares compartilhadas

Uso:
    from voicebot.handlers import setup_handlers
"""

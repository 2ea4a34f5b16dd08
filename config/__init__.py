"""
Módulo de configuração do bot.

Exporta `load_settings()`, que lê as variáveis de ambiente e devolve
um objeto `Settings` validado. Uso:

    from config.settings import load_settings
    settings = load_settings()
"""

"""
Общее ядро: конфигурация, БД, аутентификация, логирование, обработка ошибок
"""

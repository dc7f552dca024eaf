import logging
import sys
from pathlib import Path

from taskboard.core import get_settings

# Директория для логов: LOG_DIR из настроек или папка модуля
settings = get_settings()
log_dir = Path(settings.LOG_DIR) if settings.LOG_DIR else Path(__file__).parent
log_dir.mkdir(parents=True, exist_ok=True)

# Настраиваем логирование в файл и консоль
def setup_logging():
    logger = logging.getLogger("api_logger")
    logger.setLevel(logging.INFO)
    
    # Повторный импорт не должен дублировать обработчики
    if logger.handlers:
        return logger
    
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    
    file_handler = logging.FileHandler(log_dir / "api_requests.log", encoding="utf-8")
    file_handler.setFormatter(formatter)
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    
    return logger

api_logger = setup_logging()

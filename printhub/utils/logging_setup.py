import logging
import logging.handlers
import sys
import os

from printhub.config.settings import settings

# Global logger instance
logger = logging.getLogger(__name__)

def setup_logging(log_level: str = None, log_file: str = None) -> logging.Logger:

    # Determine log level
    level = log_level or settings.LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if specified
    file_path = log_file or settings.LOG_FILE
    if file_path:
        try:
            log_dir = os.path.dirname(file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            # Rotating file handler to prevent huge log files
            file_handler = logging.handlers.RotatingFileHandler(
                file_path, maxBytes=10*1024*1024, backupCount=5, encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logger.info(f"Logging to file: {file_path}")

        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    # uvicorn trae sus propios handlers; se dejan propagar al root para un único formato
    for name in ('uvicorn', 'uvicorn.error', 'uvicorn.access'):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    # urllib3 es muy verboso en DEBUG (una línea por conexión)
    logging.getLogger('urllib3').setLevel(max(numeric_level, logging.INFO))

    logger.info(f"Logging initialized - Level: {level}")
    return root_logger

def validate_configuration() -> bool:
    logger.info("Validating configuration...")

    errors = settings.validate_config()
    for warning in settings.config_warnings():
        logger.warning(f"  - {warning}")

    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return False

    logger.info("Configuration validation passed")
    return True

def mask_secret(value: str, visible: int = 4) -> str:
    # Muestra solo el inicio de cookies y tokens en los logs
    if not value:
        return "<vacío>"
    if len(value) <= visible:
        return "*" * len(value)
    return value[:visible] + "…"

"""Logging configuration for the maintenance scripts."""
import logging
import logging.handlers
from pathlib import Path
from kunder.config.settings import settings


def configure_logging(name: str, log_to_file: bool = True, package: str = 'kunder') -> logging.Logger:
    """
    Configure logging for a script.

    Handlers go on the package logger so every kunder.* module logs through
    them.

    Args:
        name: Script name, used for the log file name
        log_to_file: Also write to a rotating file under LOG_DIR
        package: Logger to configure

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(package)
    logger.setLevel(settings.LOG_LEVEL)

    # Running a job twice in one process must not duplicate output
    if logger.handlers:
        return logger

    # Create formatters and handlers
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f'{name}.log',
            maxBytes=10485760,  # 10MB
            backupCount=5,
            encoding='utf-8',
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

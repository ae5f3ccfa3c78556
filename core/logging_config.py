"""
Logging setup for Archon
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGERS = ('archon', 'discord')

_configured = False


def get_default_logger() -> logging.Logger:
    """
    The ``archon`` logger, with a console handler when nothing is attached yet.

    Does not count as configuring logging: a later ``configure_logging``
    call still applies its level and file handler.
    """
    archon_logger = logging.getLogger('archon')
    if not _configured and not archon_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        archon_logger.addHandler(handler)
        archon_logger.setLevel(logging.INFO)
        archon_logger.propagate = False
    return archon_logger


def configure_logging(
    level: Union[str, int] = "INFO",
    log_file_path: Optional[str] = None,
    max_bytes: int = 32 * 1024 * 1024,
    backup_count: int = 5,
    force: bool = False
) -> logging.Logger:
    """
    Attach console and (optionally) rotating file handlers to the bot loggers.

    Safe to call more than once; handlers are only attached the first time
    unless ``force`` is set, in which case previous handlers are replaced.
    The bot loggers stop propagating to the root logger so records are not
    printed twice when the root logger has its own handler.

    Returns:
        The ``archon`` logger
    """
    global _configured

    archon_logger = logging.getLogger('archon')
    if _configured and not force:
        return archon_logger

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler()]

    if log_file_path:
        path = Path(log_file_path)
        if path.suffix == '':
            path = path / 'log.txt'
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=path,
            encoding='utf-8',
            maxBytes=max_bytes,
            backupCount=backup_count
        ))

    for handler in handlers:
        handler.setFormatter(formatter)

    for name in ROOT_LOGGERS:
        target = logging.getLogger(name)
        for old_handler in list(target.handlers):
            target.removeHandler(old_handler)
            old_handler.close()
        target.setLevel(level)
        target.propagate = False
        for handler in handlers:
            target.addHandler(handler)

    # discord.py is chatty at DEBUG
    logging.getLogger('discord.http').setLevel(logging.INFO)
    logging.getLogger('discord.gateway').setLevel(logging.INFO)

    _configured = True
    archon_logger.debug("Logging configured")
    return archon_logger

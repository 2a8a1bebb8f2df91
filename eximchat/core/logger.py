# eximchat/core/logger.py

import logging
import sys

logger = logging.getLogger("eximchat")
logger.setLevel(logging.INFO)
logger.propagate = False  # Prevent log duplication

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter("[%(asctime)s] %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger sharing the eximchat handler."""
    return logger.getChild(name)

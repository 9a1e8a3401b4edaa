"""Logger utility shared by every module of the support backend."""
import logging
import os

logger = logging.getLogger("support")
if not logger.handlers:
    h = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

def get_logger(name: str = None):
    """Return the root support logger, or a child of it when a name is given."""
    if name:
        return logger.getChild(name)
    return logger

import logging
from typing import Optional

# Create logger
logger = logging.getLogger("myflix")
logger.setLevel(logging.INFO)

# Console handler
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)


def configure_logging(level: str = "INFO"):
    """Set the level of the application logger"""
    logger.setLevel(level.upper())


# Function to get logger
def get_logger(name: Optional[str] = None):
    if name:
        return logger.getChild(name)
    return logger

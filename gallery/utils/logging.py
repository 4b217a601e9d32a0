from loguru import logger
import sys
import os

# Ensure logs folder exists
LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
os.makedirs(LOG_DIR, exist_ok=True)

logger.remove()
logger.add(sys.stdout, level=LOG_LEVEL)
logger.add(
    os.path.join(LOG_DIR, "app.log"),
    rotation="1 MB",
    retention="7 days",
    level=LOG_LEVEL,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {module}:{function}:{line} | {message}"
)


def log_error(err, action):
    """Log a GalleryError with its kind so the log line matches what the client sees."""
    level = "WARNING" if err.is_validation else "ERROR"
    logger.log(level, f"{action} failed [{err.kind.value}]: {err.detail}")

"""
Logging configuration with file rotation and automatic cleanup.
Keeps logs for 10 days with daily rotation.
"""
import os
import re
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta
from pathlib import Path


# Create logs directory
LOGS_DIR = os.getenv("LOGS_DIR", os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs"))
os.makedirs(LOGS_DIR, exist_ok=True)

LOG_FILE = os.path.join(LOGS_DIR, "studio.log")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 10

# Video URIs carry the API key as a query parameter
_KEY_PATTERN = re.compile(r"([?&]key=)[^&\s]+")


def mask_api_keys(text: str, mask_value: str = "***MASKED***") -> str:
    """Replace `key=<value>` query parameters in a string."""
    return _KEY_PATTERN.sub(lambda m: m.group(1) + mask_value, text)


class ApiKeyMaskingFilter(logging.Filter):
    """Mask API keys before a record reaches any handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_api_keys(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def cleanup_old_logs(directory: str, retention_days: int = LOG_RETENTION_DAYS):
    """Remove log files older than retention_days."""
    try:
        now = datetime.now()
        cutoff = now - timedelta(days=retention_days)

        log_dir = Path(directory)
        if not log_dir.exists():
            return

        deleted_count = 0
        for log_file in log_dir.glob("studio.log.*"):
            if log_file.is_file():
                # Rotated files are named studio.log.YYYY-MM-DD
                try:
                    date_str = log_file.name.replace("studio.log.", "")
                    file_date = datetime.strptime(date_str, "%Y-%m-%d")

                    if file_date < cutoff:
                        log_file.unlink()
                        deleted_count += 1
                        logging.info(f"Deleted old log file: {log_file.name} (age: {(now - file_date).days} days)")
                except ValueError:
                    # Unexpected name, fall back to mtime
                    mtime = datetime.fromtimestamp(log_file.stat().st_mtime)
                    if mtime < cutoff:
                        log_file.unlink()
                        deleted_count += 1
                        logging.info(f"Deleted old log file: {log_file.name}")
                except OSError as e:
                    logging.error(f"Failed to delete log file {log_file.name}: {e}")

        if deleted_count > 0:
            logging.info(f"Cleaned up {deleted_count} old log file(s)")
    except OSError as e:
        logging.error(f"Error during log cleanup: {e}")


def setup_logger(name: str = "studio", level: int = logging.INFO) -> logging.Logger:
    """
    Set up logger with file rotation and console output.

    Args:
        name: Logger name
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(level)

    file_handler = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        interval=1,
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
        utc=True
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    file_handler.addFilter(ApiKeyMaskingFilter())

    # Console handler for development
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", "%H:%M:%S")
    )
    console_handler.addFilter(ApiKeyMaskingFilter())

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    cleanup_old_logs(LOGS_DIR, LOG_RETENTION_DAYS)

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (if None, returns the root studio logger)

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("studio")
    return logging.getLogger(f"studio.{name}")


# Create default application logger
app_logger = setup_logger("studio", logging.INFO)

app_logger.debug(f"Logger initialized (dir: {LOGS_DIR}, retention: {LOG_RETENTION_DAYS} days)")

import logging
import sys
import os
from datetime import datetime
from typing import Optional

def setup_logger(
    log_dir: Optional[str] = "logs",
    log_name: str = "slopes_run",
    level: str = "INFO",
    quiet: bool = False,
) -> logging.Logger:
    """
    Routes every pyslopes log record to:
    1. A timestamped file, `<log_dir>/<log_name>_<YYYYmmdd_HHMMSS>.log` (skipped when log_dir is None).
    2. Standard output, warnings only when `quiet` is set.

    Args:
        log_dir: Directory for the log files. Created if missing.
        log_name: Prefix of the log filename.
        level: Logging level name (e.g. 'INFO', 'DEBUG').
        quiet: Keep the console to warnings and errors.

    Returns:
        logging.Logger: The configured root logger.
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    # Modules log through logging.getLogger(__name__); the root logger collects them all
    logger = logging.getLogger()
    logger.setLevel(numeric_level)

    # A second CLI invocation in the same process must not double every line
    if logger.hasHandlers():
        logger.handlers.clear()

    filename = None
    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = os.path.join(log_dir, f"{log_name}_{timestamp}.log")

        # --- File Handler (Detailed) ---
        file_handler = logging.FileHandler(filename, mode='w', encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)

    # --- Console Handler (Clean) ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING if quiet else numeric_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if filename:
        logger.info(f"Logging initialized. Writing to: {filename}")
    return logger

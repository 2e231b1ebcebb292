# =========== START of logging_config.py ===========
from __future__ import annotations
import sys
import logging
import os
from datetime import datetime
from typing import Dict, Optional, Tuple


_current_log_file: Optional[str] = None


class LogSettings:
    class Logging:
        LOG_LEVEL: str = "INFO"
        CONSOLE_LOG_LEVEL: str = "INFO"

    class Performance:
        ENABLE_PERIODIC_REPORTING: bool = False
        REPORTING_INTERVAL: int = 10
        MIN_REPORTING_INTERVAL: int = 1
        MAX_REPORTING_INTERVAL: int = 1000
        ENABLE_DETAILED_LOGGING: bool = False

# --- Custom Log Level ---
DETAIL_LEVEL_NUM = 15  # Between DEBUG (10) and INFO (20)
logging.addLevelName(DETAIL_LEVEL_NUM, "DETAIL")

def detail(self, message, *args, **kws):
    """Logs a message with level DETAIL on this logger."""
    if self.isEnabledFor(DETAIL_LEVEL_NUM):
        self._log(DETAIL_LEVEL_NUM, message, args, **kws)

# Add the 'detail' method to the Logger class
logging.Logger.detail = detail  # type: ignore [attr-defined]
# --- End Custom Log Level ---

LOGGER_NAME = "CUBELIFE"
LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(threadName)s] - %(message)s'


def _resolve_level(level_str: str) -> int:
    level_str = level_str.upper()
    if level_str == "DETAIL":
        return DETAIL_LEVEL_NUM
    level = logging.getLevelName(level_str)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_str}")
    return level


def setup_logging(log_dir: str, report_dir: str) -> logging.Logger:
    """Setup logging with a main log file, a console handler and the
       periodic report logger. Calling it again is a no-op."""
    global _current_log_file
    try:
        logger = logging.getLogger(LOGGER_NAME)
        if _current_log_file is not None:
            return logger # Already initialized

        timestamp_24hr = datetime.now().strftime("%Y%m%d_%H%M%S")

        # --- Main Logger Setup ---
        file_log_level = _resolve_level(LogSettings.Logging.LOG_LEVEL)
        console_log_level = _resolve_level(LogSettings.Logging.CONSOLE_LOG_LEVEL)
        main_formatter = logging.Formatter(LOG_FORMAT)

        main_log_filename = f'CUBELIFE_{timestamp_24hr}.log'
        main_file_handler = logging.FileHandler(os.path.join(log_dir, main_log_filename))
        main_file_handler.setFormatter(main_formatter)
        main_file_handler.setLevel(file_log_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(main_formatter)
        console_handler.setLevel(console_log_level)

        # Logger level is the *lowest* of all handlers
        logger.setLevel(min(file_log_level, console_log_level))
        logger.addHandler(main_file_handler)
        logger.addHandler(console_handler)
        logger.propagate = False

        # --- Periodic Report Logger ---
        periodic_report_logger = logging.getLogger("periodic_report")
        periodic_report_logger.propagate = False
        periodic_report_file_path = "Disabled"
        for handler in periodic_report_logger.handlers[:]: periodic_report_logger.removeHandler(handler) # Clear existing
        if LogSettings.Performance.ENABLE_PERIODIC_REPORTING:
            periodic_report_logger.setLevel(logging.INFO)
            periodic_filename = f'periodic_report_{timestamp_24hr}.log'
            periodic_file_handler = logging.FileHandler(os.path.join(report_dir, periodic_filename))
            periodic_file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
            periodic_report_logger.addHandler(periodic_file_handler)
            periodic_report_file_path = os.path.join(report_dir, periodic_filename)
        else:
            periodic_report_logger.addHandler(logging.NullHandler())

        # --- Quieten numba's compiler chatter ---
        numba_logger = logging.getLogger('numba')
        numba_logger.setLevel(logging.WARNING)
        for handler in numba_logger.handlers[:]: numba_logger.removeHandler(handler)
        numba_logger.addHandler(logging.NullHandler())
        numba_logger.propagate = False

        _current_log_file = os.path.join(log_dir, main_log_filename)
        logger.info(f"Logging initialized. Logger Level: {logging.getLevelName(logger.level)}, "
                    f"File Handler Level: {logging.getLevelName(file_log_level)}, "
                    f"Console Handler Level: {logging.getLevelName(console_log_level)}")
        logger.info(f"Log file: {_current_log_file}")
        logger.info(f"Periodic Report file: {periodic_report_file_path}")
        return logger

    except Exception as e:
        print(f"Error setting up logging: {e}")
        raise


APP_DIR = "CUBELIFE"
SUBDIRS = {
    'logs': 'logs',
    'reports': 'reports',
}

def setup_directories(base_dir: Optional[str] = None) -> Tuple[Dict[str, str], str]:
    """Sets up the log and report directories for the application."""
    base_path = os.path.join(base_dir or os.getcwd(), APP_DIR)
    paths = {}
    for key, subdir in SUBDIRS.items():
        path = os.path.join(base_path, subdir)
        os.makedirs(path, exist_ok=True)
        paths[key] = path
    return paths, base_path


logger = logging.getLogger(LOGGER_NAME)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

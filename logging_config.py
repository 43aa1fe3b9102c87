import logging
import os
import sys
from datetime import datetime

import config

LOGGER_NAME = 'chart_assistant'


def _resolve_level():
    """Pick the log level, keeping diagnostics off in production."""
    level = getattr(logging, config.log_level, logging.INFO)
    if config.app_env == 'production':
        # Developer-only diagnostics never reach production logs
        return max(level, logging.WARNING)
    return level


def setup_logging():
    """Sets up logging for the chart assistant with proper Unicode support."""
    handlers = []

    if config.log_directory:
        if not os.path.exists(config.log_directory):
            os.makedirs(config.log_directory)

        # Create a unique log file name with timestamp
        log_filename = os.path.join(
            config.log_directory,
            f"chart_assistant_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log",
        )
        handlers.append(logging.FileHandler(log_filename, encoding='utf-8'))

    # For console handler, handle encoding issues on Windows
    if sys.platform.startswith('win'):
        try:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.stream.reconfigure(encoding='utf-8')
        except (AttributeError, OSError):
            class SafeStreamHandler(logging.StreamHandler):
                def emit(self, record):
                    try:
                        super().emit(record)
                    except UnicodeEncodeError:
                        # Replace problematic characters and try again
                        msg = self.format(record)
                        safe_msg = msg.encode('ascii', errors='replace').decode('ascii')
                        print(safe_msg)
            console_handler = SafeStreamHandler(sys.stdout)
    else:
        console_handler = logging.StreamHandler()
    handlers.append(console_handler)

    logging.basicConfig(
        level=_resolve_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level())
    return logger

# Initialize logger when this module is imported
logger = setup_logging()

"""
Logging configuration for tx-annotator.
Supports normal mode (concise) and debug mode (verbose with file output).
"""
import logging
import sys
import os
from pathlib import Path

# Debug mode: set ANNOTATOR_DEBUG=1 to enable verbose enrichment logging
ANNOTATOR_DEBUG = os.getenv('ANNOTATOR_DEBUG', '').lower() in ('1', 'true', 'yes')

# Debug log file path
DEBUG_LOG_PATH = Path(os.getenv('ANNOTATOR_DEBUG_LOG', 'annotator_debug.log'))

ENRICHMENT_LOGGER = 'tx_annotator.services.enrichment'


class ConciseFormatter(logging.Formatter):
    """One line per record: level tag, plus logger name for debug and errors."""

    LEVEL_TAGS = {
        logging.DEBUG: ("D", "90"),
        logging.INFO: ("I", "32"),
        logging.WARNING: ("W", "33"),
        logging.ERROR: ("E", "31"),
        logging.CRITICAL: ("!", "31;1"),
    }
    NAMED_LEVELS = (logging.DEBUG, logging.ERROR, logging.CRITICAL)

    def __init__(self, use_color=True):
        super().__init__()
        self._formatters = {}
        for level, (tag, color) in self.LEVEL_TAGS.items():
            prefix = f"\033[{color}m[{tag}]\033[0m" if use_color else f"[{tag}]"
            body = "%(name)s: %(message)s" if level in self.NAMED_LEVELS else "%(message)s"
            self._formatters[level] = logging.Formatter(f"{prefix} {body}")

    def format(self, record):
        formatter = self._formatters.get(record.levelno, self._formatters[logging.INFO])
        return formatter.format(record)


class VerboseFormatter(logging.Formatter):
    """Debug file format; keeps the source line of each enrichment step."""
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(lineno)d: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level=logging.INFO, debug=None):
    """
    Configure logging for the application embedding the annotator.
    Call this once at startup.

    Set ANNOTATOR_DEBUG=1 (or pass debug=True) to write verbose enrichment logs to file.
    """
    # Silence noisy third-party loggers
    noisy_loggers = [
        'urllib3', 'asyncio', 'aiohttp', 'websockets',
        'web3', 'web3.providers', 'web3.RequestManager', 'web3.manager',
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConciseFormatter(use_color=sys.stdout.isatty()))
    root.addHandler(handler)

    app_logger = logging.getLogger('tx_annotator')
    app_logger.setLevel(level)

    if ANNOTATOR_DEBUG if debug is None else debug:
        setup_enrichment_debug_logging()
        app_logger.info(f"ANNOTATOR_DEBUG enabled - verbose logs written to {DEBUG_LOG_PATH}")

    return app_logger


def setup_enrichment_debug_logging():
    """
    Set up verbose debug logging for the enrichment modules.
    Writes detailed logs to the debug log file.
    """
    file_handler = logging.FileHandler(DEBUG_LOG_PATH, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(VerboseFormatter())
    file_handler.name = 'enrichment_debug_file'

    # Child loggers propagate to this one, so a single handler covers every module
    parent_logger = logging.getLogger(ENRICHMENT_LOGGER)
    parent_logger.setLevel(logging.DEBUG)
    if not any(getattr(h, 'name', None) == 'enrichment_debug_file' for h in parent_logger.handlers):
        parent_logger.addHandler(file_handler)
    else:
        file_handler.close()

"""
Logging configuration for the tee-time queue processor.

Each run writes a fresh ``processing-<timestamp>.log`` next to the screenshots
so a CI artifact upload captures both, plus a rotating error log that
survives across runs.
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

# Loggers used by the orchestration components.
COMPONENT_LOGGERS = (
    'BookingQueue',
    'BookingOrchestrator',
    'RetryPolicy',
    'AvailabilityDetector',
    'AcquisitionProtocol',
    'TeeSheetSite',
    'TimeGate',
    'BrowserManager',
)


def setup_logging(
    log_dir: Union[str, Path] = 'logs',
    *,
    production_mode: bool = False,
    run_started: Optional[datetime] = None,
    component_loggers: Iterable[str] = COMPONENT_LOGGERS,
) -> Path:
    """
    Install console, per-run file and rotating error handlers on the root logger.

    Args:
        log_dir: Directory that receives the log files (created if missing)
        production_mode: Only warnings and errors reach the console when True
        run_started: Timestamp used in the per-run log file name
        component_loggers: Named loggers whose level follows the mode

    Returns:
        Path of the per-run log file
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    started = run_started or datetime.now()
    stamp = started.strftime('%Y-%m-%dT%H-%M-%S')
    run_log_file = log_path / f'processing-{stamp}.log'
    error_log_file = log_path / 'errors.log'

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d in %(funcName)s()] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '[%(asctime)s] %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING if production_mode else logging.INFO)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    run_file_handler = logging.FileHandler(run_log_file, mode='a', encoding='utf-8')
    run_file_handler.setLevel(logging.INFO if production_mode else logging.DEBUG)
    run_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(run_file_handler)

    error_file_handler = logging.handlers.RotatingFileHandler(
        error_log_file,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_file_handler)

    component_level = logging.INFO if production_mode else logging.DEBUG
    for name in component_loggers:
        logging.getLogger(name).setLevel(component_level)

    # Reduce noise from external libraries
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    root_logger.info("=" * 80)
    root_logger.info("Tee-time queue processor logging initialized - %s", started.isoformat())
    root_logger.info("Production Mode: %s", 'ON' if production_mode else 'OFF')
    root_logger.info("Run log: %s", run_log_file)
    root_logger.info("Error log: %s", error_log_file)
    root_logger.info("=" * 80)
    return run_log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name

    Args:
        name: Logger name (usually a component name such as 'BookingQueue')

    Returns:
        logging.Logger instance
    """
    return logging.getLogger(name)

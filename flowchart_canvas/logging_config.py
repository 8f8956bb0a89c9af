from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

_LOGGING_INITIALIZED = False

LOG_FILE_PREFIX = "flowchart_canvas_"


class _SuppressNoisyMessagesFilter(logging.Filter):
    """Filter out chatty third-party messages that carry no diagnostic value."""

    NOISY_FRAGMENTS = (
        "Matplotlib is building the font cache",
        "findfont: ",
    )

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[name-defined]
        message = record.getMessage()
        return not any(fragment in message for fragment in self.NOISY_FRAGMENTS)


def _cleanup_old_logs(log_dir: Path, keep_count: int = 5) -> int:
    """Delete old log files, keeping the newest ``keep_count``. Returns the number deleted."""
    log_files = sorted(
        log_dir.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda path: path.stat().st_mtime,
        reverse=True,
    )

    deleted = 0
    for old_log in log_files[keep_count:]:
        try:
            old_log.unlink()
            deleted += 1
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not delete old log file {old_log.name}: {e}")
    return deleted


def init_logging(log_dir: Optional[Union[str, Path]] = None,
                 file_level: int = logging.INFO,
                 console_level: int = logging.WARNING,
                 keep_count: int = 5) -> Optional[Path]:
    """
    Initialize the global logging configuration:
    - log directory: logs/ under the project root unless given
    - log file: flowchart_canvas_YYYYMMDD_HHMMSS.log
    - levels: INFO to the file, WARNING to the console

    Calling it again is a no-op.

    Returns:
        Path of the log file opened by this call, None if logging was already set up
    """
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return None

    if log_dir is None:
        log_dir = Path(__file__).resolve().parent.parent / "logs"
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Keep room for the file about to be created
    _cleanup_old_logs(log_dir, keep_count=max(keep_count - 1, 0))

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{LOG_FILE_PREFIX}{timestamp}.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_file, encoding="utf-8", mode='a')
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    suppress_filter = _SuppressNoisyMessagesFilter()
    file_handler.addFilter(suppress_filter)
    console_handler.addFilter(suppress_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    _LOGGING_INITIALIZED = True
    return log_file

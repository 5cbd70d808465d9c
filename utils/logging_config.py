import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from config.model_config import LOG_FORMAT


def setup_logging(output_dir: Optional[Path] = None,
                  level: int = logging.INFO,
                  name: str = "") -> logging.Logger:
    """
    Configure logging with a console handler and, optionally, a file handler

    Parameters:
    -----------
    output_dir : Path, optional
        Directory for a timestamped log file (created under output_dir/logs)
    level : int
        Logging level for the logger and its handlers
    name : str
        Logger to configure; the root logger by default

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Replace handlers from earlier calls, leave any others alone
    for handler in list(logger.handlers):
        if getattr(handler, '_combination_handler', False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    console_handler._combination_handler = True
    logger.addHandler(console_handler)

    if output_dir is not None:
        log_dir = Path(output_dir) / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name or 'combination'}_{timestamp}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler._combination_handler = True
        logger.addHandler(file_handler)

    return logger

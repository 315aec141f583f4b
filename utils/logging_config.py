"""
Logging configuration for JellySubChanger.
"""

import logging
import os
import sys
from datetime import datetime
from utils.constants import __version__, __app_name__


def setup_logging(debug=False, log_dir="logs"):
    """
    Configure logging to file and console.

    Args:
        debug: Log at DEBUG level instead of INFO
        log_dir: Directory that receives the timestamped log file

    Returns:
        str: Path to the current log file
    """
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    log_filename = os.path.join(
        log_dir,
        f"jellysubchanger_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    )

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_filename, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.info("=" * 80)
    logging.info(f"{__app_name__} v{__version__} - Session Started")
    logging.info("=" * 80)

    return log_filename

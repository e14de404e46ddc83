"""
resources.py

User-specific data and log locations (via appdirs) and the logging setup used
by the application entry point.
"""

import os
import logging
from typing import Optional

import appdirs

APP_NAME = "CubeSnake"
APP_AUTHOR = "CubeSnake"


class ResourceManager:
    """Resolves where high scores, campaign progress and logs are stored"""

    def __init__(self, data_dir: Optional[str] = None, log_dir: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self._data_dir = data_dir
        self._log_dir = log_dir

    def get_data_path(self, relative_path: str) -> str:
        """Get path for data files using appdirs for user-specific directories"""
        data_dir = self._data_dir or appdirs.user_data_dir(APP_NAME, APP_AUTHOR)
        os.makedirs(data_dir, exist_ok=True)
        return os.path.join(data_dir, relative_path)

    def get_log_path(self, relative_path: str) -> str:
        """Get path for log files using appdirs for user-specific directories"""
        log_dir = self._log_dir or appdirs.user_log_dir(APP_NAME, APP_AUTHOR)
        os.makedirs(log_dir, exist_ok=True)
        return os.path.join(log_dir, relative_path)


def setup_logging(resources: ResourceManager, level: int = logging.DEBUG) -> str:
    """Send log records to the per-user log file; returns its path"""
    log_path = resources.get_log_path("cubesnake.log")
    logging.basicConfig(
        filename=log_path,
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.info("----- Starting CubeSnake -----")
    return log_path

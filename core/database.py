#database connection setup
import configparser
import logging
import os
from typing import Any, Dict, Optional

import mysql.connector
from mysql.connector import Error

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(BASE_DIR, "config", "config.ini")


class DatabaseConnectionError(Exception):
    """Raised when the MySQL server is unreachable or rejects the credentials."""


def resolve_config_path(config_path: Optional[str] = None) -> str:
    """Explicit path wins, then $EXPENSES_CONFIG, then config/config.ini."""
    return config_path or os.environ.get("EXPENSES_CONFIG") or DEFAULT_CONFIG_PATH


def read_config(config_path: Optional[str] = None) -> configparser.ConfigParser:
    config_path = resolve_config_path(config_path)
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = configparser.ConfigParser()
    config.read(config_path)
    return config


class DatabaseConnection:
    """
    Owns a single MySQL connection for the lifetime of one export.

    Credentials come either from an explicit ``db_config`` dict or from the
    ``[mysql]`` section of the INI config file.
    """

    def __init__(self, db_config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        self.connection = None
        self.db_config = db_config
        self.config_path = config_path

    def _load_config(self) -> Dict[str, Any]:
        """Reads database credentials from the config file safely."""
        if self.db_config is not None:
            return dict(self.db_config)

        config = read_config(self.config_path)
        return {
            'host': config.get('mysql', 'host'),
            'user': config.get('mysql', 'user'),
            'password': config.get('mysql', 'password'),
            'database': config.get('mysql', 'database'),
            'port': config.getint('mysql', 'port', fallback=3306)
        }

    def get_connection(self):
        """Establishes a connection to the MySQL database."""
        db_config = self._load_config()
        try:
            self.connection = mysql.connector.connect(**db_config)
        except Error as e:
            logger.error("Error connecting to MySQL: %s", e)
            self.connection = None
            raise DatabaseConnectionError("DB connection failed") from e

        logger.info("Database connection to %s@%s opened", db_config.get('database'), db_config.get('host'))
        return self.connection

    def close_connection(self):
        """Closes the owned MySQL connection, if any."""
        if self.connection is None:
            return
        try:
            if self.connection.is_connected():
                self.connection.close()
                logger.info("Connection closed.")
        finally:
            self.connection = None

    # ---------- Context Management ----------
    def __enter__(self):
        """Used for 'with' statements."""
        self.get_connection()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Automatically closes connection when leaving context."""
        self.close_connection()

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

DEFAULT_ENV_FILE = ".env"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAPS_DIR = "/etc/haproxy/maps"
DEFAULT_X509_CERT = "/var/haproxy/ssl/certs/default.pem"
DEFAULT_SKIP_UNCHANGED = True
DEFAULT_LOG_FILE_NAME = "hamaps-cli.log"


class ConfigManager:
    """Centralized configuration.

    - Loads `.env` (or `HAMAPS_ENV_FILE`) best-effort via python-dotenv.
    - Reads runtime config from environment variables.
    - Assigns project defaults consistently.
    """

    @staticmethod
    def _env_bool(value: str | None, *, default: bool) -> bool:
        if value is None:
            return default
        s = value.strip().lower()
        return s not in {"0", "false", "no", "off"}

    @staticmethod
    def load_dotenv(path: str | None = None) -> None:
        """Load env file into process env. A missing file is not an error."""
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=path or os.getenv("HAMAPS_ENV_FILE") or DEFAULT_ENV_FILE)

    @staticmethod
    def maps_dir() -> str:
        v = (os.getenv("HAMAPS_MAPS_DIR") or "").strip()
        return (v or DEFAULT_MAPS_DIR).rstrip("/") or "/"

    @staticmethod
    def default_x509_cert() -> str:
        v = (os.getenv("HAMAPS_DEFAULT_CRT") or "").strip()
        return v or DEFAULT_X509_CERT

    @staticmethod
    def skip_unchanged() -> bool:
        return ConfigManager._env_bool(os.getenv("HAMAPS_SKIP_UNCHANGED"), default=DEFAULT_SKIP_UNCHANGED)

    @staticmethod
    def log_level() -> str:
        v = os.getenv("HAMAPS_LOG_LEVEL")
        return (v or DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL

    @staticmethod
    def _parse_log_level(level: str) -> int:
        normalized = (level or DEFAULT_LOG_LEVEL).strip().upper()
        try:
            logging_level = getattr(logging, normalized)
            if not isinstance(logging_level, int):
                raise AttributeError
        except Exception as e:
            raise ValueError("log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL") from e
        return logging_level

    @staticmethod
    def _resolve_log_file_path(value: str | os.PathLike[str] | None) -> Path | None:
        if value is None:
            return None
        raw = str(value).strip()
        if not raw:
            return None

        p = Path(os.path.expanduser(raw))
        # A directory gets a default file name.
        if p.exists() and p.is_dir():
            return p / DEFAULT_LOG_FILE_NAME
        if raw.endswith(("/", os.sep)):
            return p / DEFAULT_LOG_FILE_NAME
        return p

    @staticmethod
    def configure_logging(
        console_level: str,
        *,
        log_file: str | os.PathLike[str] | None = None,
        file_level: str | None = None,
    ) -> None:
        """Log to stderr, and also to log_file when set.

        The file handler uses file_level, or the console level when unset.
        """
        console_logging_level = ConfigManager._parse_log_level(console_level)
        file_logging_level = (
            ConfigManager._parse_log_level(file_level) if (file_level is not None and str(file_level).strip()) else None
        )
        file_path = ConfigManager._resolve_log_file_path(log_file)

        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)

        min_level = console_logging_level
        if file_path is not None and file_logging_level is not None:
            min_level = min(min_level, file_logging_level)
        root.setLevel(min_level)

        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setLevel(console_logging_level)
        console_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S"))
        root.addHandler(console_handler)

        if file_path is None:
            return
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(file_path, encoding="utf-8")
        except OSError as e:
            root.warning("Failed to enable file logging to %s (%s)", file_path, str(e))
            return
        fh.setLevel(file_logging_level if file_logging_level is not None else console_logging_level)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(fh)

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        return logging.getLogger(name)

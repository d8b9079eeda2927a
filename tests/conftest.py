from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from hamaps_cli.config import Config
from hamaps_cli.map_writer import MemoryMapWriter

DEFAULT_CRT = "/ssl/default.pem"


def pytest_configure(config: pytest.Config) -> None:
    # Optional: load env vars from a specified dotenv file.
    env_file = os.getenv("HAMAPS_ENV_FILE")
    if not env_file:
        return

    from dotenv import load_dotenv

    p = Path(env_file)
    if p.exists():
        load_dotenv(dotenv_path=p)


@pytest.fixture
def writer() -> MemoryMapWriter:
    return MemoryMapWriter()


@pytest.fixture
def make_config(writer: MemoryMapWriter) -> Callable[..., Config]:
    def _make(**kwargs: object) -> Config:
        c = Config(maps_dir="/maps", writer=kwargs.pop("writer", writer))  # type: ignore[arg-type]
        c.config_default_x509_cert(DEFAULT_CRT)
        return c

    return _make


@pytest.fixture
def config(make_config: Callable[..., Config]) -> Config:
    return make_config()

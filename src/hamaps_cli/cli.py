from __future__ import annotations

import logging
from pathlib import Path

import typer

from .config import Config
from .configmanager import ConfigManager
from .errors import HAMapsError
from .map_writer import MapFileWriter, MemoryMapWriter
from .model_loader import load_model_file
from .yaml_writer import dumps_deterministic, frontend_group_to_dict

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
    pretty_exceptions_short=True,
)


def load_config_callback(value: str | None) -> str | None:
    """Eager callback to load env file before other options are processed."""
    ConfigManager.load_dotenv(value)
    return value


def _compile(model: Path, *, config: Config) -> Config:
    config.config_default_x509_cert(ConfigManager.default_x509_cert())
    try:
        load_model_file(model, config)
        config.build()
    except (HAMapsError, OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e
    return config


@app.callback()
def _main(
    env_file: str | None = typer.Option(
        None,
        "--env-file",
        envvar="HAMAPS_ENV_FILE",
        callback=load_config_callback,
        is_eager=True,
        help="Dotenv file to load before reading configuration",
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        envvar="HAMAPS_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        show_default=True,
    ),
    log_file: Path | None = typer.Option(None, "--log-file", envvar="HAMAPS_LOG_FILE"),
    log_file_level: str | None = typer.Option(
        None,
        "--log-file-level",
        envvar="HAMAPS_LOG_FILE_LEVEL",
        help="Logging level of --log-file (defaults to --log-level)",
    ),
) -> None:
    try:
        ConfigManager.configure_logging(log_level, log_file=log_file, file_level=log_file_level)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


@app.command("compile")
def compile_maps(
    model: Path = typer.Argument(..., exists=True, dir_okay=False, help="Model YAML file"),
    maps_dir: str | None = typer.Option(None, "--maps-dir", help="Output directory (default HAMAPS_MAPS_DIR)"),
) -> None:
    """Compile a model into routing map files."""
    out_dir = (maps_dir or ConfigManager.maps_dir()).rstrip("/") or "/"
    writer = MapFileWriter(skip_unchanged=ConfigManager.skip_unchanged())
    config = _compile(model, config=Config(maps_dir=out_dir, writer=writer))
    typer.echo(
        f"Compiled {len(config.hosts.items)} hosts and {len(config.backends)} backends "
        f"({len(writer.written)} files written) to {out_dir}"
    )


@app.command("show")
def show(
    model: Path = typer.Argument(..., exists=True, dir_okay=False, help="Model YAML file"),
) -> None:
    """Print the compiled frontend maps as YAML without writing files."""
    config = _compile(model, config=Config(maps_dir=ConfigManager.maps_dir(), writer=MemoryMapWriter()))
    if config.fgroup is None:
        typer.echo("Error: no frontend maps were built", err=True)
        raise typer.Exit(code=2)
    data = {
        "frontend": {
            "name": config.frontend.name,
            "bind_name": config.frontend.bind_name,
            "bind_socket": config.frontend.bind_socket,
            "accept_proxy": config.frontend.accept_proxy,
        },
        "maps": frontend_group_to_dict(config.fgroup),
        "backend_maps": {
            b.id: [[p.hostpath, p.id] for p in b.paths] for b in config.backends if b.paths_map is not None
        },
    }
    typer.echo(dumps_deterministic(data), nl=False)


@app.command("diff")
def diff(
    previous: Path = typer.Argument(..., exists=True, dir_okay=False, help="Previously applied model"),
    current: Path = typer.Argument(..., exists=True, dir_okay=False, help="New model"),
) -> None:
    """Exit 0 if both models compile to the same configuration, 1 if a reload is needed."""
    maps_dir = ConfigManager.maps_dir()
    old = _compile(previous, config=Config(maps_dir=maps_dir, writer=MemoryMapWriter()))
    new = _compile(current, config=Config(maps_dir=maps_dir, writer=MemoryMapWriter()))
    if old.equals(new):
        typer.echo("unchanged")
        return
    logger.info("Configuration changed, reload needed")
    typer.echo("changed")
    raise typer.Exit(code=1)

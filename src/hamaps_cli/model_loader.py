from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from . import utils
from .config import Config
from .errors import ModelError
from .models import Backend, Host, User

logger = logging.getLogger(__name__)

SECTIONS = {
    "global",
    "default_x509_cert",
    "default_backend",
    "backends",
    "tcp_backends",
    "userlists",
    "hosts",
}


def _mapping(value: object, *, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ModelError(f"{where} must be a mapping")
    return value


def _list(value: object, *, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ModelError(f"{where} must be a list")
    return value


def _backend_ref(config: Config, value: object, *, where: str) -> Backend | None:
    if value is None:
        return None
    ref = _mapping(value, where=where)
    namespace = utils.str_or_empty(ref.get("namespace"))
    name = utils.str_or_empty(ref.get("name"))
    port = utils.str_or_empty(ref.get("port"))
    if not name or not port:
        raise ModelError(f"{where} requires name and port")
    return config.acquire_backend(namespace, name, port)


def _load_global(config: Config, data: Mapping[str, Any]) -> None:
    bind = _mapping(data.get("bind"), where="global.bind")
    g = config.global_
    g.strict_host = utils.bool_or(data.get("strict_host"), default=False)
    g.bind.http_bind = utils.str_or_empty(bind.get("http_bind")) or g.bind.http_bind
    g.bind.https_bind = utils.str_or_empty(bind.get("https_bind")) or g.bind.https_bind
    g.bind.accept_proxy = utils.bool_or(bind.get("accept_proxy"), default=False)
    g.bind.fronting_bind = utils.str_or_empty(bind.get("fronting_bind"))


def _load_backends(config: Config, items: list[Any]) -> None:
    for i, item in enumerate(items):
        where = f"backends[{i}]"
        item = _mapping(item, where=where)
        backend = _backend_ref(config, item, where=where)
        if backend is None:
            raise ModelError(f"{where} must not be empty")
        for j, ep in enumerate(_list(item.get("endpoints"), where=f"{where}.endpoints")):
            ep = _mapping(ep, where=f"{where}.endpoints[{j}]")
            ip = utils.str_or_empty(ep.get("ip"))
            if not ip:
                raise ModelError(f"{where}.endpoints[{j}] requires ip")
            try:
                port = utils.parse_port(ep.get("port"), field=f"{where}.endpoints[{j}].port")
            except ValueError as e:
                raise ModelError(str(e)) from e
            backend.acquire_endpoint(ip, port, utils.str_or_empty(ep.get("target_ref")))


def _load_tcp_backends(config: Config, items: list[Any]) -> None:
    for i, item in enumerate(items):
        where = f"tcp_backends[{i}]"
        item = _mapping(item, where=where)
        name = utils.str_or_empty(item.get("name"))
        if not name:
            raise ModelError(f"{where} requires name")
        try:
            port = utils.parse_port(item.get("port"), field=f"{where}.port")
        except ValueError as e:
            raise ModelError(str(e)) from e
        backend = config.acquire_tcp_backend(name, port)
        backend.proxy_prot = utils.bool_or(item.get("proxy_prot"), default=False)
        backend.ssl_offload = utils.bool_or(item.get("ssl_offload"), default=False)


def _load_userlists(config: Config, items: list[Any]) -> None:
    for i, item in enumerate(items):
        where = f"userlists[{i}]"
        item = _mapping(item, where=where)
        name = utils.str_or_empty(item.get("name"))
        if not name:
            raise ModelError(f"{where} requires name")
        users: list[User] = []
        for j, raw in enumerate(_list(item.get("users"), where=f"{where}.users")):
            u = _mapping(raw, where=f"{where}.users[{j}]")
            users.append(
                User(
                    name=utils.str_or_empty(u.get("name")),
                    passwd=utils.str_or_empty(u.get("password")),
                    encrypted=utils.bool_or(u.get("encrypted"), default=True),
                )
            )
        config.add_userlist(name, users)


def _load_host(config: Config, item: Mapping[str, Any], *, where: str) -> Host:
    hostname = utils.str_or_empty(item.get("hostname"))
    if not hostname:
        raise ModelError(f"{where} requires hostname")
    host = config.hosts.acquire_host(hostname)
    alias = _mapping(item.get("alias"), where=f"{where}.alias")
    host.alias.alias_name = utils.str_or_empty(alias.get("name"))
    host.alias.alias_regex = utils.str_or_empty(alias.get("regex"))
    host.ssl_passthrough = utils.bool_or(item.get("ssl_passthrough"), default=False)
    host.http_passthrough_backend = utils.str_or_empty(item.get("http_passthrough_backend"))
    host.root_redirect = utils.str_or_empty(item.get("root_redirect"))
    host.var_namespace = utils.bool_or(item.get("var_namespace"), default=False)

    if "tls" in item:
        tls = _mapping(item.get("tls"), where=f"{where}.tls")
        host.tls.tls_filename = utils.str_or_empty(tls.get("tls_filename")) or config.default_x509_cert
        host.tls.ca_filename = utils.str_or_empty(tls.get("ca_filename"))
        host.tls.crl_filename = utils.str_or_empty(tls.get("crl_filename"))
        host.tls.ca_verify_optional = utils.bool_or(tls.get("ca_verify_optional"), default=False)
        host.tls.ca_error_page = utils.str_or_empty(tls.get("ca_error_page"))

    for j, p in enumerate(_list(item.get("paths"), where=f"{where}.paths")):
        pwhere = f"{where}.paths[{j}]"
        p = _mapping(p, where=pwhere)
        path = utils.str_or_empty(p.get("path")) or "/"
        if not path.startswith("/"):
            raise ModelError(f"{pwhere}.path must start with /")
        backend = _backend_ref(config, p.get("backend"), where=f"{pwhere}.backend")
        host.add_path(
            backend,
            path,
            ssl_redirect=utils.bool_or(p.get("ssl_redirect"), default=False),
            max_body_size=max(utils.normalize_int(p.get("max_body_size"), default=0), 0),
        )
    return host


def populate_config(config: Config, data: Mapping[str, Any]) -> Config:
    """Fill an empty Config from a model document."""
    unknown = sorted(str(k) for k in data.keys() if str(k) not in SECTIONS)
    if unknown:
        raise ModelError(f"Unknown model section(s): {', '.join(unknown)}")

    _load_global(config, _mapping(data.get("global"), where="global"))
    cert = utils.str_or_empty(data.get("default_x509_cert"))
    if cert:
        config.config_default_x509_cert(cert)
    _load_backends(config, _list(data.get("backends"), where="backends"))
    default_backend = _backend_ref(config, data.get("default_backend"), where="default_backend")
    if default_backend is not None:
        config.config_default_backend(default_backend)
    _load_tcp_backends(config, _list(data.get("tcp_backends"), where="tcp_backends"))
    _load_userlists(config, _list(data.get("userlists"), where="userlists"))
    for i, item in enumerate(_list(data.get("hosts"), where="hosts")):
        _load_host(config, _mapping(item, where=f"hosts[{i}]"), where=f"hosts[{i}]")

    logger.debug(
        "Loaded %d host(s), %d backend(s), %d tcp backend(s)",
        len(config.hosts.items),
        len(config.backends),
        len(config.tcp_backends),
    )
    return config


def load_model_file(path: Path, config: Config) -> Config:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ModelError(f"Invalid YAML in {path}: {e}") from e
    return populate_config(config, _mapping(data, where=str(path)))

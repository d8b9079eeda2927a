from __future__ import annotations

from collections.abc import Callable

from hamaps_cli.config import Config
from hamaps_cli.map_writer import MemoryMapWriter


def _populate(config: Config) -> Config:
    web = config.acquire_backend("ns1", "web", "80")
    api = config.acquire_backend("ns1", "api", "80")
    web.acquire_endpoint("10.0.0.1", 8080)
    config.config_default_backend(config.acquire_backend("default", "echo", "8080"))
    host = config.hosts.acquire_host("a.example.com")
    host.tls.tls_filename = "/ssl/a.pem"
    host.add_path(web, "/", ssl_redirect=True)
    host.add_path(api, "/api", max_body_size=2048)
    passthrough = config.hosts.acquire_host("b.example.com")
    passthrough.ssl_passthrough = True
    passthrough.add_path(config.acquire_backend("ns2", "tls", "443"), "/")
    config.acquire_tcp_backend("ns3-db", 5432)
    config.build()
    return config


def test_same_model_compiles_equal(make_config: Callable[..., Config]) -> None:
    c1 = _populate(make_config(writer=MemoryMapWriter()))
    c2 = _populate(make_config(writer=MemoryMapWriter()))
    assert c1.equals(c1)
    assert c1.equals(c2)
    assert c2.equals(c1)


def test_acme_data_is_ignored(make_config: Callable[..., Config]) -> None:
    c1 = _populate(make_config())
    c2 = _populate(make_config())
    c2.acme_data.storages["a.example.com"] = "secret/a"
    c2.acme_data.queue.append("b.example.com")
    assert c1.equals(c2)


def test_acme_settings_are_compared(make_config: Callable[..., Config]) -> None:
    c1 = _populate(make_config())
    c2 = _populate(make_config())
    c2.acme.enabled = True
    assert not c1.equals(c2)


def test_changes_are_detected(make_config: Callable[..., Config]) -> None:
    c1 = _populate(make_config())
    c2 = make_config()
    c2.hosts.acquire_host("c.example.com")
    c2 = _populate(c2)
    assert not c1.equals(c2)
    assert not c2.equals(c1)

    c3 = _populate(make_config())
    c3.find_backend("ns1", "web", "80").acquire_endpoint("10.0.0.2", 8080)  # type: ignore[union-attr]
    assert not c1.equals(c3)


def test_not_equal_to_other_types(config: Config) -> None:
    assert not config.equals(object())
    assert not config.equals(None)

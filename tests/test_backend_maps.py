from __future__ import annotations

import logging
from collections.abc import Sequence

import pytest

from hamaps_cli.config import Config
from hamaps_cli.map_writer import MemoryMapWriter
from hamaps_cli.maps import HostsMapEntry


class FailingWriter:
    """Persists the first `ok` files, then fails."""

    def __init__(self, ok: int) -> None:
        self.ok = ok
        self.files: dict[str, int] = {}

    def write_output(self, entries: Sequence[HostsMapEntry], filename: str) -> None:
        if len(self.files) >= self.ok:
            raise OSError(f"disk full: {filename}")
        self.files[filename] = len(entries)


def test_backend_with_distinct_path_config_gets_idpath_map(config: Config, writer: MemoryMapWriter) -> None:
    backend = config.acquire_backend("ns1", "svc1", "80")
    host = config.hosts.acquire_host("a.example.com")
    host.add_path(backend, "/")
    host.add_path(backend, "/api", ssl_redirect=True)
    config.sync_config()
    config.build_backend_maps()
    assert backend.need_acl()
    assert backend.paths_map is not None
    assert backend.paths_map.match_file == "/maps/_back_ns1_svc1_80_idpath.map"
    assert [(e.key, e.value) for e in backend.paths_map.match] == [
        ("a.example.com/", "path01"),
        ("a.example.com/api", "path02"),
    ]
    assert writer.files["/maps/_back_ns1_svc1_80_idpath.map"] == "a.example.com/ path01\na.example.com/api path02\n"


def test_backend_without_acl_has_no_map(config: Config, writer: MemoryMapWriter) -> None:
    backend = config.acquire_backend("ns1", "svc1", "80")
    host = config.hosts.acquire_host("a.example.com")
    host.add_path(backend, "/")
    host.add_path(backend, "/api")
    config.sync_config()
    config.build_backend_maps()
    assert not backend.need_acl()
    assert backend.paths_map is None
    assert writer.files == {}


def test_writer_failure_aborts_remaining_writes(make_config) -> None:  # type: ignore[no-untyped-def]
    failing = FailingWriter(ok=2)
    config = make_config(writer=failing)
    backend = config.acquire_backend("ns1", "svc1", "80")
    config.hosts.acquire_host("a.example.com").add_path(backend, "/")
    config.sync_config()
    with pytest.raises(OSError, match="disk full"):
        config.build_frontend_group()
    assert list(failing.files) == ["/maps/_global_http_front.map", "/maps/_global_http_root_redir.map"]
    assert config.fgroup is None


def test_writer_failure_leaves_backends_without_maps(make_config) -> None:  # type: ignore[no-untyped-def]
    config = make_config(writer=FailingWriter(ok=0))
    backend = config.acquire_backend("ns1", "svc1", "80")
    host = config.hosts.acquire_host("a.example.com")
    host.add_path(backend, "/")
    host.add_path(backend, "/api", ssl_redirect=True)
    config.sync_config()
    with pytest.raises(OSError):
        config.build_backend_maps()
    assert backend.paths_map is None


def test_colliding_backend_ids_are_reported(
    config: Config, writer: MemoryMapWriter, caplog: pytest.LogCaptureFixture
) -> None:
    host = config.hosts.acquire_host("a.example.com")
    for ns, name, prefix in (("a_b", "c", "/x"), ("a", "b_c", "/y")):
        backend = config.acquire_backend(ns, name, "80")
        host.add_path(backend, prefix)
        host.add_path(backend, prefix + "/sub", max_body_size=10)
    config.sync_config()
    with caplog.at_level(logging.WARNING, logger="hamaps_cli"):
        config.build_backend_maps()
    assert "share the map file /maps/_back_a_b_c_80_idpath.map" in caplog.text
    assert list(writer.files) == ["/maps/_back_a_b_c_80_idpath.map"]
    assert all(b.paths_map is not None for b in config.backends)

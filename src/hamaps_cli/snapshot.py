from __future__ import annotations

from dataclasses import dataclass

from .models import Backend, BackendRef, Global, Host


@dataclass(frozen=True)
class RoutingModel:
    """Snapshot of a finalized configuration, handed to the map compilers.

    Only the container is frozen: hosts and backends are the live objects.
    """

    hosts: tuple[Host, ...]
    backends: tuple[Backend, ...]
    global_: Global
    frontend_name: str
    default_x509_cert: str
    maps_dir: str

    def find_backend(self, ref: BackendRef | None) -> Backend | None:
        if ref is None:
            return None
        for backend in self.backends:
            if backend.ref == ref:
                return backend
        return None

    def find_host(self, hostname: str) -> Host | None:
        for host in self.hosts:
            if host.hostname == hostname:
                return host
        return None

    def map_file(self, suffix: str) -> str:
        return f"{self.maps_dir}/{suffix}"

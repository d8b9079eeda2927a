from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from ..maps import HostsMap

DEFAULT_BACKEND_ID = "_default_backend"


def build_id(namespace: str, name: str, port: str) -> str:
    return f"{namespace}_{name}_{port}"


class BackendRef(NamedTuple):
    """Identity of a backend: (namespace, name, port)."""

    namespace: str
    name: str
    port: str


@dataclass
class ServerConfig:
    initial_weight: int = 1


@dataclass
class BackendTLS:
    has_tls_auth: bool = False


@dataclass
class Endpoint:
    ip: str
    port: int
    target_ref: str = ""
    weight: int = 1


@dataclass
class BackendPath:
    id: str
    hostname: str
    path: str
    ssl_redirect: bool = False
    max_body_size: int = 0

    @property
    def hostpath(self) -> str:
        return self.hostname + self.path


@dataclass
class Backend:
    id: str
    namespace: str
    name: str
    port: str
    server: ServerConfig = field(default_factory=ServerConfig)
    tls: BackendTLS = field(default_factory=BackendTLS)
    endpoints: list[Endpoint] = field(default_factory=list)
    paths: list[BackendPath] = field(default_factory=list)
    paths_map: HostsMap | None = None

    @classmethod
    def create(cls, namespace: str, name: str, port: str) -> Backend:
        return cls(id=build_id(namespace, name, port), namespace=namespace, name=name, port=port)

    @property
    def ref(self) -> BackendRef:
        return BackendRef(self.namespace, self.name, self.port)

    def reset_id(self) -> None:
        self.id = build_id(self.namespace, self.name, self.port)

    def acquire_endpoint(self, ip: str, port: int, target_ref: str = "") -> Endpoint:
        for ep in self.endpoints:
            if ep.ip == ip and ep.port == port:
                return ep
        ep = Endpoint(ip=ip, port=port, target_ref=target_ref, weight=self.server.initial_weight)
        self.endpoints.append(ep)
        return ep

    def find_hostpath(self, hostpath: str) -> BackendPath | None:
        for p in self.paths:
            if p.hostpath == hostpath:
                return p
        return None

    def add_host_path(
        self, hostname: str, path: str, *, ssl_redirect: bool = False, max_body_size: int = 0
    ) -> BackendPath:
        """Register hostname+path on this backend, returning the existing entry if already known.

        Path ids are assigned in registration order: path01, path02, ...
        """
        existing = self.find_hostpath(hostname + path)
        if existing is not None:
            return existing
        bpath = BackendPath(
            id=f"path{len(self.paths) + 1:02d}",
            hostname=hostname,
            path=path,
            ssl_redirect=ssl_redirect,
            max_body_size=max_body_size,
        )
        self.paths.append(bpath)
        return bpath

    def has_ssl_redirect_hostpath(self, hostpath: str) -> bool:
        p = self.find_hostpath(hostpath)
        return p.ssl_redirect if p is not None else False

    def max_body_size_hostpath(self, hostpath: str) -> int:
        p = self.find_hostpath(hostpath)
        return p.max_body_size if p is not None else 0

    def need_acl(self) -> bool:
        # Paths sharing one config can be served without per-path ACLs.
        configs = {(p.ssl_redirect, p.max_body_size) for p in self.paths}
        return len(configs) > 1


@dataclass
class TCPBackend:
    name: str
    port: int
    endpoints: list[Endpoint] = field(default_factory=list)
    proxy_prot: bool = False
    ssl_offload: bool = False

from __future__ import annotations

from dataclasses import dataclass, field

from .backend import Backend, BackendRef

DEFAULT_HOST = "<default>"


@dataclass
class HostTLS:
    tls_filename: str = ""
    ca_filename: str = ""
    crl_filename: str = ""
    ca_verify_optional: bool = False
    ca_error_page: str = ""

    def has_tls(self) -> bool:
        return self.tls_filename != ""


@dataclass
class HostAlias:
    alias_name: str = ""
    alias_regex: str = ""


@dataclass
class HostPath:
    path: str
    backend: BackendRef | None = None


@dataclass
class Host:
    hostname: str
    paths: list[HostPath] = field(default_factory=list)
    alias: HostAlias = field(default_factory=HostAlias)
    tls: HostTLS = field(default_factory=HostTLS)
    ssl_passthrough: bool = False
    http_passthrough_backend: str = ""
    root_redirect: str = ""
    var_namespace: bool = False

    def find_path(self, path: str) -> HostPath | None:
        for p in self.paths:
            if p.path == path:
                return p
        return None

    def add_path(
        self, backend: Backend | None, path: str, *, ssl_redirect: bool = False, max_body_size: int = 0
    ) -> HostPath:
        """Add a path to this host and, if the backend is known, register the hostpath on it.

        A None backend still adds the path; map writing skips its backend entries.
        """
        ref = None
        if backend is not None:
            ref = backend.ref
            backend.add_host_path(self.hostname, path, ssl_redirect=ssl_redirect, max_body_size=max_body_size)
        hpath = HostPath(path=path, backend=ref)
        self.paths.append(hpath)
        # longer prefixes first
        self.paths.sort(key=lambda p: p.path, reverse=True)
        return hpath

    def has_tls_auth(self) -> bool:
        return self.tls.ca_filename != ""


@dataclass
class Hosts:
    items: list[Host] = field(default_factory=list)

    def acquire_host(self, hostname: str) -> Host:
        host = self.find_host(hostname)
        if host is not None:
            return host
        host = Host(hostname=hostname)
        self.items.append(host)
        self.items.sort(key=lambda h: h.hostname)
        return host

    def find_host(self, hostname: str) -> Host | None:
        for host in self.items:
            if host.hostname == hostname:
                return host
        return None

    def default_host(self) -> Host | None:
        return self.find_host(DEFAULT_HOST)

    def has_ssl_passthrough(self) -> bool:
        return any(host.ssl_passthrough for host in self.items)

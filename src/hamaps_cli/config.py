from __future__ import annotations

import logging
from collections.abc import Sequence

from . import backend_maps, frontend_maps
from .map_writer import MapFileWriter, MapWriter
from .models import (
    DEFAULT_BACKEND_ID,
    Acme,
    AcmeData,
    Backend,
    BackendRef,
    Frontend,
    FrontendGroup,
    Global,
    Hosts,
    TCPBackend,
    User,
    Userlist,
)
from .snapshot import RoutingModel

logger = logging.getLogger(__name__)


def backend_sort_key(backend: Backend, default: Backend | None) -> tuple[bool, str, BackendRef]:
    """Total order of the backend registry: ascending id, the default backend always last.

    Distinct identities may build the same id (`a_b/c` and `a/b_c`), the identity breaks the tie.
    """
    return (backend is default, backend.id, backend.ref)


class Config:
    """Registry of backends, hosts and userlists of one reconciliation cycle.

    Not thread safe: a single caller populates it, calls sync_config() once,
    then builds the frontend and backend maps.
    """

    def __init__(self, *, maps_dir: str = "", writer: MapWriter | None = None) -> None:
        # external state, never compared by equals()
        self.acme_data = AcmeData()
        self.writer: MapWriter = writer if writer is not None else MapFileWriter()

        self.acme = Acme()
        self.fgroup: FrontendGroup | None = None
        self.maps_dir = maps_dir
        self.global_ = Global()
        self.frontend = Frontend()
        self.hosts = Hosts()
        self.tcp_backends: list[TCPBackend] = []
        self.backends: list[Backend] = []
        self.userlists: list[Userlist] = []
        self.default_backend: Backend | None = None
        self.default_x509_cert = ""

    # registry

    def acquire_tcp_backend(self, service_name: str, port: int) -> TCPBackend:
        for backend in self.tcp_backends:
            if backend.name == service_name and backend.port == port:
                return backend
        backend = TCPBackend(name=service_name, port=port)
        self.tcp_backends.append(backend)
        self.tcp_backends.sort(key=lambda b: (b.name, b.port))
        logger.debug("New TCP backend %s:%d", service_name, port)
        return backend

    def _sort_backends(self) -> None:
        self.backends.sort(key=lambda b: backend_sort_key(b, self.default_backend))

    def acquire_backend(self, namespace: str, name: str, port: str) -> Backend:
        backend = self.find_backend(namespace, name, port)
        if backend is not None:
            return backend
        backend = Backend.create(namespace, name, port)
        self.backends.append(backend)
        self._sort_backends()
        logger.debug("New backend %s", backend.id)
        return backend

    def find_backend(self, namespace: str, name: str, port: str) -> Backend | None:
        ref = BackendRef(namespace, name, port)
        for backend in self.backends:
            if backend.ref == ref:
                return backend
        return None

    def config_default_backend(self, default_backend: Backend | None) -> None:
        if self.default_backend is not None:
            self.default_backend.reset_id()
        self.default_backend = default_backend
        if default_backend is not None:
            default_backend.id = DEFAULT_BACKEND_ID
        self._sort_backends()

    def config_default_x509_cert(self, filename: str) -> None:
        self.default_x509_cert = filename

    def add_userlist(self, name: str, users: Sequence[User]) -> Userlist:
        userlist = Userlist(name=name, users=sorted(users, key=lambda u: u.name))
        self.userlists = [u for u in self.userlists if u.name != name]
        self.userlists.append(userlist)
        self.userlists.sort(key=lambda u: u.name)
        return userlist

    def find_userlist(self, name: str) -> Userlist | None:
        for userlist in self.userlists:
            if userlist.name == name:
                return userlist
        return None

    # compilation

    def sync_config(self) -> None:
        """Resolve policy that needs the whole model. Runs once, after population."""
        frontend = self.frontend
        if self.hosts.has_ssl_passthrough():
            # a tcp frontend inspects sni and relays to this one through a local socket
            frontend.bind_name = f"{frontend.name}_socket"
            frontend.bind_socket = f"unix@/var/run/{frontend.bind_name}.sock"
            frontend.accept_proxy = True
        else:
            frontend.bind_name = "_public"
            frontend.bind_socket = self.global_.bind.https_bind
            frontend.accept_proxy = self.global_.bind.accept_proxy
        logger.debug("Frontend %s binds to %s", frontend.name, frontend.bind_socket)

        for host in self.hosts.items:
            if host.ssl_passthrough:
                continue
            if host.has_tls_auth():
                for path in host.paths:
                    backend = self.find_backend(*path.backend) if path.backend is not None else None
                    if backend is not None:
                        backend.tls.has_tls_auth = True
            if self.global_.strict_host and host.find_path("/") is None:
                back: Backend | None = None
                default_host = self.hosts.default_host()
                if default_host is not None:
                    root = default_host.find_path("/")
                    if root is not None and root.backend is not None:
                        back = self.find_backend(*root.backend)
                if back is None:
                    back = self.default_backend
                if back is None:
                    logger.warning("No backend found for the root path of %s", host.hostname)
                host.add_path(back, "/")

    def snapshot(self) -> RoutingModel:
        return RoutingModel(
            hosts=tuple(self.hosts.items),
            backends=tuple(self.backends),
            global_=self.global_,
            frontend_name=self.frontend.name,
            default_x509_cert=self.default_x509_cert,
            maps_dir=self.maps_dir,
        )

    def build_frontend_group(self) -> FrontendGroup:
        fgroup = frontend_maps.build_frontend_group(self.snapshot(), self.writer)
        self.fgroup = fgroup
        return fgroup

    def build_backend_maps(self) -> None:
        backend_maps.build_backend_maps(self.snapshot(), self.writer)

    def build(self) -> FrontendGroup:
        """sync_config() followed by both map compilers."""
        self.sync_config()
        fgroup = self.build_frontend_group()
        self.build_backend_maps()
        return fgroup

    def equals(self, other: object) -> bool:
        """Structural comparison, ignoring acme_data and the output writer."""
        if not isinstance(other, Config):
            return False
        return (
            self.acme == other.acme
            and self.fgroup == other.fgroup
            and self.maps_dir == other.maps_dir
            and self.global_ == other.global_
            and self.frontend == other.frontend
            and self.hosts == other.hosts
            and self.tcp_backends == other.tcp_backends
            and self.backends == other.backends
            and self.userlists == other.userlists
            and self.default_backend == other.default_backend
            and self.default_x509_cert == other.default_x509_cert
        )

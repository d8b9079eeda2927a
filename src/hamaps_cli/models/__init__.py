from .acme import Acme, AcmeData
from .backend import (
    DEFAULT_BACKEND_ID,
    Backend,
    BackendPath,
    BackendRef,
    BackendTLS,
    Endpoint,
    ServerConfig,
    TCPBackend,
    build_id,
)
from .frontend import FRONTEND_NAME, BindConfig, Frontend, FrontendGroup, Global
from .host import DEFAULT_HOST, Host, HostAlias, HostPath, Hosts, HostTLS
from .userlist import User, Userlist

__all__ = [
    "DEFAULT_BACKEND_ID",
    "DEFAULT_HOST",
    "FRONTEND_NAME",
    "Acme",
    "AcmeData",
    "Backend",
    "BackendPath",
    "BackendRef",
    "BackendTLS",
    "BindConfig",
    "Endpoint",
    "Frontend",
    "FrontendGroup",
    "Global",
    "Host",
    "HostAlias",
    "HostPath",
    "HostTLS",
    "Hosts",
    "ServerConfig",
    "TCPBackend",
    "User",
    "Userlist",
    "build_id",
]

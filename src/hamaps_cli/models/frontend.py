from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..maps import HostsMap

FRONTEND_NAME = "_front001"


@dataclass
class BindConfig:
    http_bind: str = ":80"
    https_bind: str = ":443"
    accept_proxy: bool = False
    fronting_bind: str = ""

    def has_fronting_proxy(self) -> bool:
        return self.fronting_bind != ""


@dataclass
class Global:
    """Process wide policy. Read-only while maps are compiled."""

    bind: BindConfig = field(default_factory=BindConfig)
    strict_host: bool = False


@dataclass
class Frontend:
    name: str = FRONTEND_NAME
    bind_name: str = ""
    bind_socket: str = ""
    accept_proxy: bool = False


@dataclass
class FrontendGroup:
    """Compiled frontend maps. Built by Config.build_frontend_group()."""

    http_fronts_map: HostsMap
    http_root_redir_map: HostsMap
    https_redir_map: HostsMap
    ssl_passthrough_map: HostsMap
    var_namespace_map: HostsMap
    host_backends_map: HostsMap
    root_redir_map: HostsMap
    max_body_size_map: HostsMap
    sni_backends_map: HostsMap
    tls_invalid_crt_error_list: HostsMap
    tls_invalid_crt_error_pages_map: HostsMap
    tls_no_crt_error_list: HostsMap
    tls_no_crt_error_pages_map: HostsMap
    crt_list: HostsMap
    use_server_list: HostsMap

from __future__ import annotations

from .configmanager import ConfigManager
from .errors import MissingRootPathError
from .map_writer import MapWriter
from .maps import HostsMaps, write_maps
from .models import FrontendGroup, Host
from .snapshot import RoutingModel

logger = ConfigManager.get_logger(__name__)

# Some maps use yes/no answers instead of a list with found/missing keys,
# so a /path with a feature never leaks it to a declared /path/sub without it.
YES = "yes"
NO = "no"
NO_NAMESPACE = "-"


def _yesno(value: bool) -> str:
    return YES if value else NO


def create_frontend_group(model: RoutingModel, maps: HostsMaps) -> FrontendGroup:
    front = model.frontend_name
    return FrontendGroup(
        http_fronts_map=maps.add_map(model.map_file("_global_http_front.map")),
        http_root_redir_map=maps.add_map(model.map_file("_global_http_root_redir.map")),
        https_redir_map=maps.add_map(model.map_file("_global_https_redir.map")),
        ssl_passthrough_map=maps.add_map(model.map_file("_global_sslpassthrough.map")),
        var_namespace_map=maps.add_map(model.map_file("_global_k8s_ns.map")),
        host_backends_map=maps.add_map(model.map_file(f"{front}_host.map")),
        root_redir_map=maps.add_map(model.map_file(f"{front}_root_redir.map")),
        max_body_size_map=maps.add_map(model.map_file(f"{front}_max_body_size.map")),
        sni_backends_map=maps.add_map(model.map_file(f"{front}_sni.map")),
        tls_invalid_crt_error_list=maps.add_map(model.map_file(f"{front}_inv_crt.list")),
        tls_invalid_crt_error_pages_map=maps.add_map(model.map_file(f"{front}_inv_crt_redir.map")),
        tls_no_crt_error_list=maps.add_map(model.map_file(f"{front}_no_crt.list")),
        tls_no_crt_error_pages_map=maps.add_map(model.map_file(f"{front}_no_crt_redir.map")),
        crt_list=maps.add_map(model.map_file(f"{front}_bind_crt.list")),
        use_server_list=maps.add_map(model.map_file(f"{front}_use_server.list")),
    )


def _add_ssl_passthrough_host(model: RoutingModel, fgroup: FrontendGroup, host: Host) -> None:
    root_path = host.find_path("/")
    if root_path is None:
        raise MissingRootPathError(host.hostname)
    backend = model.find_backend(root_path.backend)
    if backend is not None:
        fgroup.ssl_passthrough_map.append_hostname(host.hostname, backend.id)
    else:
        logger.warning("Skipping ssl-passthrough entry of %s: root path has no backend", host.hostname)
    fgroup.https_redir_map.append_hostname(host.hostname + "/", _yesno(host.http_passthrough_backend == ""))
    if host.http_passthrough_backend:
        fgroup.http_fronts_map.append_hostname(host.hostname + "/", host.http_passthrough_backend)


def crt_list_entry(host: Host, default_x509_cert: str) -> str | None:
    """Certificate list line binding the host's certificate, or None if the default cert applies."""
    tls = host.tls
    crt_file = tls.tls_filename or default_x509_cert
    if crt_file == default_x509_cert and not tls.ca_filename:
        return None
    if not tls.ca_filename:
        return f"{crt_file} {host.hostname}"
    crl = f" crl-file {tls.crl_filename}" if tls.crl_filename else ""
    return f"{crt_file} [ca-file {tls.ca_filename}{crl} verify optional] {host.hostname}"


def _add_http_host(model: RoutingModel, fgroup: FrontendGroup, host: Host) -> None:
    fronting_proxy = model.global_.bind.has_fronting_proxy()
    alias_name_owned = bool(host.alias.alias_name) and model.find_host(host.alias.alias_name) is not None
    if alias_name_owned:
        logger.warning(
            "Ignoring alias %s of host %s: hostname already declared", host.alias.alias_name, host.hostname
        )
    max_body_sizes: dict[str, int] = {}
    for path in host.paths:
        backend = model.find_backend(path.backend)
        base = host.hostname + path.path
        has_ssl_redirect = False
        if host.tls.has_tls() and backend is not None:
            has_ssl_redirect = backend.has_ssl_redirect_hostpath(base)
        fgroup.https_redir_map.append_hostname(base, _yesno(has_ssl_redirect))
        if backend is not None:
            max_body_size = backend.max_body_size_hostpath(base)
            if max_body_size > 0:
                max_body_sizes[base] = max_body_size
        else:
            logger.warning("Path %s has no backend, skipping its backend entries", base)
            continue

        alias_name = ""
        alias_regex = ""
        if host.alias.alias_name and not alias_name_owned:
            alias_name = host.alias.alias_name + path.path
        if host.alias.alias_regex:
            alias_regex = host.alias.alias_regex + path.path
        backends_map = fgroup.sni_backends_map if host.has_tls_auth() else fgroup.host_backends_map
        backends_map.append_hostname(base, backend.id)
        backends_map.append_alias_name(alias_name, backend.id)
        backends_map.append_alias_regex(alias_regex, backend.id)

        if not has_ssl_redirect or fronting_proxy:
            fgroup.http_fronts_map.append_hostname(base, backend.id)
        ns = backend.namespace if host.var_namespace else NO_NAMESPACE
        fgroup.var_namespace_map.append_hostname(base, ns)

    if max_body_sizes:
        # all paths of the host, 0 (zero) means unlimited
        for path in host.paths:
            base = host.hostname + path.path
            fgroup.max_body_size_map.append_hostname(base, str(max_body_sizes.get(base, 0)))

    if host.has_tls_auth():
        verify_optional = host.tls.ca_verify_optional
        fgroup.tls_invalid_crt_error_list.append_hostname(host.hostname, "")
        if not verify_optional:
            fgroup.tls_no_crt_error_list.append_hostname(host.hostname, "")
        page = host.tls.ca_error_page
        if page:
            fgroup.tls_invalid_crt_error_pages_map.append_hostname(host.hostname, page)
            if not verify_optional:
                fgroup.tls_no_crt_error_pages_map.append_hostname(host.hostname, page)

    if host.root_redirect:
        fgroup.http_root_redir_map.append_hostname(host.hostname, host.root_redirect)
        fgroup.root_redir_map.append_hostname(host.hostname, host.root_redirect)
    fgroup.use_server_list.append_hostname(host.hostname, "")

    crt_entry = crt_list_entry(host, model.default_x509_cert)
    if crt_entry is not None:
        fgroup.crt_list.append_item(crt_entry)


def build_frontend_group(model: RoutingModel, writer: MapWriter) -> FrontendGroup:
    """Compile host routing maps and persist them.

    Raises MissingRootPathError before anything is written if an
    ssl-passthrough host has no root path.
    """
    maps = HostsMaps()
    fgroup = create_frontend_group(model, maps)
    fgroup.crt_list.append_item(model.default_x509_cert)
    for host in model.hosts:
        if host.ssl_passthrough:
            _add_ssl_passthrough_host(model, fgroup, host)
        else:
            _add_http_host(model, fgroup, host)
    write_maps(maps, writer)
    logger.info("Built frontend maps for %d host(s)", len(model.hosts))
    return fgroup

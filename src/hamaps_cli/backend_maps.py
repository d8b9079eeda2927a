from __future__ import annotations

from .configmanager import ConfigManager
from .map_writer import MapWriter
from .maps import HostsMap, HostsMaps, write_maps
from .models import Backend
from .snapshot import RoutingModel

logger = ConfigManager.get_logger(__name__)


def build_backend_maps(model: RoutingModel, writer: MapWriter) -> HostsMaps:
    """Build a hostpath -> path id map for every backend that needs path ACLs.

    Maps are attached to `Backend.paths_map` only after every file was
    written; other backends get None.
    """
    maps = HostsMaps()
    attached: list[tuple[Backend, HostsMap | None]] = []
    owners: dict[str, Backend] = {}
    for backend in model.backends:
        if not backend.need_acl():
            attached.append((backend, None))
            continue
        filename = model.map_file(f"_back_{backend.id}_idpath.map")
        previous = owners.get(filename)
        if previous is not None:
            logger.warning(
                "Backends %s and %s share the map file %s, the latter overwrites it",
                "/".join(previous.ref),
                "/".join(backend.ref),
                filename,
            )
        owners[filename] = backend
        paths_map = maps.add_map(filename)
        for path in backend.paths:
            paths_map.append_path(path.hostpath, path.id)
        attached.append((backend, paths_map))
    write_maps(maps, writer)
    for backend, paths_map in attached:
        backend.paths_map = paths_map
    logger.info("Built %d backend path map(s)", len(maps.items))
    return maps

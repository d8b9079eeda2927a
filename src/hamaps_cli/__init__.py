from .config import Config, backend_sort_key
from .errors import HAMapsError, MissingRootPathError, ModelError
from .map_writer import MapFileWriter, MapWriter, MemoryMapWriter

__all__ = [
    "Config",
    "HAMapsError",
    "MapFileWriter",
    "MapWriter",
    "MemoryMapWriter",
    "MissingRootPathError",
    "ModelError",
    "backend_sort_key",
]

from __future__ import annotations


class HAMapsError(RuntimeError):
    pass


class MissingRootPathError(HAMapsError):
    def __init__(self, hostname: str) -> None:
        super().__init__(f"missing root path on host {hostname}")
        self.hostname = hostname


class ModelError(HAMapsError):
    pass

from __future__ import annotations

from dataclasses import fields
from typing import Any

import yaml

from .maps import HostsMap
from .models import FrontendGroup


def dumps_deterministic(data: Any) -> str:
    # Stable across runs: sorted keys, block style, newline at EOF.
    return (
        yaml.safe_dump(
            data,
            allow_unicode=True,
            sort_keys=True,
            default_flow_style=False,
        )
        or ""
    )


def hosts_map_to_dict(hmap: HostsMap) -> dict[str, Any]:
    out: dict[str, Any] = {
        "file": hmap.match_file,
        "match": [[e.key, e.value] if e.value else [e.key] for e in hmap.match],
    }
    if hmap.regex:
        out["regex_file"] = hmap.regex_file
        out["regex"] = [[e.key, e.value] if e.value else [e.key] for e in hmap.regex]
    return out


def frontend_group_to_dict(fgroup: FrontendGroup) -> dict[str, Any]:
    return {f.name: hosts_map_to_dict(getattr(fgroup, f.name)) for f in fields(fgroup)}

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Acme:
    """ACME settings rendered into the proxy configuration."""

    enabled: bool = False
    prefix: str = ""
    socket: str = ""
    shared: bool = False
    expiring: int = 30
    terms_agreed: bool = False
    endpoint: str = ""
    emails: str = ""


@dataclass
class AcmeData:
    """Certificate issuance working state.

    Owned and mutated by the issuance machinery, so it never takes part in
    Config.equals().
    """

    storages: dict[str, str] = field(default_factory=dict)
    queue: list[str] = field(default_factory=list)

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class User:
    name: str
    passwd: str
    encrypted: bool = True


@dataclass
class Userlist:
    name: str
    users: list[User] = field(default_factory=list)

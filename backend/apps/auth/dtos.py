from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    MECHANIC = "mechanic"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Identity:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class SessionDTO:
    identity: Optional[Identity] = None
    role: Optional[Role] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Ok:
    value: Any
    ok = True


@dataclass(frozen=True)
class Error:
    reason: Any
    ok = False

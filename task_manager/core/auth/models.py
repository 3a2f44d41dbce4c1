from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """Authenticated caller. subject is the user's email."""

    subject: str
    anonymous: bool = False

from __future__ import annotations

from typing import Annotated

from fastapi import Path, Query
from pydantic import Field

# sqlite INTEGER is a signed 64-bit value
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1

RowId = Annotated[int, Field(ge=1, le=SQLITE_INT_MAX)]
Position = Annotated[int, Field(ge=SQLITE_INT_MIN, le=SQLITE_INT_MAX)]


def id_path(description: str = "Resource id"):
    return Path(ge=1, le=SQLITE_INT_MAX, description=description)


def id_query(alias: str, description: str = ""):
    return Query(default=None, alias=alias, ge=1, le=SQLITE_INT_MAX, description=description)

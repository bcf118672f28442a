from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Provenance:
    """
    Descriptive metadata carried by a stored index: a label, a free-text
    comment and the write time. Informational only; never used to decode.
    """

    name: str = ""
    comment: str = ""
    mtime: Optional[datetime] = None

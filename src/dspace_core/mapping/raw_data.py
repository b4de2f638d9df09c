# src/dspace_core/mapping/raw_data.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

# The record handed over by the mapping-file reader. No class lookup happens
# here; the resolver does that.

@dataclass(frozen=True)
class CodeMapping:
    """Associates a parameter (by dotted id) with the class used to instantiate it."""
    param_id: str
    class_name: str
    constructor_signature: Optional[str] = None
    source_path: Optional[Path] = None

    @property
    def formal_ids(self) -> Optional[Tuple[str, ...]]:
        """The whitespace-separated constructor identifiers, or None if none were declared."""
        if self.constructor_signature is None:
            return None
        return tuple(self.constructor_signature.split())

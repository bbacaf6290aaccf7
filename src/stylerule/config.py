from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RenderConfig:
    indent: str = "  "
    compact: bool = False
    parent_scope: str = ""  # e.g. ".card"; substituted for "&"

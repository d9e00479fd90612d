"""
Deterministic color assignment for chart series.

Two policies:
- closed set (salespeople): fixed name -> color lookup; names outside the
  mapping get a color derived from the name itself
- open set (categories, products): palette[index % len(palette)], where index
  is the position in first-seen order

Open-set colors are only stable within one aggregation run; a change in the
first-seen order of keys reassigns them.
"""

import zlib
from typing import Dict, Mapping, Optional, Sequence


class ColorAssigner:
    """
    Assigns colors to identities.

    Example:
        colors = ColorAssigner(palette, {"松澤": "#60a5fa"})
        colors.for_person("松澤")
        colors.for_keys(["A", "B"])
    """

    def __init__(self, palette: Sequence[str], known: Optional[Mapping[str, str]] = None):
        if not palette:
            raise ValueError("palette must contain at least one color")
        self.palette = list(palette)
        self.known: Dict[str, str] = dict(known or {})
        # Unknown people avoid colors already owned by known people where possible
        taken = set(self.known.values())
        self.fallback = [c for c in self.palette if c not in taken] or self.palette

    def cyclic(self, index: int) -> str:
        return self.palette[index % len(self.palette)]

    def lookup(self, name: str) -> Optional[str]:
        """Closed-set lookup; unknown names resolve to None."""
        return self.known.get(name)

    def for_person(self, name: str) -> str:
        """
        Color for a salesperson.

        Known names use the fixed mapping. Unknown names get a fallback color
        chosen by a CRC32 of the name, so the same person has the same color
        in every view and every process.
        """
        color = self.lookup(name)
        if color is None:
            return self.fallback[zlib.crc32(name.encode("utf-8")) % len(self.fallback)]
        return color

    def for_keys(self, keys: Sequence[str]) -> Dict[str, str]:
        """Open-set colors for keys given in first-seen order."""
        return {key: self.cyclic(index) for index, key in enumerate(keys)}

# =============================================================================
# Entrants, History and the Selection Pool Resolver
# Names are compared case-insensitively everywhere; the casing of the first
# occurrence is the one kept for display.
# =============================================================================

from dataclasses import dataclass, field
from typing import List


def identity(name) -> str:
    """Case-insensitive identity key of a name."""
    return str(name).lower()


def clean_names(seq) -> List[str]:
    """Stringifies, trims and drops blank entries."""
    out = []
    for x in seq:
        s = str(x).strip()
        if s:
            out.append(s)
    return out


def unique_names(seq) -> List[str]:
    """Drops case-insensitive duplicates, keeping the first spelling seen."""
    out, seen = [], set()
    for x in seq:
        k = identity(x)
        if k not in seen:
            seen.add(k)
            out.append(str(x))
    return out


def parse_names(text: str) -> List[str]:
    """One name per line; surrounding whitespace and blank lines are ignored."""
    return clean_names(text.splitlines())


@dataclass
class WheelState:
    """
    Everything that outlives a single spin.

    `names` belongs to the settings side, `drawn` (the History) to the spin
    orchestrator. Nothing else keeps its own copy of either list.
    """
    names: List[str] = field(default_factory=list)
    drawn: List[str] = field(default_factory=list)
    only_new: bool = False

    def normalize(self):
        """Trims and dedupes both lists and drops History entries that left the roster."""
        self.names = unique_names(clean_names(self.names))
        present = {identity(n) for n in self.names}
        self.drawn = [n for n in unique_names(clean_names(self.drawn)) if identity(n) in present]
        self.only_new = bool(self.only_new)
        return self

    def is_drawn(self, name) -> bool:
        key = identity(name)
        return any(identity(d) == key for d in self.drawn)

    def record_drawn(self, name) -> bool:
        """Appends a winner to History unless already present. Returns True if appended."""
        if self.is_drawn(name):
            return False
        self.drawn.append(str(name))
        return True

    def to_record(self) -> dict:
        return {"names": list(self.names), "drawn": list(self.drawn), "onlyNew": self.only_new}

    @classmethod
    def from_record(cls, record):
        """
        Builds a state from a loaded record, or returns None when the record
        does not have the expected shape (a list under "names").
        """
        if not isinstance(record, dict) or not isinstance(record.get("names"), list):
            return None
        drawn = record.get("drawn") or []
        if not isinstance(drawn, list):
            drawn = []
        state = cls(names=record["names"], drawn=drawn, only_new=bool(record.get("onlyNew")))
        return state.normalize()


# ========= SELECTION POOL =========

def eligible_indices(names, drawn, only_new) -> List[int]:
    """
    Absolute indices into `names` that may be drawn.

    With `only_new` off every index is eligible. With it on, names already in
    `drawn` are skipped. An empty result means there is nobody left to draw.
    """
    if not only_new:
        return list(range(len(names)))
    drawn_keys = {identity(d) for d in drawn}
    return [i for i, n in enumerate(names) if identity(n) not in drawn_keys]


def eligible_names(state: WheelState) -> List[str]:
    return [state.names[i] for i in eligible_indices(state.names, state.drawn, state.only_new)]

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class AttackSnapshot:
    """Minimal immutable snapshot of repeated-key attack progress."""

    state_version: int
    complete: bool
    keysize: int
    candidate_index: int
    candidate_count: int
    column_index: int

    # One entry per key position; None until that column is solved.
    key: Tuple[Optional[int], ...] = field(default_factory=tuple)
    column_scores: Tuple[Optional[float], ...] = field(default_factory=tuple)
    ranked_keysizes: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def solved_columns(self) -> int:
        return sum(1 for b in self.key if b is not None)

"""Splitting a manually entered grocery total across the roster."""

from dataclasses import dataclass

from saladplanner.normalize.keys import round_money


@dataclass
class CostSplit:
    """Per-person share of a grocery bill."""

    total: float
    participant_count: int
    share: float | None

    @property
    def has_split(self) -> bool:
        return self.share is not None


def split_cost(total: float, participant_count: int) -> CostSplit:
    """
    Divide `total` evenly between the participants.

    There is no share when nobody is enrolled or the total is not positive.
    Negative totals are the caller's responsibility to reject.
    """
    if participant_count <= 0 or total <= 0:
        return CostSplit(total=total, participant_count=max(participant_count, 0), share=None)
    return CostSplit(
        total=total,
        participant_count=participant_count,
        share=round_money(total / participant_count),
    )

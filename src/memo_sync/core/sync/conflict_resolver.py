"""Conflict resolution between two copies of the Record.

Last-writer-wins over the whole record: the revision counter is the
primary ordering signal, the body timestamp breaks revision ties, and an
exact tie goes to the first argument. There is no field-level merge.
"""

from enum import Enum

from ...models.record import Record


class ResolutionReason(str, Enum):
    """Which signal decided a resolution."""

    REVISION = "revision"
    TIMESTAMP = "timestamp"
    TIE = "tie"


def explain(a: Record, b: Record) -> ResolutionReason:
    """Return the signal that separates ``a`` and ``b``."""
    if a.revision != b.revision:
        return ResolutionReason.REVISION
    if a.body_updated_at != b.body_updated_at:
        return ResolutionReason.TIMESTAMP
    return ResolutionReason.TIE


def resolve(a: Record, b: Record) -> Record:
    """Pick the newer of two records.

    Args:
        a: First record (wins exact ties)
        b: Second record

    Returns:
        ``a`` or ``b`` itself, unmodified
    """
    if a.revision != b.revision:
        return a if a.revision > b.revision else b
    if a.body_updated_at != b.body_updated_at:
        return a if a.body_updated_at > b.body_updated_at else b
    return a


def describe_resolution(local: Record, remote: Record) -> str:
    """Describe the outcome of ``resolve(local, remote)`` for logging."""
    winner = "local" if resolve(local, remote) is local else "remote"
    reason = explain(local, remote)
    return (
        f"{winner} wins by {reason.value} "
        f"(local rev={local.revision}, remote rev={remote.revision})"
    )

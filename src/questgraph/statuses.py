"""
Requirement status vocabulary.

Task requirement and fail-condition statuses come from the set
{active, accept, accepted, complete, completed, failed}, compared
case-insensitively. An empty list means "target must be completed".
"""

from enum import Enum

ACTIVE_STATUSES = frozenset({"active", "accept", "accepted"})
COMPLETE_STATUSES = frozenset({"complete", "completed"})
FAILED_STATUSES = frozenset({"failed"})


class RequirementKind(str, Enum):
    """How a requirement edge is interpreted by the engine."""

    COMPLETE = "complete"  # target completed (default)
    ACTIVE_ONLY = "active_only"  # target in progress, or already completed
    FAILED_ONLY = "failed_only"  # target failed; signals an alternative
    MIXED = "mixed"  # several of the above accepted


def normalize_statuses(statuses: list[str] | None) -> set[str]:
    return {status.lower() for status in statuses or []}


def has_any_status(statuses: list[str] | None, values: frozenset[str]) -> bool:
    return bool(normalize_statuses(statuses) & values)


def is_active_only(statuses: list[str] | None) -> bool:
    normalized = normalize_statuses(statuses)
    has_active = bool(normalized & ACTIVE_STATUSES)
    has_other = bool(normalized & (COMPLETE_STATUSES | FAILED_STATUSES))
    return has_active and not has_other


def is_failed_only(statuses: list[str] | None) -> bool:
    normalized = normalize_statuses(statuses)
    return "failed" in normalized and not normalized & (ACTIVE_STATUSES | COMPLETE_STATUSES)


def requires_completion_or_active(statuses: list[str] | None) -> bool:
    """True for edges along which invalidation cascades.

    These are completion or active requirements that a failed target can
    never satisfy. A list that also accepts `failed` is met by the failure.
    """
    normalized = normalize_statuses(statuses)
    if not normalized:
        return True
    if normalized & FAILED_STATUSES:
        return False
    return bool(normalized & (COMPLETE_STATUSES | ACTIVE_STATUSES))


def has_complete_status(statuses: list[str] | None) -> bool:
    return has_any_status(statuses, COMPLETE_STATUSES)


def classify(statuses: list[str] | None) -> RequirementKind:
    normalized = normalize_statuses(statuses)
    if not normalized:
        return RequirementKind.COMPLETE
    if is_active_only(statuses):
        return RequirementKind.ACTIVE_ONLY
    if is_failed_only(statuses):
        return RequirementKind.FAILED_ONLY
    if normalized & FAILED_STATUSES or normalized & ACTIVE_STATUSES:
        return RequirementKind.MIXED
    return RequirementKind.COMPLETE

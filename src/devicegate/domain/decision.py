"""Gate policy — fingerprint + access list → outcome.

Precedence, in strict order:
  1. No usable fingerprint      → NO_SERVICE
  2. Fingerprint on block list  → BLOCK (wins over the allow list)
  3. Allow list non-empty       → ADMIT if listed, else NO_SERVICE
  4. Allow list empty           → ADMIT (default-open)

Matching is exact, case-sensitive string equality on cleaned entries.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from devicegate.domain.access_list import AccessList, clean_entry
from devicegate.domain.fingerprint import FingerprintFailure


class Outcome(StrEnum):
    """Terminal result of one evaluation."""

    ADMIT = "admit"
    BLOCK = "block"
    NO_SERVICE = "no_service"


class DecisionReason(StrEnum):
    """Which rule produced the outcome. Informational only."""

    FINGERPRINT_INVALID = "fingerprint_invalid"
    BLOCKED_MATCH = "blocked_match"
    ALLOWED_MATCH = "allowed_match"
    NOT_IN_ALLOW_LIST = "not_in_allow_list"
    DEFAULT_OPEN = "default_open"
    INTERNAL_ERROR = "internal_error"


class Decision(BaseModel):
    model_config = {"frozen": True}

    outcome: Outcome
    reason: DecisionReason


def _matches(fingerprint: str, entries: tuple[str, ...]) -> bool:
    return any(clean_entry(entry) == fingerprint for entry in entries)


def evaluate_policy(fingerprint: str | FingerprintFailure, access_list: AccessList) -> Decision:
    """Apply the gate precedence and report the rule that fired."""
    if isinstance(fingerprint, FingerprintFailure) or not fingerprint:
        return Decision(outcome=Outcome.NO_SERVICE, reason=DecisionReason.FINGERPRINT_INVALID)

    if _matches(fingerprint, access_list.blocked):
        return Decision(outcome=Outcome.BLOCK, reason=DecisionReason.BLOCKED_MATCH)

    # Entries that clean to nothing do not make an allow list non-empty.
    allowed = tuple(e for e in access_list.allowed if clean_entry(e))
    if allowed:
        if _matches(fingerprint, allowed):
            return Decision(outcome=Outcome.ADMIT, reason=DecisionReason.ALLOWED_MATCH)
        return Decision(outcome=Outcome.NO_SERVICE, reason=DecisionReason.NOT_IN_ALLOW_LIST)

    return Decision(outcome=Outcome.ADMIT, reason=DecisionReason.DEFAULT_OPEN)


def decide(fingerprint: str | FingerprintFailure, access_list: AccessList) -> Outcome:
    """Return only the outcome of :func:`evaluate_policy`."""
    return evaluate_policy(fingerprint, access_list).outcome

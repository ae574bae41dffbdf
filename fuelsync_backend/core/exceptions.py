# core/exceptions.py

"""
======================================================
PATH: core/exceptions.py
======================================================
LEDGER ERROR TAXONOMY

Single source of truth for every error the ledger services raise.

Rules:
- Every error carries a stable machine-readable CODE.
- Every code belongs to exactly one KIND:
    NOT_FOUND | INVALID_STATE | VALIDATION | POLICY_VIOLATION | CONFLICT
- Human-readable messages are rendered from ERROR_CATALOG.
  Call sites pass a code + context values, never free text.

Views map KIND -> HTTP status (see core/api.py).
"""

from __future__ import annotations

from typing import Any


# =========================================================
# KINDS
# =========================================================
KIND_NOT_FOUND = "NOT_FOUND"
KIND_INVALID_STATE = "INVALID_STATE"
KIND_VALIDATION = "VALIDATION"
KIND_POLICY_VIOLATION = "POLICY_VIOLATION"
KIND_CONFLICT = "CONFLICT"


# =========================================================
# CATALOG: code -> (kind, message template)
# =========================================================
ERROR_CATALOG: dict[str, tuple[str, str]] = {
    # Not found
    "STATION_NOT_FOUND": (KIND_NOT_FOUND, "Station {station_id} not found"),
    "NOZZLE_NOT_FOUND": (KIND_NOT_FOUND, "Nozzle {nozzle_id} not found"),
    "READING_NOT_FOUND": (KIND_NOT_FOUND, "Reading {reading_id} not found"),
    "CREDITOR_NOT_FOUND": (KIND_NOT_FOUND, "Creditor {creditor_id} not found"),
    "SETTLEMENT_NOT_FOUND": (KIND_NOT_FOUND, "Settlement {settlement_id} not found"),
    "PRICE_NOT_SET": (
        KIND_NOT_FOUND,
        "No {fuel_type} price is effective on {on_date} for this station",
    ),
    # Invalid state
    "NOZZLE_INACTIVE": (
        KIND_INVALID_STATE,
        "Nozzle {nozzle_id} is {status}; readings can only be recorded on active nozzles",
    ),
    "CREDITOR_INACTIVE": (KIND_INVALID_STATE, "Creditor {creditor_id} is inactive"),
    "CREDITOR_FLAGGED": (
        KIND_INVALID_STATE,
        "Creditor {creditor_id} is flagged and cannot take new credit",
    ),
    # Validation
    "READING_MUST_INCREASE": (
        KIND_VALIDATION,
        "Reading {reading_value} must be at least the previous reading {previous_reading}",
    ),
    "PAYMENT_SPLIT_MISMATCH": (
        KIND_VALIDATION,
        "Payment split {paid} does not match sale total {total_amount}",
    ),
    "NEGATIVE_AMOUNT": (KIND_VALIDATION, "{field} cannot be negative"),
    "INVALID_AMOUNT": (KIND_VALIDATION, "{field} must be greater than zero"),
    "INVALID_PRICE": (KIND_VALIDATION, "Price must be greater than zero"),
    "INVALID_DATE_RANGE": (KIND_VALIDATION, "start_date {start_date} is after end_date {end_date}"),
    "READING_EXCEEDS_NEXT": (
        KIND_VALIDATION,
        "Reading {reading_value} exceeds the next recorded reading {next_reading} on {next_date}",
    ),
    "READING_BEFORE_INITIAL": (
        KIND_VALIDATION,
        "Reading date {reading_date} is before the nozzle's initial reading on {initial_date}",
    ),
    "CREDITOR_REQUIRED": (
        KIND_VALIDATION,
        "A creditor is required when the sale has a credit component",
    ),
    "READING_CHAIN_CONFLICT": (
        KIND_VALIDATION,
        "Inserting this reading would change the total of reading {successor_id} "
        "by {delta}, which its cash and online amounts cannot absorb",
    ),
    # Policy violations
    "BACKDATE_LIMIT_EXCEEDED": (
        KIND_POLICY_VIOLATION,
        "Readings can only be backdated {backdated_days} days; {reading_date} is {days_back} days ago",
    ),
    "READING_DATE_IN_FUTURE": (
        KIND_POLICY_VIOLATION,
        "Reading date {reading_date} is in the future",
    ),
    "CREDIT_LIMIT_EXCEEDED": (
        KIND_POLICY_VIOLATION,
        "Credit of {amount} exceeds the limit {credit_limit} (current balance {current_balance})",
    ),
    "SHIFT_REQUIRED": (
        KIND_POLICY_VIOLATION,
        "An open shift is required to record readings at this station",
    ),
    "CREDIT_FEATURE_DISABLED": (
        KIND_POLICY_VIOLATION,
        "Credit sales are not enabled for this station's plan",
    ),
    # Conflicts
    "SETTLEMENT_FINALIZED": (
        KIND_CONFLICT,
        "Settlement for {settlement_date} is already approved and cannot be replaced",
    ),
    "READING_SETTLED": (
        KIND_CONFLICT,
        "Reading {reading_id} is covered by a settlement and cannot be changed",
    ),
    "PRICE_IN_USE": (
        KIND_CONFLICT,
        "The {fuel_type} price effective {effective_from} already priced readings; "
        "add a new effective date instead",
    ),
    "INITIAL_READING_EXISTS": (
        KIND_CONFLICT,
        "Nozzle {nozzle_id} already has readings; only its first reading can be initial",
    ),
    "SETTLEMENT_IN_PROGRESS": (
        KIND_CONFLICT,
        "Another settlement for {settlement_date} was recorded at the same time; retry",
    ),
}


# =========================================================
# EXCEPTIONS
# =========================================================
class LedgerError(Exception):
    """
    Base class for all ledger errors.

    Usage:
        raise ledger_error("NOZZLE_INACTIVE", nozzle_id=n.id, status=n.status)
    """

    kind: str = ""

    def __init__(self, code: str, **context: Any):
        if code not in ERROR_CATALOG:
            raise KeyError(f"Unknown ledger error code: {code}")

        self.code = code
        self.context = context
        self.kind = ERROR_CATALOG[code][0]
        super().__init__(self.message)

    @property
    def message(self) -> str:
        template = ERROR_CATALOG[self.code][1]
        try:
            return template.format(**self.context)
        except (KeyError, IndexError):
            return template

    def as_dict(self) -> dict:
        return {
            "detail": self.message,
            "code": self.code,
            "kind": self.kind,
            "context": {k: _plain(v) for k, v in self.context.items()},
        }


class NotFoundError(LedgerError):
    pass


class InvalidStateError(LedgerError):
    pass


class LedgerValidationError(LedgerError):
    pass


class PolicyViolationError(LedgerError):
    pass


class ConflictError(LedgerError):
    pass


KIND_CLASSES: dict[str, type[LedgerError]] = {
    KIND_NOT_FOUND: NotFoundError,
    KIND_INVALID_STATE: InvalidStateError,
    KIND_VALIDATION: LedgerValidationError,
    KIND_POLICY_VIOLATION: PolicyViolationError,
    KIND_CONFLICT: ConflictError,
}


def ledger_error(code: str, **context: Any) -> LedgerError:
    """
    Build the exception subclass matching the code's kind.
    """
    if code not in ERROR_CATALOG:
        raise KeyError(f"Unknown ledger error code: {code}")
    cls = KIND_CLASSES[ERROR_CATALOG[code][0]]
    return cls(code, **context)


def _plain(value):
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)

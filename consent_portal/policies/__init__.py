"""Row-level authorization policies."""

from consent_portal.policies.row_level import (
    POLICIES,
    PolicyViolationError,
    TablePolicy,
    caller_is_admin,
    policy_for,
)

__all__ = [
    "POLICIES",
    "PolicyViolationError",
    "TablePolicy",
    "caller_is_admin",
    "policy_for",
]

"""
Lender-specific priority actions for a loan, derived from its missing requirement names.
"""
from __future__ import annotations

from typing import Iterable, Optional

MAX_ACTIONS = 5

# (keywords, action): action applies when any missing name contains any keyword (case-insensitive)
_BASE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("insurance policy",), "Contact insurance agent immediately - insurance binder required for all lenders"),
    (("appraisal",), "Order appraisal through approved AMC - call to confirm valuation expectations"),
)

_FUNDER_RULES: dict[str, tuple[tuple[tuple[str, ...], str], ...]] = {
    "kiavi": (
        (("authorization", "disclosure"), "URGENT: Access Kiavi portal and download signed Authorization & Disclosure forms"),
        (("title",), "Send Kiavi title requirements immediately - specific ALTA endorsements required"),
    ),
    "ahl": (
        (("entity resolution", "business purpose"), "CRITICAL: Download AHL-specific Entity Resolution and Business Purpose forms from portal"),
        (("piti reserves",), "Document 6 months PITI reserves - AHL requires verified proof of liquidity"),
        (("vom",), "Request 12-month payment history VOM from current lender - AHL requirement"),
    ),
    "visio": (
        (("visio financial services", "broker submission"), "Complete VFS Loan Application and Broker Submission Form immediately"),
        (("plaid",), "Set up Plaid connection for proof of liquidity - Visio requires automated verification"),
        (("rent collection",), "Provide rent roll and collection proof if lease rents exceed market rates"),
    ),
    "roc_capital": (
        (("background",), "IMMEDIATE: Complete ROC Capital background/credit check link - cannot proceed without"),
        (("ach consent",), "Execute ACH Consent Form for ROC Capital funding"),
        (("property tax",), "Pull property tax document from county website for ROC submission"),
        (("rent collection",), "Provide 3 months rent collection proof for all units - ROC requirement"),
        (("security deposit",), "Document security deposit receipts for leases under 30 days old"),
    ),
    "velocity": (
        (("title",), "Coordinate with title agent for Velocity-specific requirements"),
    ),
}

# Appended for the funder regardless of what is missing
_FUNDER_STANDING_ACTIONS = {
    "kiavi": "Confirm AMC appraisal meets Kiavi valuation guidelines",
    "ahl": "Verify all mortgage statements match credit report for AHL background check",
    "visio": "Submit Broker W9 for Visio processing",
}


def _any_missing(missing: list[str], keywords: tuple[str, ...]) -> bool:
    return any(k in name for name in missing for k in keywords)


def suggest_next_actions(
    funder_key: Optional[str],
    loan_purpose: Optional[str],
    missing: Iterable[str],
    limit: int = MAX_ACTIONS,
) -> list[str]:
    """funder_key is the catalog key ('kiavi', 'roc_capital', ...) or None for unknown funders."""
    missing_lower = [m.lower() for m in missing]
    actions = [action for keywords, action in _BASE_RULES if _any_missing(missing_lower, keywords)]

    if funder_key is None:
        actions.append("Review lender-specific requirements for this funder")
    else:
        for keywords, action in _FUNDER_RULES.get(funder_key, ()):
            if _any_missing(missing_lower, keywords):
                actions.append(action)
        purpose = (loan_purpose or "").lower()
        if funder_key == "kiavi" and "refinance" in purpose and _any_missing(missing_lower, ("payoff",)):
            actions.append("Request payoff statement from current lender with per diem interest")
        standing = _FUNDER_STANDING_ACTIONS.get(funder_key)
        if standing:
            actions.append(standing)

    if not actions:
        actions.append("All major documents appear complete - review for final submission readiness")
    return actions[:limit]

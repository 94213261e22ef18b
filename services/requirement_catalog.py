"""
Document requirements for DSCR loans, by funder.
Call build_default_catalog() to get a fresh RequirementCatalog; nothing here is shared mutable state.
"""
from __future__ import annotations

from typing import Any

from schemas.requirement import Requirement
from services.requirements import RequirementCatalog

COMMON_REQUIREMENTS: tuple[dict[str, Any], ...] = (
    # Borrower & entity
    {"id": "drivers_license", "name": "Driver's License (front and back)", "category": "borrower_entity"},
    {"id": "articles_org", "name": "Articles of Organization / Incorporation", "category": "borrower_entity"},
    {"id": "operating_agreement", "name": "Operating Agreement", "category": "borrower_entity"},
    {"id": "good_standing", "name": "Certificate of Good Standing", "category": "borrower_entity"},
    {"id": "ein_letter", "name": "EIN Letter from IRS", "category": "borrower_entity"},
    # Financials
    {"id": "bank_statements", "name": "2 most recent Bank Statements", "category": "financials"},
    {"id": "voided_check", "name": "Voided Check", "category": "financials"},
    # Property
    {"id": "property_ownership", "name": "HUD (or Other Documentation of Property Ownership)", "category": "property"},
    {"id": "current_leases", "name": "All Current Leases", "category": "property"},
    # Appraisal
    {"id": "appraisal", "name": "Appraisal", "category": "appraisal"},
    # Insurance
    {"id": "insurance_policy", "name": "Insurance Policy", "category": "insurance"},
    {"id": "insurance_contact", "name": "Insurance Agent Contact Info", "category": "insurance"},
    {"id": "flood_policy", "name": "Flood Policy (If applicable)", "category": "insurance", "required": False},
    {"id": "flood_contact", "name": "Flood Insurance Agent Contact Info", "category": "insurance", "required": False},
    # Title
    {"id": "title_contact", "name": "Title Agent Contact Info", "category": "title"},
    {"id": "preliminary_title", "name": "Preliminary Title", "category": "title"},
    {"id": "closing_protection_letter", "name": "Closing Protection Letter", "category": "title"},
    {"id": "wire_instructions", "name": "Wire Instructions", "category": "title"},
    # Payoff (refinances)
    {"id": "lender_contact", "name": "Current Lender Contact Info", "category": "payoff", "required": False},
    {"id": "payoff_statement", "name": "Payoff Statement", "category": "payoff", "required": False},
)

FUNDER_REQUIREMENTS: dict[str, tuple[dict[str, Any], ...]] = {
    "kiavi": (
        {"id": "kiavi_auth_form", "name": "Borrowing Authorization Form", "category": "lender_specific"},
        {"id": "kiavi_disclosure", "name": "Disclosure Form", "category": "lender_specific"},
    ),
    "visio": (
        {"id": "visio_application", "name": "Visio Financial Services Loan Application (from Visio Portal)", "category": "lender_specific"},
        {"id": "visio_broker_submission", "name": "Broker Submission Form (from Visio Portal)", "category": "lender_specific"},
        {"id": "visio_broker_w9", "name": "Broker W9 Form (from Visio Portal)", "category": "lender_specific"},
        {"id": "visio_plaid_liquidity", "name": "Proof of Liquidity via Plaid Connection (from loan analysis email)", "category": "lender_specific"},
        {
            "id": "visio_rent_collection",
            "name": "Proof of Rent Collection Deposits",
            "category": "lender_specific",
            "required": False,
            "description": "Required if lease rents exceed market rents",
        },
        {"id": "visio_asset_verification", "name": "Asset Verification Documentation", "category": "lender_specific"},
    ),
    "roc_capital": (
        {"id": "roc_background", "name": "ROC Capital Background/Credit Authorization", "category": "lender_specific"},
        {"id": "roc_ach_consent", "name": "ROC ACH Consent Form", "category": "lender_specific"},
        {"id": "roc_property_tax", "name": "Current Property Tax Bill", "category": "lender_specific"},
        {"id": "roc_liquidity", "name": "Proof of Liquidity and Down Payment", "category": "lender_specific"},
        {"id": "roc_business_purpose", "name": "ROC Business Purpose Statement", "category": "lender_specific"},
        {
            "id": "roc_rent_collection",
            "name": "3 Months Rent Collection History",
            "category": "lender_specific",
            "required": False,
            "description": "Required for all rental units",
        },
        {
            "id": "roc_security_deposits",
            "name": "Security Deposit Documentation",
            "category": "lender_specific",
            "required": False,
            "description": "Required for new leases under 30 days",
        },
    ),
    "ahl": (
        {"id": "ahl_entity_resolution", "name": "Entity Resolution (AHL template)", "category": "lender_specific"},
        {"id": "ahl_business_purpose", "name": "Borrower's Statement of Business Purpose (AHL template)", "category": "lender_specific"},
        {"id": "ahl_liquidity_proof", "name": "Proof of Liquidity / Funds to Close", "category": "lender_specific"},
        {
            "id": "ahl_piti_reserves",
            "name": "6 Months PITI Reserves",
            "category": "lender_specific",
            "description": "Must be documented",
        },
        {"id": "ahl_vom_12mo", "name": "VOM showing 12 months payment history", "category": "lender_specific", "required": False},
        {
            "id": "ahl_mortgage_statements",
            "name": "2 Recent Mortgage Statements",
            "category": "lender_specific",
            "required": False,
            "description": "For any open accounts on background check",
        },
        {"id": "ahl_preliminary_title", "name": "Preliminary Title Report / Title Commitment", "category": "title"},
        {"id": "ahl_closing_protection", "name": "Closing Protection Letter (CPL)", "category": "title"},
        # Same name as the common entry; the resolver keeps this one
        {"id": "ahl_wire_instructions", "name": "Wire Instructions", "category": "title"},
    ),
    "velocity": (
        {"id": "velocity_app", "name": "Velocity Loan Application", "category": "lender_specific"},
        {"id": "velocity_borrower_cert", "name": "Borrower Certification Form", "category": "lender_specific"},
        {"id": "velocity_liquidity", "name": "Proof of Liquidity Documentation", "category": "lender_specific"},
        {"id": "velocity_piti_reserves", "name": "PITI Reserves Documentation", "category": "lender_specific"},
        {"id": "velocity_asset_verification", "name": "Asset Verification Form", "category": "lender_specific"},
    ),
}

FUNDER_ALIASES = {
    "roc": "roc_capital",
    "roc360": "roc_capital",
    "american heritage lending": "ahl",
    "visio lending": "visio",
    "visio financial services": "visio",
    "velocity mortgage capital": "velocity",
}


def _common(spec: dict[str, Any]) -> Requirement:
    return Requirement(**spec)


def _funder_specific(spec: dict[str, Any]) -> Requirement:
    return Requirement(**spec, lender_specific=True)


def build_default_catalog() -> RequirementCatalog:
    return RequirementCatalog(
        common=[_common(s) for s in COMMON_REQUIREMENTS],
        by_funder={
            funder: [_funder_specific(s) for s in specs]
            for funder, specs in FUNDER_REQUIREMENTS.items()
        },
        aliases=FUNDER_ALIASES,
    )

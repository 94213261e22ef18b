"""
Requirement catalog and resolver.

A catalog holds the requirements common to every funder plus per-funder tables.
The resolver maps a free-form lender name to the ordered checklist for that lender:
lender-specific entries first, then common entries, duplicates (by exact name) dropped.
Unknown lenders fall back to the common list without raising.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Optional

from schemas.requirement import Requirement, RequirementGroup
from services.errors import InvalidInputError

logger = logging.getLogger(__name__)

CATEGORY_ORDER = (
    "borrower_entity",
    "financials",
    "property",
    "appraisal",
    "insurance",
    "title",
    "payoff",
    "lender_specific",
)

CATEGORY_DISPLAY_NAMES = {
    "borrower_entity": "Borrower & Entity Documents",
    "financials": "Financial Documents",
    "property": "Property Ownership",
    "appraisal": "Appraisal",
    "insurance": "Insurance",
    "title": "Title",
    "payoff": "Payoff Information",
    "lender_specific": "Lender-Specific Documents",
}


def normalize_funder_key(name: str) -> str:
    """'Roc Capital' / 'roc-capital' / ' ROC_CAPITAL ' -> 'roc_capital'."""
    return re.sub(r"[\s\-]+", "_", name.strip().lower())


def category_display_name(category: str) -> str:
    return CATEGORY_DISPLAY_NAMES.get(category, category)


class RequirementCatalog:
    """Immutable lookup tables; build one explicitly and hand it to a resolver."""

    def __init__(
        self,
        common: Iterable[Requirement],
        by_funder: Mapping[str, Iterable[Requirement]],
        aliases: Optional[Mapping[str, str]] = None,
    ):
        self._common = tuple(common)
        self._by_funder = {normalize_funder_key(k): tuple(v) for k, v in by_funder.items()}
        self._aliases = {normalize_funder_key(k): normalize_funder_key(v) for k, v in (aliases or {}).items()}

    @property
    def common(self) -> tuple[Requirement, ...]:
        return self._common

    @property
    def funders(self) -> list[str]:
        return sorted(self._by_funder)

    def funder_key(self, lender_name: str) -> Optional[str]:
        """Return the known funder key for a lender name, or None if unknown."""
        key = normalize_funder_key(lender_name)
        key = self._aliases.get(key, key)
        return key if key in self._by_funder else None

    def lender_specific(self, funder_key: str) -> tuple[Requirement, ...]:
        return self._by_funder.get(funder_key, ())


class RequirementResolver:
    def __init__(self, catalog: RequirementCatalog):
        self.catalog = catalog

    def resolve(self, lender_name: str) -> list[Requirement]:
        if not isinstance(lender_name, str):
            raise InvalidInputError("lender name is required to resolve requirements")
        funder_key = self.catalog.funder_key(lender_name)
        if funder_key is None:
            logger.debug("Unknown funder %r; using common requirements", lender_name)
            return list(self.catalog.common)

        seen: set[str] = set()
        resolved: list[Requirement] = []
        for req in (*self.catalog.lender_specific(funder_key), *self.catalog.common):
            if req.name in seen:
                continue
            seen.add(req.name)
            resolved.append(req)
        return resolved

    def resolve_names(self, lender_name: str) -> list[str]:
        return [r.name for r in self.resolve(lender_name)]

    def resolve_grouped(self, lender_name: str) -> list[RequirementGroup]:
        return group_requirements(self.resolve(lender_name))


def group_requirements(requirements: Iterable[Requirement]) -> list[RequirementGroup]:
    """Group by category in display order; empty categories are left out, item order kept."""
    buckets: dict[str, list[Requirement]] = {}
    for req in requirements:
        buckets.setdefault(req.category, []).append(req)
    return [
        RequirementGroup(category=cat, display_name=category_display_name(cat), requirements=buckets[cat])
        for cat in CATEGORY_ORDER
        if cat in buckets
    ]

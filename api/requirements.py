from typing import Any

from fastapi import APIRouter, Depends

from api.deps import get_resolver
from schemas.requirement import Requirement, RequirementGroup
from services.requirements import CATEGORY_ORDER, RequirementResolver, category_display_name

router = APIRouter(prefix="/api/requirements", tags=["requirements"])


def _requirement_to_response(r: Requirement) -> dict[str, Any]:
    return r.model_dump(by_alias=True)


def _group_to_response(g: RequirementGroup) -> dict[str, Any]:
    return {
        "category": g.category,
        "displayName": g.display_name,
        "requirements": [_requirement_to_response(r) for r in g.requirements],
    }


@router.get("/categories")
async def list_categories():
    return [{"category": c, "displayName": category_display_name(c)} for c in CATEGORY_ORDER]


@router.get("/funders")
async def list_funders(resolver: RequirementResolver = Depends(get_resolver)):
    return resolver.catalog.funders


@router.get("/{funder}")
async def get_requirements(funder: str, resolver: RequirementResolver = Depends(get_resolver)):
    """Resolved checklist for a lender name; unknown lenders get the common list."""
    requirements = resolver.resolve(funder)
    return {
        "funder": funder,
        "funderKey": resolver.catalog.funder_key(funder),
        "requirements": [_requirement_to_response(r) for r in requirements],
        "groups": [_group_to_response(g) for g in resolver.resolve_grouped(funder)],
    }

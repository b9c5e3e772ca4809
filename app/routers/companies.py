# =============================================================================
# app/routers/companies.py - Company Directory Endpoints
# =============================================================================
# Reads are public and addressed by slug. Writes are addressed by id and
# need a system admin or a company owner/admin; creating a company needs
# the manage_company_profile permission.
# =============================================================================

from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import get_current_user_record, get_optional_user_record, require_permission
from app.dependencies import PaginationDep
from app.exceptions import ForbiddenError
from core.models.company import (
    CompanyCreate,
    CompanyList,
    CompanyMemberCreate,
    CompanyMemberResponse,
    CompanyMemberUpdate,
    CompanyResponse,
    CompanyUpdate,
)
from core.services.company_service import CompanyService

router = APIRouter()


def _can_manage(company_id: str, user: dict[str, Any] | None) -> bool:
    if not user:
        return False
    try:
        CompanyService.ensure_can_manage(company_id, user)
    except ForbiddenError:
        return False
    return True


# =============================================================================
# Companies
# =============================================================================

@router.get("", response_model=CompanyList)
async def list_companies(
    pagination: PaginationDep,
    search: Annotated[str | None, Query(max_length=100, description="Match company name or industry")] = None,
):
    return CompanyService.list_companies(page=pagination.page, limit=pagination.limit, search=search)


@router.get("/{slug}")
async def get_company(
    slug: Annotated[str, Path(description="Company slug")],
    viewer: Optional[dict[str, Any]] = Depends(get_optional_user_record),
):
    """
    Get a company profile with its public members.

    Company admins also see private members and get can_edit=true.
    """
    company = CompanyService.get_by_slug(slug)
    can_edit = _can_manage(str(company["id"]), viewer)
    return {
        "company": CompanyResponse(**company),
        "members": CompanyService.list_members(str(company["id"]), include_private=can_edit),
        "can_edit": can_edit,
    }


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    request: CompanyCreate,
    record: dict[str, Any] = Depends(require_permission("manage_company_profile")),
):
    """Create a company; the creator becomes its admin member."""
    return CompanyService.create_company(request, creator_id=str(record["id"]))


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: Annotated[UUID, Path(description="Company UUID")],
    request: CompanyUpdate,
    record: dict[str, Any] = Depends(get_current_user_record),
):
    CompanyService.ensure_can_manage(str(company_id), record)
    return CompanyService.update_company(str(company_id), request)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: Annotated[UUID, Path(description="Company UUID")],
    record: dict[str, Any] = Depends(get_current_user_record),
):
    CompanyService.ensure_can_manage(str(company_id), record)
    CompanyService.delete_company(str(company_id))


# =============================================================================
# Members
# =============================================================================

@router.get("/{company_id}/members")
async def list_members(
    company_id: Annotated[UUID, Path(description="Company UUID")],
    viewer: Optional[dict[str, Any]] = Depends(get_optional_user_record),
):
    include_private = _can_manage(str(company_id), viewer)
    return {"members": CompanyService.list_members(str(company_id), include_private=include_private)}


@router.post(
    "/{company_id}/members",
    response_model=CompanyMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    company_id: Annotated[UUID, Path(description="Company UUID")],
    request: CompanyMemberCreate,
    record: dict[str, Any] = Depends(get_current_user_record),
):
    CompanyService.ensure_can_manage(str(company_id), record)
    return CompanyService.add_member(str(company_id), request, added_by=str(record["id"]))


@router.patch("/{company_id}/members/{user_id}", response_model=CompanyMemberResponse)
async def update_member(
    company_id: Annotated[UUID, Path(description="Company UUID")],
    user_id: Annotated[UUID, Path(description="Member's user UUID")],
    request: CompanyMemberUpdate,
    record: dict[str, Any] = Depends(get_current_user_record),
):
    CompanyService.ensure_can_manage(str(company_id), record)
    return CompanyService.update_member(str(company_id), str(user_id), request)


@router.delete("/{company_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    company_id: Annotated[UUID, Path(description="Company UUID")],
    user_id: Annotated[UUID, Path(description="Member's user UUID")],
    record: dict[str, Any] = Depends(get_current_user_record),
):
    """Company admins can remove anyone; members can remove themselves."""
    if str(user_id) != str(record["id"]):
        CompanyService.ensure_can_manage(str(company_id), record)
    CompanyService.remove_member(str(company_id), str(user_id))

"""
api/routes/v1/companies.py -- Company routes for the Jobboard REST API.

Routes:
  POST   /companies           -- create company (admin)
  GET    /companies           -- list / search companies (public)
  GET    /companies/{handle}  -- company detail with jobs (public)
  PATCH  /companies/{handle}  -- partial update (admin)
  DELETE /companies/{handle}  -- delete company and its jobs (admin)

Search filters (query string, all optional):
  name          -- case-insensitive partial match
  minEmployees  -- num_employees >= value
  maxEmployees  -- num_employees <= value
Any other key, or minEmployees > maxEmployees, is a 400.
"""

from fastapi import APIRouter, Depends, Request

from api.models import (
    CompanyCreate,
    CompanyDetail,
    CompanyDetailResponse,
    CompanyListResponse,
    CompanyOut,
    CompanyResponse,
    CompanySearch,
    CompanyUpdate,
    DeletedResponse,
    parse_filters,
)
from auth.dependencies import require_admin
from board.models import Company
from board.store import BoardStore

router = APIRouter()


@router.post("/companies", response_model=CompanyResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_company(request: Request, body: CompanyCreate) -> CompanyResponse:
    """Register a new company. The handle becomes its permanent key."""
    store: BoardStore = request.app.state.board_store
    company = store.create_company(
        Company(
            handle=body.handle,
            name=body.name,
            description=body.description,
            num_employees=body.num_employees,
            logo_url=body.logo_url,
        )
    )
    return CompanyResponse(company=CompanyOut.from_domain(company))


@router.get("/companies", response_model=CompanyListResponse)
def list_companies(request: Request) -> CompanyListResponse:
    """Return all companies, or those matching the query-string filters."""
    store: BoardStore = request.app.state.board_store
    filters = parse_filters(request, CompanySearch)
    companies = store.find_companies(filters)
    return CompanyListResponse(companies=[CompanyOut.from_domain(c) for c in companies])


@router.get("/companies/{handle}", response_model=CompanyDetailResponse)
def get_company(request: Request, handle: str) -> CompanyDetailResponse:
    """Return one company including its jobs."""
    store: BoardStore = request.app.state.board_store
    return CompanyDetailResponse(company=CompanyDetail.from_domain(store.get_company(handle)))


@router.patch("/companies/{handle}", response_model=CompanyResponse, dependencies=[Depends(require_admin)])
def update_company(request: Request, handle: str, body: CompanyUpdate) -> CompanyResponse:
    """Update name, description, numEmployees or logoUrl.

    Only the keys present in the body are written; an explicit null clears
    a nullable column.
    """
    store: BoardStore = request.app.state.board_store
    data = body.model_dump(by_alias=True, exclude_unset=True)
    company = store.update_company(handle, data)
    return CompanyResponse(company=CompanyOut.from_domain(company))


@router.delete("/companies/{handle}", response_model=DeletedResponse, dependencies=[Depends(require_admin)])
def delete_company(request: Request, handle: str) -> DeletedResponse:
    store: BoardStore = request.app.state.board_store
    store.remove_company(handle)
    return DeletedResponse(deleted=handle)

"""
api/routes/v1/jobs.py -- Job posting routes for the Jobboard REST API.

Routes:
  POST   /jobs           -- create job (admin)
  GET    /jobs           -- list / search jobs (public)
  GET    /jobs/{job_id}  -- job detail with company (public)
  PATCH  /jobs/{job_id}  -- partial update of title/salary/equity (admin)
  DELETE /jobs/{job_id}  -- delete job (admin)

Search filters (query string, all optional):
  title      -- case-insensitive partial match
  minSalary  -- salary >= value
  hasEquity  -- true: only jobs with equity > 0; false: no equity filter
"""

from fastapi import APIRouter, Depends, Request

from api.models import (
    DeletedResponse,
    JobCreate,
    JobDetail,
    JobDetailResponse,
    JobListResponse,
    JobOut,
    JobResponse,
    JobSearch,
    JobUpdate,
    parse_filters,
)
from auth.dependencies import require_admin
from board.models import Job
from board.store import BoardStore

# Auth policy:
# - GET routes are public so anonymous visitors can browse postings.
# - Every mutation requires an admin identity (require_admin).
router = APIRouter()


@router.post("/jobs", response_model=JobResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_job(request: Request, body: JobCreate) -> JobResponse:
    store: BoardStore = request.app.state.board_store
    job = store.create_job(
        Job(
            title=body.title,
            salary=body.salary,
            equity=body.equity,
            company_handle=body.company_handle,
        )
    )
    return JobResponse(job=JobOut.from_domain(job))


@router.get("/jobs", response_model=JobListResponse)
def list_jobs(request: Request) -> JobListResponse:
    """Return all jobs, or those matching the query-string filters."""
    store: BoardStore = request.app.state.board_store
    filters = parse_filters(request, JobSearch)
    return JobListResponse(jobs=[JobOut.from_domain(j) for j in store.find_jobs(filters)])


@router.get("/jobs/{job_id}", response_model=JobDetailResponse)
def get_job(request: Request, job_id: int) -> JobDetailResponse:
    store: BoardStore = request.app.state.board_store
    return JobDetailResponse(job=JobDetail.from_domain(store.get_job(job_id)))


@router.patch("/jobs/{job_id}", response_model=JobResponse, dependencies=[Depends(require_admin)])
def update_job(request: Request, job_id: int, body: JobUpdate) -> JobResponse:
    store: BoardStore = request.app.state.board_store
    job = store.update_job(job_id, body.model_dump(by_alias=True, exclude_unset=True))
    return JobResponse(job=JobOut.from_domain(job))


@router.delete("/jobs/{job_id}", response_model=DeletedResponse, dependencies=[Depends(require_admin)])
def delete_job(request: Request, job_id: int) -> DeletedResponse:
    store: BoardStore = request.app.state.board_store
    store.remove_job(job_id)
    return DeletedResponse(deleted=job_id)

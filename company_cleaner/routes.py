"""
Name: Clean API Controllers

Responsibilities:
  - Expose the POST /v1/clean endpoint
  - Validate requests and serialize responses using Pydantic models
  - Delegate the run to CleanPageUseCase (wired via the container)

Collaborators:
  - application.use_cases: CleanPageUseCase
  - container: get_clean_page_use_case dependency provider
  - exception_handlers: map CleanerError subclasses to HTTP responses

Constraints:
  - Only POST is accepted (FastAPI answers 405 for other methods)
  - Request/response fields are camelCase on the wire

Notes:
  - This module stays thin (controllers only)
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from .application.use_cases import CleanPageInput, CleanPageUseCase
from .container import get_clean_page_use_case
from .error_responses import OPENAPI_ERROR_RESPONSES

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)


# R: Request model for one cleaning run
class CleanReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    source_id: str = Field(
        ...,
        alias="sourceId",
        min_length=1,
        description="Id of the Notion page to clean",
    )
    company_name: str | None = Field(
        None,
        alias="companyName",
        max_length=200,
        description="Company name override (default: detected from the page)",
    )
    dry_run: bool = Field(
        False,
        alias="dryRun",
        description="Run the pipeline without writing to Notion",
    )


# R: Response model for one cleaning run
class CleanRes(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    destination_id: str | None = Field(None, serialization_alias="destinationId")
    section_count: int = Field(..., serialization_alias="sectionCount")
    bytes_written: int = Field(..., serialization_alias="bytesWritten")
    company: str
    block_count: int = Field(..., serialization_alias="blockCount")
    reused: bool = False


@router.post("/clean", response_model=CleanRes, tags=["clean"])
async def clean_page(
    req: CleanReq,
    use_case: CleanPageUseCase = Depends(get_clean_page_use_case),
):
    result = await use_case.execute(
        CleanPageInput(
            source_id=req.source_id,
            company_name=req.company_name,
            dry_run=req.dry_run,
        )
    )
    return CleanRes(
        destination_id=result.destination_id,
        section_count=result.section_count,
        bytes_written=result.bytes_written,
        company=result.company_name,
        block_count=result.block_count,
        reused=result.reused,
    )

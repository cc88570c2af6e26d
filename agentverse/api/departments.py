"""HTTP API for department workflows."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from agentverse.api.schemas import DepartmentRunResponse, MarketResearchRequest
from agentverse.departments.market_research import MarketResearchOptions
from agentverse.runtime import Runtime, get_runtime

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("")
async def list_departments(runtime: Runtime = Depends(get_runtime)) -> List[dict]:
    return [runtime.new_market_research_department().get_research_status()]


@router.post("/market-research/run", response_model=DepartmentRunResponse)
async def run_market_research(
    request: MarketResearchRequest,
    runtime: Runtime = Depends(get_runtime),
) -> JSONResponse:
    department = runtime.new_market_research_department()
    if not department.is_fully_staffed():
        missing = [role.value for role in department.missing_roles()]
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required agents: {', '.join(missing)}",
        )

    result = await department.conduct_market_research(
        request.query,
        MarketResearchOptions(
            target_market=request.target_market,
            competitors=request.competitors,
            timeframe=request.timeframe,
            budget=request.budget,
            specific_questions=request.specific_questions,
        ),
    )
    body = DepartmentRunResponse.from_result(result)
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )

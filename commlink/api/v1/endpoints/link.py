from __future__ import annotations

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from commlink.api.v1.utils import LinkRequest, build_orchestrator
from commlink.core.config import settings
from commlink.core.errors import InvalidParameterError
from commlink.domain.models import CommunicationEnvironment, LinkStatus, PerformanceSummary
from commlink.services.link_budget import sweep_points

logger = logging.getLogger(__name__)

router = APIRouter()


class SweepRequest(BaseModel):
    link: LinkRequest = Field(default_factory=LinkRequest)
    parameter: Literal["frequency", "power", "distance"]
    start: float
    end: float
    step: float = Field(..., gt=0)


class SweepPoint(BaseModel):
    value: float
    status: LinkStatus


class SweepResponse(BaseModel):
    parameter: str
    points: List[SweepPoint]


class OptimizeRequest(BaseModel):
    link: LinkRequest = Field(default_factory=LinkRequest)
    goal: Literal["range", "data_rate", "power_efficiency", "jammer_resistance"]
    target: Optional[float] = Field(None, gt=0, description="Range in km or data rate in Mbps")


class OptimizeResponse(BaseModel):
    goal: str
    environment: CommunicationEnvironment
    status: Optional[LinkStatus] = None


@router.post("/status", response_model=LinkStatus)
async def link_status(req: LinkRequest):
    return build_orchestrator(req).calculate_link_status()


@router.post("/performance", response_model=PerformanceSummary)
async def link_performance(req: LinkRequest):
    return build_orchestrator(req).calculate_performance()


@router.post("/sweep", response_model=SweepResponse)
async def link_sweep(req: SweepRequest):
    try:
        count = len(sweep_points(req.start, req.end, req.step))
    except InvalidParameterError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if count > settings.MAX_SWEEP_POINTS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Sweep has {count} points, the limit is {settings.MAX_SWEEP_POINTS}",
        )

    orchestrator = build_orchestrator(req.link)
    analyses = {
        "frequency": orchestrator.analyze_frequency_range,
        "power": orchestrator.analyze_power_range,
        "distance": orchestrator.analyze_distance_range,
    }
    try:
        results = analyses[req.parameter](req.start, req.end, req.step)
    except InvalidParameterError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    logger.info(f"Swept {req.parameter} over {len(results)} points")
    return SweepResponse(
        parameter=req.parameter,
        points=[SweepPoint(value=value, status=result) for value, result in results.items()],
    )


@router.post("/optimize", response_model=OptimizeResponse)
async def link_optimize(req: OptimizeRequest):
    orchestrator = build_orchestrator(req.link)
    if req.goal in ("range", "data_rate") and req.target is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Goal '{req.goal}' requires a target",
        )

    if req.goal == "range":
        optimized = orchestrator.optimize_for_range(req.target)
    elif req.goal == "data_rate":
        optimized = orchestrator.optimize_for_data_rate(req.target)
    elif req.goal == "power_efficiency":
        optimized = orchestrator.optimize_for_power_efficiency()
    else:
        optimized = orchestrator.optimize_for_jammer_resistance()

    # Suggested parameters can fall outside the supported ranges; no status then
    trial = orchestrator.what_if()
    predicted = trial.calculate_link_status() if trial.set_environment(optimized) else None
    return OptimizeResponse(goal=req.goal, environment=optimized, status=predicted)

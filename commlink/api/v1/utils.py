from __future__ import annotations

from fastapi import HTTPException, status
from pydantic import BaseModel, Field

from commlink.core.config import settings
from commlink.domain.models import CommunicationEnvironment, CommunicationScenario, JammingEnvironment
from commlink.services.link_budget import LinkBudgetOrchestrator, environment_errors, jamming_errors


class LinkRequest(BaseModel):
    """Link, jamming and scenario parameters for one assessment."""
    environment: CommunicationEnvironment = Field(default_factory=CommunicationEnvironment)
    jamming: JammingEnvironment = Field(default_factory=JammingEnvironment)
    scenario: CommunicationScenario = Field(
        default_factory=lambda: CommunicationScenario(settings.DEFAULT_SCENARIO)
    )


def build_orchestrator(req: LinkRequest) -> LinkBudgetOrchestrator:
    """Orchestrator configured from a request, or 422 listing every invalid field."""
    errors = environment_errors(req.environment) + jamming_errors(req.jamming)
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)

    orchestrator = LinkBudgetOrchestrator(packet_length_bits=settings.PACKET_LENGTH_BITS)
    # Scenario last so it decides whether the jammer is active
    applied = (
        orchestrator.set_environment(req.environment)
        and orchestrator.set_jamming_environment(req.jamming)
        and orchestrator.set_scenario(req.scenario)
    )
    if not applied:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=["received signal level is outside what the link models can represent"],
        )
    return orchestrator

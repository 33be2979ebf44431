from __future__ import annotations

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel, Field

from commlink.api.v1.utils import LinkRequest, build_orchestrator
from commlink.domain.models import CommunicationScenario
from commlink.rf.antijam import AntiJamTechnique

router = APIRouter()


class JammingAnalysisRequest(LinkRequest):
    scenario: CommunicationScenario = CommunicationScenario.JAMMED
    target_ber: float = Field(1e-6, gt=0, lt=0.5)


class JammingAnalysis(BaseModel):
    jammer_to_signal_ratio_db: float
    jammer_effectiveness: float
    jammer_effect: str
    communication_degradation: float
    jamming_range_km: float
    required_jammer_power_dbm: float
    anti_jam_effectiveness: float
    anti_jam_effect: str
    optimal_technique: AntiJamTechnique
    recommended_techniques: List[AntiJamTechnique]
    required_anti_jam_gain_db: float
    max_tolerable_jammer_power_dbm: float
    coverage: List[float]


@router.post("/analysis", response_model=JammingAnalysis)
async def jamming_analysis(req: JammingAnalysisRequest):
    orchestrator = build_orchestrator(req)
    jammer = orchestrator.jammer_model
    anti_jam = orchestrator.anti_jam_model
    return JammingAnalysis(
        jammer_to_signal_ratio_db=orchestrator.calculate_jammer_to_signal_ratio(),
        jammer_effectiveness=orchestrator.calculate_jammer_effectiveness(),
        jammer_effect=jammer.evaluate_jammer_effect().name,
        communication_degradation=jammer.calculate_communication_degradation(),
        jamming_range_km=jammer.calculate_jamming_range(),
        required_jammer_power_dbm=jammer.calculate_required_jammer_power(10.0),
        anti_jam_effectiveness=orchestrator.calculate_anti_jam_effectiveness(),
        anti_jam_effect=anti_jam.evaluate_anti_jam_effect().name,
        optimal_technique=anti_jam.calculate_optimal_technique(),
        recommended_techniques=anti_jam.get_recommended_technique_combination(),
        required_anti_jam_gain_db=orchestrator.calculate_required_anti_jam_gain(req.target_ber),
        max_tolerable_jammer_power_dbm=anti_jam.calculate_max_tolerable_jammer_power(),
        coverage=orchestrator.calculate_jammer_coverage(),
    )

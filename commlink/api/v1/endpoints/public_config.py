from __future__ import annotations

from fastapi import APIRouter, Depends

from commlink.core.config import Settings, get_settings_dep
from commlink.domain.models import CommunicationScenario

router = APIRouter()


@router.get("/public")
async def get_public_config(cfg: Settings = Depends(get_settings_dep)):
    """Non-sensitive settings a client needs to build requests."""
    return {
        "project": cfg.PROJECT_NAME,
        "version": cfg.VERSION,
        "default_scenario": cfg.DEFAULT_SCENARIO,
        "scenarios": [s.value for s in CommunicationScenario],
        "packet_length_bits": cfg.PACKET_LENGTH_BITS,
        "max_sweep_points": cfg.MAX_SWEEP_POINTS,
    }

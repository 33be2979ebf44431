from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from commlink.rf.environment import (
    EnvironmentConfigStore,
    EnvironmentProfile,
    EnvironmentType,
    environment_name,
)

router = APIRouter()


class EnvironmentInfo(BaseModel):
    type: EnvironmentType
    name: str
    profile: EnvironmentProfile
    expected_attenuation: float


def _info(store: EnvironmentConfigStore, env: EnvironmentType) -> EnvironmentInfo:
    return EnvironmentInfo(
        type=env,
        name=environment_name(env),
        profile=store.get_config(env),
        expected_attenuation=store.expected_attenuation(env),
    )


@router.get("", response_model=List[EnvironmentInfo])
async def list_environments():
    store = EnvironmentConfigStore()
    return [_info(store, env) for env in store.get_all_configs()]


@router.get("/{env_type}", response_model=EnvironmentInfo)
async def get_environment(env_type: str):
    try:
        env = EnvironmentType(env_type.lower())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown environment type '{env_type}'")
    return _info(EnvironmentConfigStore(), env)

"""Per-environment propagation loss profiles.

Each environment class carries a path-loss exponent, a fixed environment loss,
a shadowing standard deviation and a frequency factor. The table lives in an
:class:`EnvironmentConfigStore` instance owned by whoever needs it, so two
link models never see each other's edits.
"""
from __future__ import annotations

import logging
from enum import Enum
from math import log10
from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from commlink.core.errors import InvalidParameterError

logger = logging.getLogger(__name__)

FREE_SPACE_EXPONENT = 2.0
FREQ_FACTOR_MULTIPLIER = 2.0
ATTENUATION_TOLERANCE = 0.5


class EnvironmentType(str, Enum):
    """Propagation environment classes."""
    OPEN_FIELD = "open_field"
    URBAN = "urban_area"
    MOUNTAINOUS = "mountainous"


ENVIRONMENT_NAMES = {
    EnvironmentType.OPEN_FIELD: "Open field",
    EnvironmentType.URBAN: "Urban area",
    EnvironmentType.MOUNTAINOUS: "Mountainous",
}

_NAME_ALIASES = {
    "open_field": EnvironmentType.OPEN_FIELD,
    "open field": EnvironmentType.OPEN_FIELD,
    "urban_area": EnvironmentType.URBAN,
    "urban area": EnvironmentType.URBAN,
    "urban": EnvironmentType.URBAN,
    "mountainous": EnvironmentType.MOUNTAINOUS,
}


class EnvironmentProfile(BaseModel):
    """Loss parameters for one environment class.

    Attributes:
        path_loss_exponent: Distance exponent (2.0 is free space)
        environment_loss_db: Fixed additional loss in dB
        shadowing_std_dev_db: Log-normal shadowing standard deviation in dB
        frequency_factor: Weight of the frequency-dependent penalty
    """

    model_config = ConfigDict(frozen=True)

    path_loss_exponent: float = Field(..., ge=1.5, le=6.0)
    environment_loss_db: float = Field(..., ge=0.0, le=50.0)
    shadowing_std_dev_db: float = Field(..., ge=0.0, le=20.0)
    frequency_factor: float = Field(..., ge=0.5, le=3.0)


DEFAULT_PROFILES: Dict[EnvironmentType, EnvironmentProfile] = {
    EnvironmentType.OPEN_FIELD: EnvironmentProfile(
        path_loss_exponent=2.0,
        environment_loss_db=0.0,
        shadowing_std_dev_db=4.0,
        frequency_factor=1.0,
    ),
    EnvironmentType.URBAN: EnvironmentProfile(
        path_loss_exponent=3.0,
        environment_loss_db=10.0,
        shadowing_std_dev_db=8.0,
        frequency_factor=1.2,
    ),
    EnvironmentType.MOUNTAINOUS: EnvironmentProfile(
        path_loss_exponent=3.5,
        environment_loss_db=15.0,
        shadowing_std_dev_db=10.0,
        frequency_factor=1.5,
    ),
}

ProfileLike = Union[EnvironmentProfile, Mapping[str, Any]]


def environment_name(env: EnvironmentType) -> str:
    return ENVIRONMENT_NAMES.get(env, "Unknown environment")


def parse_environment_type(name: str) -> EnvironmentType:
    """Map a user supplied name to an environment class.

    Matching is case-insensitive; anything unrecognised falls back to OPEN_FIELD.
    """
    return _NAME_ALIASES.get(name.strip().lower(), EnvironmentType.OPEN_FIELD)


class EnvironmentConfigStore:
    """Table of environment loss profiles with atomic, validated updates."""

    def __init__(self) -> None:
        self._configs: Dict[EnvironmentType, EnvironmentProfile] = dict(DEFAULT_PROFILES)

    @staticmethod
    def validate_config(profile: ProfileLike) -> bool:
        try:
            EnvironmentProfile.model_validate(
                profile.model_dump() if isinstance(profile, EnvironmentProfile) else profile
            )
        except ValidationError:
            return False
        return True

    def get_config(self, env: EnvironmentType) -> EnvironmentProfile:
        try:
            return self._configs[env]
        except KeyError:
            raise InvalidParameterError(f"No environment profile for {env!r}") from None

    def set_config(self, env: EnvironmentType, profile: ProfileLike) -> bool:
        """Replace the profile for ``env``.

        The whole profile is validated first; on any violation the table is
        left untouched and False is returned.
        """
        if not isinstance(env, EnvironmentType):
            logger.debug("Rejected profile for unknown environment %r", env)
            return False
        try:
            data = profile.model_dump() if isinstance(profile, EnvironmentProfile) else dict(profile)
            validated = EnvironmentProfile.model_validate(data)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.debug(f"Rejected profile for {env.value}: {exc}")
            return False
        self._configs[env] = validated
        logger.debug(f"Updated environment profile {env.value}: {validated}")
        return True

    def get_all_configs(self) -> Dict[EnvironmentType, EnvironmentProfile]:
        return dict(self._configs)

    def reset_to_defaults(self) -> None:
        self._configs = dict(DEFAULT_PROFILES)

    def has_config(self, env: EnvironmentType) -> bool:
        return env in self._configs

    def config_count(self) -> int:
        return len(self._configs)

    # Loss contributions

    def environment_path_loss(self, distance_km: float, env: EnvironmentType) -> float:
        """Excess loss over the free-space exponent, in dB."""
        if distance_km <= 0:
            raise InvalidParameterError(f"distance_km must be positive, got {distance_km}")
        exponent = self.get_config(env).path_loss_exponent
        return 10.0 * (exponent - FREE_SPACE_EXPONENT) * log10(distance_km)

    def frequency_factor_loss(self, frequency_mhz: float, env: EnvironmentType) -> float:
        if frequency_mhz <= 0:
            raise InvalidParameterError(f"frequency_mhz must be positive, got {frequency_mhz}")
        factor = self.get_config(env).frequency_factor
        return factor * log10(frequency_mhz / 1000.0) * FREQ_FACTOR_MULTIPLIER

    def total_environment_loss(self, distance_km: float, frequency_mhz: float, env: EnvironmentType) -> float:
        """Environment path loss + fixed environment loss + frequency penalty."""
        return (
            self.environment_path_loss(distance_km, env)
            + self.get_config(env).environment_loss_db
            + self.frequency_factor_loss(frequency_mhz, env)
        )

    def expected_attenuation(self, env: EnvironmentType) -> float:
        return 1.0 + self.get_config(env).environment_loss_db / 10.0

    def is_attenuation_valid(self, attenuation: float, env: EnvironmentType) -> bool:
        return abs(attenuation - self.expected_attenuation(env)) <= ATTENUATION_TOLERANCE

"""Propagation loss and communication distance models."""
from __future__ import annotations

import logging
from math import log10
from typing import Optional

from commlink.core.errors import InvalidParameterError, require_in_range
from commlink.rf.constants import FSPL_CONSTANT_DB
from commlink.rf.environment import EnvironmentConfigStore, EnvironmentType

logger = logging.getLogger(__name__)

# 6 dB of extra budget doubles the usable distance
POWER_DISTANCE_BASE = 2.0
POWER_DISTANCE_DB_FACTOR = 6.0

ENV_ATTENUATION_MIN = 0.5
ENV_ATTENUATION_MAX = 5.0

# Iterative range solver
INITIAL_DISTANCE_ESTIMATE_KM = 1.0
MAX_ITERATIONS = 100
CONVERGENCE_TOLERANCE_DB = 0.1
DISTANCE_DECREASE_FACTOR = 0.9
DISTANCE_INCREASE_FACTOR = 1.1
MIN_DISTANCE_KM = 0.001


def free_space_path_loss(distance_km: float, frequency_mhz: float) -> float:
    """
    Calculate Free Space Path Loss (FSPL) in dB

    Args:
        distance_km: Distance in kilometers
        frequency_mhz: Frequency in MHz

    Returns:
        FSPL in dB
    """
    if distance_km <= 0 or frequency_mhz <= 0:
        raise InvalidParameterError(
            f"FSPL needs positive distance and frequency (got {distance_km} km, {frequency_mhz} MHz)"
        )
    # FSPL(dB) = 20*log10(d) + 20*log10(f) + 32.45
    # where d is in km and f is in MHz
    return 20.0 * log10(distance_km) + 20.0 * log10(frequency_mhz) + FSPL_CONSTANT_DB


def distance_from_path_loss(path_loss_db: float, frequency_mhz: float) -> float:
    """Invert the free-space formula: distance in km giving ``path_loss_db``."""
    if path_loss_db < 0:
        raise InvalidParameterError(f"path loss must be non-negative, got {path_loss_db}")
    if frequency_mhz <= 0:
        raise InvalidParameterError(f"frequency_mhz must be positive, got {frequency_mhz}")
    return 10.0 ** ((path_loss_db - FSPL_CONSTANT_DB - 20.0 * log10(frequency_mhz)) / 20.0)


def effective_distance(
    max_line_of_sight_km: float,
    transmit_power_dbm: float,
    receive_sensitivity_dbm: float,
    link_margin_db: float,
    env_attenuation: float,
) -> float:
    """Power-limited communication distance capped by line of sight.

    Returns 0 when the power budget cannot cover the link margin.
    """
    budget_db = transmit_power_dbm - receive_sensitivity_dbm - link_margin_db
    if budget_db < 0:
        return 0.0
    power_factor = POWER_DISTANCE_BASE ** (budget_db / POWER_DISTANCE_DB_FACTOR)
    return min(max_line_of_sight_km / env_attenuation * power_factor, max_line_of_sight_km)


class PropagationModel:
    """Path loss calculator bound to an environment profile table."""

    def __init__(self, config_store: Optional[EnvironmentConfigStore] = None):
        self.config_store = config_store or EnvironmentConfigStore()

    @staticmethod
    def free_space_path_loss(distance_km: float, frequency_mhz: float) -> float:
        return free_space_path_loss(distance_km, frequency_mhz)

    def path_loss(self, distance_km: float, frequency_mhz: float, env: EnvironmentType) -> float:
        """FSPL plus the excess loss of the environment's path-loss exponent."""
        return free_space_path_loss(distance_km, frequency_mhz) + self.config_store.environment_path_loss(
            distance_km, env
        )

    def total_path_loss(self, distance_km: float, frequency_mhz: float, env: EnvironmentType) -> float:
        """FSPL plus every environment contribution, in dB."""
        return free_space_path_loss(distance_km, frequency_mhz) + self.config_store.total_environment_loss(
            distance_km, frequency_mhz, env
        )


class CommunicationDistanceModel:
    """Link-budget limited communication distance for one transmitter/receiver pair.

    All distances are in km, powers in dBm and frequencies in MHz.
    """

    MAX_LOS_RANGE = (0.5, 50.0)
    SENSITIVITY_RANGE = (-110.0, -90.0)
    LINK_MARGIN_RANGE = (5.0, 20.0)
    TRANSMIT_POWER_RANGE = (-30.0, 30.0)

    def __init__(
        self,
        max_line_of_sight_km: float = 10.0,
        environment_type: EnvironmentType = EnvironmentType.OPEN_FIELD,
        env_attenuation: float = 1.0,
        receive_sensitivity_dbm: float = -100.0,
        link_margin_db: float = 10.0,
        transmit_power_dbm: float = 20.0,
        config_store: Optional[EnvironmentConfigStore] = None,
    ):
        self.propagation = PropagationModel(config_store)
        self._max_line_of_sight_km = require_in_range("max_line_of_sight_km", max_line_of_sight_km, *self.MAX_LOS_RANGE)
        if not isinstance(environment_type, EnvironmentType):
            raise InvalidParameterError(f"unknown environment type {environment_type!r}")
        self._environment_type = environment_type
        if not self.config_store.is_attenuation_valid(env_attenuation, environment_type):
            raise InvalidParameterError(
                f"env_attenuation={env_attenuation} does not match {environment_type.value} "
                f"(expected {self.config_store.expected_attenuation(environment_type):.2f} +/- 0.5)"
            )
        self._env_attenuation = env_attenuation
        self._receive_sensitivity_dbm = require_in_range(
            "receive_sensitivity_dbm", receive_sensitivity_dbm, *self.SENSITIVITY_RANGE
        )
        self._link_margin_db = require_in_range("link_margin_db", link_margin_db, *self.LINK_MARGIN_RANGE)
        self._transmit_power_dbm = require_in_range(
            "transmit_power_dbm", transmit_power_dbm, *self.TRANSMIT_POWER_RANGE
        )

    @property
    def config_store(self) -> EnvironmentConfigStore:
        return self.propagation.config_store

    # Getters

    @property
    def max_line_of_sight_km(self) -> float:
        return self._max_line_of_sight_km

    @property
    def environment_type(self) -> EnvironmentType:
        return self._environment_type

    @property
    def env_attenuation(self) -> float:
        return self._env_attenuation

    @property
    def receive_sensitivity_dbm(self) -> float:
        return self._receive_sensitivity_dbm

    @property
    def link_margin_db(self) -> float:
        return self._link_margin_db

    @property
    def transmit_power_dbm(self) -> float:
        return self._transmit_power_dbm

    # Setters return False and keep the previous value when rejected

    def set_max_line_of_sight(self, km: float) -> bool:
        if not self.MAX_LOS_RANGE[0] <= km <= self.MAX_LOS_RANGE[1]:
            logger.debug("Rejected max line of sight %s km", km)
            return False
        self._max_line_of_sight_km = km
        return True

    def set_environment_type(self, env: EnvironmentType) -> bool:
        """Switch environment and reset attenuation to that environment's nominal value."""
        if not isinstance(env, EnvironmentType):
            logger.debug("Rejected environment type %r", env)
            return False
        self._environment_type = env
        attenuation = self.config_store.expected_attenuation(env)
        self._env_attenuation = max(ENV_ATTENUATION_MIN, min(ENV_ATTENUATION_MAX, attenuation))
        return True

    def set_env_attenuation(self, attenuation: float) -> bool:
        if not self.config_store.is_attenuation_valid(attenuation, self._environment_type):
            logger.debug("Rejected attenuation %s for %s", attenuation, self._environment_type.value)
            return False
        self._env_attenuation = attenuation
        return True

    def set_receive_sensitivity(self, dbm: float) -> bool:
        if not self.SENSITIVITY_RANGE[0] <= dbm <= self.SENSITIVITY_RANGE[1]:
            logger.debug("Rejected receive sensitivity %s dBm", dbm)
            return False
        self._receive_sensitivity_dbm = dbm
        return True

    def set_link_margin(self, db: float) -> bool:
        if not self.LINK_MARGIN_RANGE[0] <= db <= self.LINK_MARGIN_RANGE[1]:
            logger.debug("Rejected link margin %s dB", db)
            return False
        self._link_margin_db = db
        return True

    def set_transmit_power(self, dbm: float) -> bool:
        if not self.TRANSMIT_POWER_RANGE[0] <= dbm <= self.TRANSMIT_POWER_RANGE[1]:
            logger.debug("Rejected transmit power %s dBm", dbm)
            return False
        self._transmit_power_dbm = dbm
        return True

    # Calculations

    def calculate_free_space_path_loss(self, distance_km: float, frequency_mhz: float) -> float:
        return free_space_path_loss(distance_km, frequency_mhz)

    def calculate_path_loss(self, distance_km: float, frequency_mhz: float) -> float:
        return self.propagation.path_loss(distance_km, frequency_mhz, self._environment_type)

    def calculate_total_path_loss(self, distance_km: float, frequency_mhz: float) -> float:
        return self.propagation.total_path_loss(distance_km, frequency_mhz, self._environment_type)

    def calculate_effective_distance(self) -> float:
        return effective_distance(
            self._max_line_of_sight_km,
            self._transmit_power_dbm,
            self._receive_sensitivity_dbm,
            self._link_margin_db,
            self._env_attenuation,
        )

    def quick_calculate_range(self, frequency_mhz: float) -> float:
        """
        Estimate the distance at which total path loss uses up the link budget.

        Uses a multiplicative search starting at 1 km, bounded by line of sight.

        Args:
            frequency_mhz: Carrier frequency in MHz

        Returns:
            Estimated range in km (0 when the budget is exhausted)
        """
        if frequency_mhz <= 0:
            return 0.0

        max_path_loss = self._transmit_power_dbm - self._receive_sensitivity_dbm - self._link_margin_db
        if max_path_loss <= 0:
            return 0.0

        distance = INITIAL_DISTANCE_ESTIMATE_KM
        for _ in range(MAX_ITERATIONS):
            error = self.calculate_total_path_loss(distance, frequency_mhz) - max_path_loss
            if abs(error) < CONVERGENCE_TOLERANCE_DB:
                break
            distance *= DISTANCE_DECREASE_FACTOR if error > 0 else DISTANCE_INCREASE_FACTOR
            distance = max(MIN_DISTANCE_KM, min(self._max_line_of_sight_km, distance))

        return distance


def quick_calculate_range(
    frequency_mhz: float,
    transmit_power_dbm: float,
    environment_type: EnvironmentType = EnvironmentType.OPEN_FIELD,
    config_store: Optional[EnvironmentConfigStore] = None,
) -> float:
    """Range estimate using default sensitivity, margin and line of sight."""
    store = config_store or EnvironmentConfigStore()
    model = CommunicationDistanceModel(
        environment_type=environment_type,
        env_attenuation=store.expected_attenuation(environment_type),
        transmit_power_dbm=transmit_power_dbm,
        config_store=store,
    )
    return model.quick_calculate_range(frequency_mhz)

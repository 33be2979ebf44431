"""Value objects exchanged between the link orchestrator and its callers."""
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from commlink.rf.environment import EnvironmentType
from commlink.rf.jammer import JammerType


class CommunicationScenario(str, Enum):
    """Operating scenarios the orchestrator can be switched into."""
    NORMAL = "normal"
    JAMMED = "jammed"
    ANTI_JAM = "anti_jam"
    MULTI_USER = "multi_user"
    RELAY = "relay"
    MESH = "mesh"


class CommunicationQuality(int, Enum):
    """Qualitative link tier, higher is better."""
    EXCELLENT = 5
    GOOD = 4
    FAIR = 3
    POOR = 2
    FAILED = 1


class CommunicationEnvironment(BaseModel):
    """Link parameters shared by every sub-model.

    Range checks are made by the orchestrator setters, not here, so that a
    rejected update can be reported without raising.
    """

    model_config = ConfigDict(validate_assignment=True)

    frequency_mhz: float = Field(2400.0, description="Carrier frequency in MHz")
    bandwidth_mhz: float = Field(10.0, description="Channel bandwidth in MHz")
    transmit_power_dbm: float = Field(20.0, description="Transmit power in dBm")
    noise_power_dbm: float = Field(-100.0, description="Receiver noise power in dBm")
    distance_km: float = Field(5.0, description="Link distance in km")
    environment_type: EnvironmentType = EnvironmentType.OPEN_FIELD
    temperature_c: float = Field(20.0, description="Ambient temperature in Celsius")
    humidity_pct: float = Field(50.0, description="Relative humidity in percent")
    pressure_kpa: float = Field(101.325, description="Atmospheric pressure in kPa")


class JammingEnvironment(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    is_jammed: bool = False
    jammer_type: JammerType = JammerType.GAUSSIAN_NOISE
    jammer_power_dbm: float = 20.0
    jammer_frequency_mhz: float = 2400.0
    jammer_bandwidth_mhz: float = 10.0
    jammer_distance_km: float = 5.0
    jammer_density: float = 0.1
    jammer_frequencies_mhz: List[float] = Field(default_factory=list)


class LinkStatus(BaseModel):
    """Result of one link assessment."""

    model_config = ConfigDict(frozen=True)

    is_connected: bool
    signal_strength_dbm: float
    snr_db: float
    bit_error_rate: float
    throughput_mbps: float
    latency_ms: float
    packet_loss_rate: float
    quality: CommunicationQuality
    status_description: str


class PerformanceSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    effective_range_km: float
    max_data_rate_mbps: float
    power_efficiency_bps_per_w: float
    spectral_efficiency_bps_per_hz: float
    reliability: float
    availability: float
    jammer_resistance: float
    interception_resistance: float

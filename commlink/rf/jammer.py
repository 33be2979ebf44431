"""Jammer model: effective jamming power, J/S ratio and per-type effectiveness.

Frequencies and bandwidths are in kHz, distances in km, powers in dBm.
Pulse and sweep jammers keep their extra parameters in dedicated profile
records so the generic jammer state never carries fields it cannot use.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from math import exp, log10, pi
from typing import Callable, Dict, Iterable, Tuple

from commlink.core.errors import InvalidParameterError, require_in_range
from commlink.rf.propagation import distance_from_path_loss, free_space_path_loss

logger = logging.getLogger(__name__)

MAX_POWER_FACTOR = 10.0
SPOT_ENHANCEMENT_FACTOR = 1.2
# Range and required-power estimates assume a 10 dB J/S and a fixed 2 dB atmospheric loss
MIN_EFFECTIVE_JS_RATIO_DB = 10.0
ASSUMED_ATMOSPHERIC_LOSS_DB = 2.0


class JammerType(str, Enum):
    GAUSSIAN_NOISE = "gaussian_noise"
    NARROWBAND = "narrowband"
    SWEEP_FREQUENCY = "sweep_frequency"
    PULSE = "pulse"
    BARRAGE = "barrage"
    SPOT = "spot"


class JammerStrategy(str, Enum):
    CONTINUOUS = "continuous"
    INTERMITTENT = "intermittent"
    ADAPTIVE = "adaptive"
    RANDOM = "random"


class JammerEffectLevel(Enum):
    NO_EFFECT = auto()
    SLIGHT = auto()
    MODERATE = auto()
    SEVERE = auto()
    COMPLETE_DENIAL = auto()


# Upper degradation bound (exclusive) for each level below COMPLETE_DENIAL
EFFECT_THRESHOLDS: Tuple[Tuple[float, JammerEffectLevel], ...] = (
    (0.1, JammerEffectLevel.NO_EFFECT),
    (0.3, JammerEffectLevel.SLIGHT),
    (0.6, JammerEffectLevel.MODERATE),
    (0.9, JammerEffectLevel.SEVERE),
)


@dataclass(frozen=True)
class PulseProfile:
    """Pulse jammer timing."""
    width_ms: float = 0.001
    repetition_rate_hz: float = 1000.0
    duty_cycle: float = 0.1


@dataclass(frozen=True)
class SweepProfile:
    """Swept jammer parameters."""
    rate_mhz_per_s: float = 1000.0
    range_mhz: float = 10.0


@dataclass(frozen=True)
class JammerTarget:
    """The victim link as seen by the jammer."""
    frequency_khz: float = 2400.0
    bandwidth_khz: float = 10.0
    power_dbm: float = 30.0
    distance_km: float = 5.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def pulse_peak_power(average_power_dbm: float, duty_cycle: float) -> float:
    """Peak power of a pulse train with the given average power."""
    if duty_cycle <= 0:
        raise InvalidParameterError(f"duty cycle must be positive, got {duty_cycle}")
    return average_power_dbm + 10.0 * log10(1.0 / duty_cycle)


class CommunicationJammerModel:
    """Single jammer acting on a single target link."""

    POWER_RANGE = (-50.0, 50.0)
    FREQUENCY_RANGE = (1.0, 30_000_000.0)
    BANDWIDTH_RANGE = (0.1, 10_000.0)
    RANGE_KM = (0.1, 1000.0)
    TARGET_POWER_RANGE = (-150.0, 50.0)
    PULSE_WIDTH_RANGE = (0.001, 1000.0)
    REPETITION_RATE_RANGE = (0.1, 100_000.0)
    DUTY_CYCLE_RANGE = (0.0, 1.0)
    SWEEP_RATE_RANGE = (0.001, 1000.0)
    SWEEP_RANGE_MHZ = (0.001, 10_000.0)
    PROPAGATION_LOSS_RANGE = (0.0, 200.0)
    ATMOSPHERIC_LOSS_RANGE = (0.0, 50.0)

    def __init__(
        self,
        jammer_type: JammerType = JammerType.GAUSSIAN_NOISE,
        strategy: JammerStrategy = JammerStrategy.CONTINUOUS,
        power_dbm: float = 30.0,
        frequency_khz: float = 10_000.0,
        bandwidth_khz: float = 100.0,
        range_km: float = 50.0,
    ):
        self._jammer_type = jammer_type
        self._strategy = strategy
        self._power_dbm = require_in_range("power_dbm", power_dbm, *self.POWER_RANGE)
        self._frequency_khz = require_in_range("frequency_khz", frequency_khz, *self.FREQUENCY_RANGE)
        self._bandwidth_khz = require_in_range("bandwidth_khz", bandwidth_khz, *self.BANDWIDTH_RANGE)
        self._range_km = require_in_range("range_km", range_km, *self.RANGE_KM)

        self._target = JammerTarget()
        self._pulse = PulseProfile()
        self._sweep = SweepProfile()
        self._propagation_loss_db = 0.0
        self._atmospheric_loss_db = 0.0

        self._effects: Dict[JammerType, Callable[[], float]] = {
            JammerType.GAUSSIAN_NOISE: self.calculate_gaussian_noise_effect,
            JammerType.NARROWBAND: self.calculate_narrowband_effect,
            JammerType.SWEEP_FREQUENCY: self.calculate_sweep_frequency_effect,
            JammerType.PULSE: self.calculate_pulse_jammer_effect,
            JammerType.BARRAGE: self.calculate_barrage_jammer_effect,
            JammerType.SPOT: self.calculate_spot_jammer_effect,
        }

    def __copy__(self) -> "CommunicationJammerModel":
        clone = CommunicationJammerModel(
            self._jammer_type, self._strategy, self._power_dbm,
            self._frequency_khz, self._bandwidth_khz, self._range_km,
        )
        clone._target = self._target
        clone._pulse = self._pulse
        clone._sweep = self._sweep
        clone._propagation_loss_db = self._propagation_loss_db
        clone._atmospheric_loss_db = self._atmospheric_loss_db
        return clone

    def __deepcopy__(self, memo) -> "CommunicationJammerModel":
        return self.__copy__()

    # Validation predicates

    @classmethod
    def is_power_valid(cls, power_dbm: float) -> bool:
        return cls.POWER_RANGE[0] <= power_dbm <= cls.POWER_RANGE[1]

    @classmethod
    def is_frequency_valid(cls, frequency_khz: float) -> bool:
        return cls.FREQUENCY_RANGE[0] <= frequency_khz <= cls.FREQUENCY_RANGE[1]

    @classmethod
    def is_bandwidth_valid(cls, bandwidth_khz: float) -> bool:
        return cls.BANDWIDTH_RANGE[0] <= bandwidth_khz <= cls.BANDWIDTH_RANGE[1]

    @classmethod
    def is_range_valid(cls, range_km: float) -> bool:
        return cls.RANGE_KM[0] <= range_km <= cls.RANGE_KM[1]

    @classmethod
    def is_duty_cycle_valid(cls, duty: float) -> bool:
        return cls.DUTY_CYCLE_RANGE[0] <= duty <= cls.DUTY_CYCLE_RANGE[1]

    def _reject(self, field: str, value: float) -> bool:
        logger.debug("Rejected jammer %s=%s", field, value)
        return False

    # Getters

    @property
    def jammer_type(self) -> JammerType:
        return self._jammer_type

    @property
    def strategy(self) -> JammerStrategy:
        return self._strategy

    @property
    def power_dbm(self) -> float:
        return self._power_dbm

    @property
    def frequency_khz(self) -> float:
        return self._frequency_khz

    @property
    def bandwidth_khz(self) -> float:
        return self._bandwidth_khz

    @property
    def range_km(self) -> float:
        return self._range_km

    @property
    def target(self) -> JammerTarget:
        return self._target

    @property
    def target_frequency_khz(self) -> float:
        return self._target.frequency_khz

    @property
    def target_bandwidth_khz(self) -> float:
        return self._target.bandwidth_khz

    @property
    def target_power_dbm(self) -> float:
        return self._target.power_dbm

    @property
    def target_distance_km(self) -> float:
        return self._target.distance_km

    @property
    def pulse(self) -> PulseProfile:
        return self._pulse

    @property
    def sweep(self) -> SweepProfile:
        return self._sweep

    @property
    def propagation_loss_db(self) -> float:
        return self._propagation_loss_db

    @property
    def atmospheric_loss_db(self) -> float:
        return self._atmospheric_loss_db

    # Setters

    def set_jammer_type(self, jammer_type: JammerType) -> None:
        self._jammer_type = jammer_type

    def set_strategy(self, strategy: JammerStrategy) -> None:
        self._strategy = strategy

    def set_power(self, power_dbm: float) -> bool:
        if not self.is_power_valid(power_dbm):
            return self._reject("power_dbm", power_dbm)
        self._power_dbm = power_dbm
        return True

    def set_frequency(self, frequency_khz: float) -> bool:
        if not self.is_frequency_valid(frequency_khz):
            return self._reject("frequency_khz", frequency_khz)
        self._frequency_khz = frequency_khz
        return True

    def set_bandwidth(self, bandwidth_khz: float) -> bool:
        if not self.is_bandwidth_valid(bandwidth_khz):
            return self._reject("bandwidth_khz", bandwidth_khz)
        self._bandwidth_khz = bandwidth_khz
        return True

    def set_range(self, range_km: float) -> bool:
        if not self.is_range_valid(range_km):
            return self._reject("range_km", range_km)
        self._range_km = range_km
        return True

    def set_target_frequency(self, frequency_khz: float) -> bool:
        if not self.is_frequency_valid(frequency_khz):
            return self._reject("target_frequency_khz", frequency_khz)
        self._target = replace(self._target, frequency_khz=frequency_khz)
        return True

    def set_target_bandwidth(self, bandwidth_khz: float) -> bool:
        if not self.is_bandwidth_valid(bandwidth_khz):
            return self._reject("target_bandwidth_khz", bandwidth_khz)
        self._target = replace(self._target, bandwidth_khz=bandwidth_khz)
        return True

    def set_target_power(self, power_dbm: float) -> bool:
        if not self.TARGET_POWER_RANGE[0] <= power_dbm <= self.TARGET_POWER_RANGE[1]:
            return self._reject("target_power_dbm", power_dbm)
        self._target = replace(self._target, power_dbm=power_dbm)
        return True

    def set_target_distance(self, distance_km: float) -> bool:
        if not self.is_range_valid(distance_km):
            return self._reject("target_distance_km", distance_km)
        self._target = replace(self._target, distance_km=distance_km)
        return True

    def set_pulse_width(self, width_ms: float) -> bool:
        if not self.PULSE_WIDTH_RANGE[0] <= width_ms <= self.PULSE_WIDTH_RANGE[1]:
            return self._reject("pulse_width_ms", width_ms)
        self._pulse = replace(self._pulse, width_ms=width_ms)
        return True

    def set_pulse_repetition_rate(self, rate_hz: float) -> bool:
        """Set PRF; the duty cycle follows as width x rate."""
        if not self.REPETITION_RATE_RANGE[0] <= rate_hz <= self.REPETITION_RATE_RANGE[1]:
            return self._reject("pulse_repetition_rate_hz", rate_hz)
        duty = min(1.0, self._pulse.width_ms / 1000.0 * rate_hz)
        self._pulse = replace(self._pulse, repetition_rate_hz=rate_hz, duty_cycle=duty)
        return True

    def set_duty_cycle(self, duty: float) -> bool:
        if not self.is_duty_cycle_valid(duty):
            return self._reject("duty_cycle", duty)
        self._pulse = replace(self._pulse, duty_cycle=duty)
        return True

    def set_sweep_rate(self, rate_mhz_per_s: float) -> bool:
        if not self.SWEEP_RATE_RANGE[0] <= rate_mhz_per_s <= self.SWEEP_RATE_RANGE[1]:
            return self._reject("sweep_rate_mhz_per_s", rate_mhz_per_s)
        self._sweep = replace(self._sweep, rate_mhz_per_s=rate_mhz_per_s)
        return True

    def set_sweep_range(self, range_mhz: float) -> bool:
        if not self.SWEEP_RANGE_MHZ[0] <= range_mhz <= self.SWEEP_RANGE_MHZ[1]:
            return self._reject("sweep_range_mhz", range_mhz)
        self._sweep = replace(self._sweep, range_mhz=range_mhz)
        return True

    def set_propagation_loss(self, loss_db: float) -> bool:
        if not self.PROPAGATION_LOSS_RANGE[0] <= loss_db <= self.PROPAGATION_LOSS_RANGE[1]:
            return self._reject("propagation_loss_db", loss_db)
        self._propagation_loss_db = loss_db
        return True

    def set_atmospheric_loss(self, loss_db: float) -> bool:
        if not self.ATMOSPHERIC_LOSS_RANGE[0] <= loss_db <= self.ATMOSPHERIC_LOSS_RANGE[1]:
            return self._reject("atmospheric_loss_db", loss_db)
        self._atmospheric_loss_db = loss_db
        return True

    # Core quantities

    @staticmethod
    def calculate_propagation_loss(distance_km: float, frequency_khz: float) -> float:
        return free_space_path_loss(distance_km, frequency_khz / 1000.0)

    def calculate_frequency_overlap(self) -> float:
        """Fraction of the target band covered by the jammer band."""
        jammer_low = self._frequency_khz - self._bandwidth_khz / 2.0
        jammer_high = self._frequency_khz + self._bandwidth_khz / 2.0
        target_low = self._target.frequency_khz - self._target.bandwidth_khz / 2.0
        target_high = self._target.frequency_khz + self._target.bandwidth_khz / 2.0

        overlap_low = max(jammer_low, target_low)
        overlap_high = min(jammer_high, target_high)
        if overlap_high <= overlap_low:
            return 0.0
        return min(1.0, (overlap_high - overlap_low) / self._target.bandwidth_khz)

    def calculate_effective_power(self) -> float:
        """Jammer power arriving at the target, in dBm."""
        path_loss = self.calculate_propagation_loss(self._target.distance_km, self._frequency_khz)
        return self._power_dbm - path_loss - self._atmospheric_loss_db

    def calculate_jammer_to_signal_ratio(self) -> float:
        return self.calculate_effective_power() - self._target.power_dbm

    def _power_factor(self, divisor: float) -> float:
        return min(MAX_POWER_FACTOR, 10.0 ** (self.calculate_jammer_to_signal_ratio() / divisor))

    # Per-type effects (unclamped)

    def calculate_gaussian_noise_effect(self) -> float:
        return self.calculate_frequency_overlap() * self._power_factor(20.0)

    def calculate_narrowband_effect(self) -> float:
        freq_diff = abs(self._frequency_khz - self._target.frequency_khz)
        freq_factor = exp(-freq_diff / self._target.bandwidth_khz)
        return freq_factor * self._power_factor(10.0)

    def calculate_sweep_frequency_effect(self) -> float:
        coverage = min(1.0, self._sweep.range_mhz / self._target.bandwidth_khz)
        time_factor = min(1.0, self._target.bandwidth_khz / self._sweep.range_mhz)
        return coverage * time_factor * self._power_factor(20.0)

    def calculate_pulse_jammer_effect(self) -> float:
        duty = self._pulse.duty_cycle
        if duty <= 0:
            return 0.0
        peak_power = pulse_peak_power(self._power_dbm, duty)
        effective_peak = peak_power - self.calculate_propagation_loss(self._target.distance_km, self._frequency_khz)
        power_factor = min(MAX_POWER_FACTOR, 10.0 ** ((effective_peak - self._target.power_dbm) / 10.0))
        return self.calculate_frequency_overlap() * duty * power_factor

    def calculate_barrage_jammer_effect(self) -> float:
        coverage = min(1.0, self._bandwidth_khz / self._target.bandwidth_khz)
        return coverage * self._power_factor(10.0)

    def calculate_spot_jammer_effect(self) -> float:
        return min(1.0, self.calculate_narrowband_effect() * SPOT_ENHANCEMENT_FACTOR)

    # Aggregates

    def calculate_jammer_effectiveness(self) -> float:
        """Effectiveness of the configured jammer type in [0, 1]."""
        effect = self._effects.get(self._jammer_type)
        if effect is None:
            return 0.0
        return _clamp(effect(), 0.0, 1.0)

    def calculate_communication_degradation(self) -> float:
        js_ratio = self.calculate_jammer_to_signal_ratio()
        if js_ratio < 0:
            return 0.0
        effectiveness = self.calculate_jammer_effectiveness()
        degradation = effectiveness * (1.0 - 1.0 / (1.0 + 10.0 ** (js_ratio / 10.0)))
        return min(1.0, degradation)

    def evaluate_jammer_effect(self) -> JammerEffectLevel:
        degradation = self.calculate_communication_degradation()
        for upper, level in EFFECT_THRESHOLDS:
            if degradation < upper:
                return level
        return JammerEffectLevel.COMPLETE_DENIAL

    def effectiveness_at_distance(self, distance_km: float) -> float:
        """Effectiveness if the target sat at ``distance_km``; this model is unchanged."""
        if distance_km <= 0:
            raise InvalidParameterError(f"distance_km must be positive, got {distance_km}")
        moved = copy.copy(self)
        moved._target = replace(self._target, distance_km=distance_km)
        return moved.calculate_jammer_effectiveness()

    # Coverage and planning

    def calculate_jamming_range(self) -> float:
        """Distance (km) at which the jammer still achieves a 10 dB J/S."""
        required_at_target = self._target.power_dbm + MIN_EFFECTIVE_JS_RATIO_DB
        max_path_loss = self._power_dbm - ASSUMED_ATMOSPHERIC_LOSS_DB - required_at_target
        if max_path_loss < 0:
            return 0.0
        return distance_from_path_loss(max_path_loss, self._frequency_khz / 1000.0)

    def calculate_jamming_area(self) -> float:
        """Circular coverage area in km^2."""
        radius = self.calculate_jamming_range()
        if radius <= 0:
            return 0.0
        return pi * radius * radius

    # Same circular footprint, kept under the name used by coverage reports
    calculate_jammer_coverage = calculate_jamming_area

    def is_target_in_range(self) -> bool:
        return self._target.distance_km <= self._range_km

    def calculate_required_jammer_power(self, desired_js_ratio_db: float) -> float:
        path_loss = self.calculate_propagation_loss(self._target.distance_km, self._frequency_khz)
        return self._target.power_dbm + desired_js_ratio_db + path_loss + ASSUMED_ATMOSPHERIC_LOSS_DB

    def calculate_optimal_jammer_frequency(self) -> float:
        return self._target.frequency_khz

    def calculate_combined_jammer_effect(self, jammers: Iterable["CommunicationJammerModel"]) -> float:
        """Combined degradation of several jammers against this model's target."""
        total_mw = 0.0
        for jammer in jammers:
            total_mw += 10.0 ** (jammer.calculate_effective_power() / 10.0) * jammer.calculate_jammer_effectiveness()
        if total_mw <= 0:
            return 0.0
        combined_js = 10.0 * log10(total_mw) - self._target.power_dbm
        return min(1.0, 1.0 - 1.0 / (1.0 + 10.0 ** (combined_js / 10.0)))

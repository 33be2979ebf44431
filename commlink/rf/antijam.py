"""Anti-jam countermeasure model.

Every technique contributes a processing gain on top of the base gain; the
selected strategy scales the total. Protection metrics (resistance,
interception resistance, residual BER) derive from that gain and the current
signal, noise and interference levels.

What-if helpers (``optimal_technique``, ``combined_technique_effect``,
``predict_performance_under_jamming``) take the technique or interference as
an explicit argument and never change the model.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from math import erfc, exp, log10, sqrt
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from commlink.core.errors import require_in_range
from commlink.rf.constants import MAX_BER, MIN_BER

logger = logging.getLogger(__name__)

HYBRID_SPREAD_FACTOR = 0.7
POWER_CONTROL_GAIN_DB = 3.0
TIME_SLOTS_PER_SECOND = 1000.0
MIN_SJR_DB = -100.0
MIN_REQUIRED_SJR_DB = 10.0
SYNERGY_DECAY = 0.8


class AntiJamTechnique(str, Enum):
    FREQUENCY_HOPPING = "frequency_hopping"
    DIRECT_SEQUENCE = "direct_sequence"
    TIME_HOPPING = "time_hopping"
    HYBRID_SPREAD = "hybrid_spread"
    ADAPTIVE_FILTERING = "adaptive_filtering"
    BEAM_FORMING = "beam_forming"
    POWER_CONTROL = "power_control"
    ERROR_CORRECTION = "error_correction"
    DIVERSITY_RECEPTION = "diversity_reception"
    INTERFERENCE_CANCELLATION = "interference_cancellation"


class AntiJamStrategy(str, Enum):
    PASSIVE = "passive"
    ACTIVE = "active"
    ADAPTIVE = "adaptive"
    COOPERATIVE = "cooperative"
    COGNITIVE = "cognitive"


STRATEGY_MULTIPLIERS: Dict[AntiJamStrategy, float] = {
    AntiJamStrategy.PASSIVE: 0.8,
    AntiJamStrategy.ACTIVE: 1.0,
    AntiJamStrategy.ADAPTIVE: 1.2,
    AntiJamStrategy.COOPERATIVE: 1.3,
    AntiJamStrategy.COGNITIVE: 1.4,
}


class AntiJamEffectLevel(Enum):
    NO_PROTECTION = auto()
    LOW_PROTECTION = auto()
    MEDIUM_PROTECTION = auto()
    HIGH_PROTECTION = auto()
    EXCELLENT_PROTECTION = auto()


PROTECTION_THRESHOLDS: Tuple[Tuple[float, AntiJamEffectLevel], ...] = (
    (0.2, AntiJamEffectLevel.NO_PROTECTION),
    (0.4, AntiJamEffectLevel.LOW_PROTECTION),
    (0.6, AntiJamEffectLevel.MEDIUM_PROTECTION),
    (0.8, AntiJamEffectLevel.HIGH_PROTECTION),
)


@dataclass(frozen=True)
class HoppingProfile:
    """Frequency/time hopping parameters."""
    hopping_rate_hz: float = 1000.0
    channels: int = 100
    channel_spacing_khz: float = 25.0
    dwell_time_ms: float = 0.01


@dataclass(frozen=True)
class SpreadingProfile:
    """Direct-sequence parameters."""
    spreading_factor: float = 1000.0
    chip_rate_mcps: int = 10
    sequence_length: float = 1023.0


@dataclass(frozen=True)
class AdaptiveProfile:
    adaptation_speed: float = 0.1
    convergence_threshold: float = 0.01


@dataclass(frozen=True)
class SituationProfile:
    """Operating environment as seen by the countermeasure."""
    environment_factor: float = 1.0
    jammer_density: float = 0.1


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def bpsk_ber(snr_db: float) -> float:
    ber = 0.5 * erfc(sqrt(10.0 ** (snr_db / 10.0)))
    return _clamp(ber, MIN_BER, MAX_BER)


class CommunicationAntiJamModel:
    """Anti-jam technique and strategy with the link levels it operates on.

    Powers are in dBm, system bandwidth in MHz.
    """

    PROCESSING_GAIN_RANGE = (0.0, 50.0)
    SPREADING_FACTOR_RANGE = (1.0, 100_000.0)
    HOPPING_RATE_RANGE = (1.0, 100_000.0)
    CODING_GAIN_RANGE = (0.0, 20.0)
    SYSTEM_BANDWIDTH_RANGE = (0.1, 10_000.0)
    SIGNAL_POWER_RANGE = (-150.0, 50.0)
    NOISE_POWER_RANGE = (-150.0, 0.0)
    INTERFERENCE_RANGE = (-150.0, 50.0)
    HOPPING_CHANNELS_RANGE = (2, 10_000)
    CHANNEL_SPACING_RANGE = (0.001, 1000.0)
    DWELL_TIME_RANGE = (0.001, 1000.0)
    CHIP_RATE_RANGE = (1, 1000)
    SEQUENCE_LENGTH_RANGE = (7.0, 1_000_000.0)
    ADAPTATION_SPEED_RANGE = (0.001, 1.0)
    CONVERGENCE_RANGE = (0.0001, 0.1)
    ENVIRONMENT_FACTOR_RANGE = (0.0, 1.0)
    JAMMER_DENSITY_RANGE = (0.0, 1.0)

    def __init__(
        self,
        technique: AntiJamTechnique = AntiJamTechnique.FREQUENCY_HOPPING,
        strategy: AntiJamStrategy = AntiJamStrategy.ACTIVE,
        processing_gain_db: float = 20.0,
        coding_gain_db: float = 3.0,
        system_bandwidth_mhz: float = 10.0,
        signal_power_dbm: float = 30.0,
        noise_power_dbm: float = -100.0,
        interference_dbm: float = -100.0,
    ):
        self._technique = technique
        self._strategy = strategy
        self._processing_gain_db = require_in_range("processing_gain_db", processing_gain_db, *self.PROCESSING_GAIN_RANGE)
        self._coding_gain_db = require_in_range("coding_gain_db", coding_gain_db, *self.CODING_GAIN_RANGE)
        self._system_bandwidth_mhz = require_in_range(
            "system_bandwidth_mhz", system_bandwidth_mhz, *self.SYSTEM_BANDWIDTH_RANGE
        )
        self._signal_power_dbm = require_in_range("signal_power_dbm", signal_power_dbm, *self.SIGNAL_POWER_RANGE)
        self._noise_power_dbm = require_in_range("noise_power_dbm", noise_power_dbm, *self.NOISE_POWER_RANGE)
        self._interference_dbm = require_in_range("interference_dbm", interference_dbm, *self.INTERFERENCE_RANGE)

        self._hopping = HoppingProfile()
        self._spreading = SpreadingProfile()
        self._adaptive = AdaptiveProfile()
        self._situation = SituationProfile()

        self._technique_gains: Dict[AntiJamTechnique, Callable[[], float]] = {
            AntiJamTechnique.FREQUENCY_HOPPING: self.calculate_frequency_hopping_gain,
            AntiJamTechnique.DIRECT_SEQUENCE: self.calculate_direct_sequence_gain,
            AntiJamTechnique.TIME_HOPPING: self.calculate_time_hopping_gain,
            AntiJamTechnique.HYBRID_SPREAD: self.calculate_hybrid_spread_gain,
            AntiJamTechnique.ADAPTIVE_FILTERING: self.calculate_adaptive_filtering_gain,
            AntiJamTechnique.BEAM_FORMING: self.calculate_beam_forming_gain,
            AntiJamTechnique.POWER_CONTROL: lambda: POWER_CONTROL_GAIN_DB,
            AntiJamTechnique.ERROR_CORRECTION: self.calculate_error_correction_gain,
            AntiJamTechnique.DIVERSITY_RECEPTION: self.calculate_diversity_gain,
            AntiJamTechnique.INTERFERENCE_CANCELLATION: self.calculate_interference_cancellation_gain,
        }

    @staticmethod
    def _in(value: float, bounds: Tuple[float, float]) -> bool:
        return bounds[0] <= value <= bounds[1]

    def _commit(self, field: str, value: float, bounds: Tuple[float, float]) -> bool:
        if not self._in(value, bounds):
            logger.debug("Rejected anti-jam %s=%s", field, value)
            return False
        setattr(self, f"_{field}", value)
        return True

    # Getters

    @property
    def technique(self) -> AntiJamTechnique:
        return self._technique

    @property
    def strategy(self) -> AntiJamStrategy:
        return self._strategy

    @property
    def processing_gain_db(self) -> float:
        return self._processing_gain_db

    @property
    def coding_gain_db(self) -> float:
        return self._coding_gain_db

    @property
    def system_bandwidth_mhz(self) -> float:
        return self._system_bandwidth_mhz

    @property
    def signal_power_dbm(self) -> float:
        return self._signal_power_dbm

    @property
    def noise_power_dbm(self) -> float:
        return self._noise_power_dbm

    @property
    def interference_dbm(self) -> float:
        return self._interference_dbm

    @property
    def hopping(self) -> HoppingProfile:
        return self._hopping

    @property
    def spreading(self) -> SpreadingProfile:
        return self._spreading

    @property
    def adaptive(self) -> AdaptiveProfile:
        return self._adaptive

    @property
    def situation(self) -> SituationProfile:
        return self._situation

    # Setters

    def set_technique(self, technique: AntiJamTechnique) -> None:
        self._technique = technique

    def set_strategy(self, strategy: AntiJamStrategy) -> None:
        self._strategy = strategy

    def set_processing_gain(self, db: float) -> bool:
        return self._commit("processing_gain_db", db, self.PROCESSING_GAIN_RANGE)

    def set_coding_gain(self, db: float) -> bool:
        return self._commit("coding_gain_db", db, self.CODING_GAIN_RANGE)

    def set_system_bandwidth(self, mhz: float) -> bool:
        return self._commit("system_bandwidth_mhz", mhz, self.SYSTEM_BANDWIDTH_RANGE)

    def set_signal_power(self, dbm: float) -> bool:
        return self._commit("signal_power_dbm", dbm, self.SIGNAL_POWER_RANGE)

    def set_noise_power(self, dbm: float) -> bool:
        return self._commit("noise_power_dbm", dbm, self.NOISE_POWER_RANGE)

    def set_interference_level(self, dbm: float) -> bool:
        return self._commit("interference_dbm", dbm, self.INTERFERENCE_RANGE)

    def set_spreading_factor(self, factor: float) -> bool:
        if not self._in(factor, self.SPREADING_FACTOR_RANGE):
            logger.debug("Rejected spreading factor %s", factor)
            return False
        self._spreading = replace(self._spreading, spreading_factor=factor)
        return True

    def set_chip_rate(self, mcps: int) -> bool:
        if not self._in(mcps, self.CHIP_RATE_RANGE):
            logger.debug("Rejected chip rate %s Mcps", mcps)
            return False
        self._spreading = replace(self._spreading, chip_rate_mcps=int(mcps))
        return True

    def set_sequence_length(self, length: float) -> bool:
        if not self._in(length, self.SEQUENCE_LENGTH_RANGE):
            logger.debug("Rejected sequence length %s", length)
            return False
        self._spreading = replace(self._spreading, sequence_length=length)
        return True

    def set_hopping_rate(self, rate_hz: float) -> bool:
        if not self._in(rate_hz, self.HOPPING_RATE_RANGE):
            logger.debug("Rejected hopping rate %s Hz", rate_hz)
            return False
        self._hopping = replace(self._hopping, hopping_rate_hz=rate_hz)
        return True

    def set_hopping_channels(self, channels: int) -> bool:
        if not self._in(channels, self.HOPPING_CHANNELS_RANGE):
            logger.debug("Rejected hopping channel count %s", channels)
            return False
        self._hopping = replace(self._hopping, channels=int(channels))
        return True

    def set_channel_spacing(self, khz: float) -> bool:
        if not self._in(khz, self.CHANNEL_SPACING_RANGE):
            logger.debug("Rejected channel spacing %s kHz", khz)
            return False
        self._hopping = replace(self._hopping, channel_spacing_khz=khz)
        return True

    def set_dwell_time(self, ms: float) -> bool:
        if not self._in(ms, self.DWELL_TIME_RANGE):
            logger.debug("Rejected dwell time %s ms", ms)
            return False
        self._hopping = replace(self._hopping, dwell_time_ms=ms)
        return True

    def set_adaptation_speed(self, speed: float) -> bool:
        if not self._in(speed, self.ADAPTATION_SPEED_RANGE):
            logger.debug("Rejected adaptation speed %s", speed)
            return False
        self._adaptive = replace(self._adaptive, adaptation_speed=speed)
        return True

    def set_convergence_threshold(self, threshold: float) -> bool:
        if not self._in(threshold, self.CONVERGENCE_RANGE):
            logger.debug("Rejected convergence threshold %s", threshold)
            return False
        self._adaptive = replace(self._adaptive, convergence_threshold=threshold)
        return True

    def set_environment_factor(self, factor: float) -> bool:
        if not self._in(factor, self.ENVIRONMENT_FACTOR_RANGE):
            logger.debug("Rejected environment factor %s", factor)
            return False
        self._situation = replace(self._situation, environment_factor=factor)
        return True

    def set_jammer_density(self, density: float) -> bool:
        if not self._in(density, self.JAMMER_DENSITY_RANGE):
            logger.debug("Rejected jammer density %s", density)
            return False
        self._situation = replace(self._situation, jammer_density=density)
        return True

    # Technique gains (dB)

    def calculate_frequency_hopping_gain(self) -> float:
        return 10.0 * log10(self._hopping.channels)

    def calculate_direct_sequence_gain(self) -> float:
        return 10.0 * log10(self._spreading.spreading_factor)

    def calculate_time_hopping_gain(self) -> float:
        return 10.0 * log10(TIME_SLOTS_PER_SECOND / self._hopping.dwell_time_ms)

    def calculate_hybrid_spread_gain(self) -> float:
        return HYBRID_SPREAD_FACTOR * (self.calculate_frequency_hopping_gain() + self.calculate_direct_sequence_gain())

    def calculate_adaptive_filtering_gain(self) -> float:
        gain = 5.0 + 10.0 * self._adaptive.adaptation_speed - 20.0 * self._adaptive.convergence_threshold
        return _clamp(gain, 0.0, 30.0)

    def calculate_beam_forming_gain(self) -> float:
        return _clamp(5.0 + 0.5 * self._system_bandwidth_mhz, 0.0, 20.0)

    def calculate_error_correction_gain(self) -> float:
        return self._coding_gain_db

    def calculate_diversity_gain(self) -> float:
        return _clamp(3.0 + 2.0 * self._situation.environment_factor, 0.0, 10.0)

    def calculate_interference_cancellation_gain(self) -> float:
        return _clamp(0.5 * (1.0 - self._situation.jammer_density), 0.0, 15.0)

    def technique_gain(self, technique: Optional[AntiJamTechnique] = None) -> float:
        technique = technique or self._technique
        gain = self._technique_gains.get(technique)
        return gain() if gain is not None else 0.0

    def calculate_total_processing_gain(self, technique: Optional[AntiJamTechnique] = None) -> float:
        return self._processing_gain_db + self.technique_gain(technique)

    def calculate_anti_jam_gain(self, technique: Optional[AntiJamTechnique] = None) -> float:
        multiplier = STRATEGY_MULTIPLIERS.get(self._strategy, 1.0)
        return self.calculate_total_processing_gain(technique) * multiplier

    # Protection metrics

    def calculate_jammer_resistance(self, technique: Optional[AntiJamTechnique] = None) -> float:
        denominator = self._signal_power_dbm - self._noise_power_dbm + 1.0
        if denominator <= 0:
            return 0.0
        numerator = self._signal_power_dbm - self._interference_dbm + self.calculate_anti_jam_gain(technique)
        return _clamp(numerator / denominator / 20.0, 0.0, 1.0)

    def calculate_signal_to_jammer_ratio(
        self, technique: Optional[AntiJamTechnique] = None, interference_dbm: Optional[float] = None
    ) -> float:
        interference = self._interference_dbm if interference_dbm is None else interference_dbm
        return max(MIN_SJR_DB, self._signal_power_dbm - interference + self.calculate_anti_jam_gain(technique))

    def calculate_bit_error_rate_with_jamming(
        self, technique: Optional[AntiJamTechnique] = None, interference_dbm: Optional[float] = None
    ) -> float:
        """BPSK BER with the jammer suppressed by the anti-jam gain."""
        interference = self._interference_dbm if interference_dbm is None else interference_dbm
        total_noise = max(self._noise_power_dbm, interference - self.calculate_anti_jam_gain(technique))
        return bpsk_ber(self._signal_power_dbm - total_noise)

    def calculate_throughput_degradation(
        self, technique: Optional[AntiJamTechnique] = None, interference_dbm: Optional[float] = None
    ) -> float:
        ber = self.calculate_bit_error_rate_with_jamming(technique, interference_dbm)
        return _clamp(1.0 - exp(-10.0 * ber), 0.0, 1.0)

    def calculate_detection_probability(self) -> float:
        sjr = self.calculate_signal_to_jammer_ratio()
        return 1.0 / (1.0 + exp(-(sjr + 10.0) / 5.0))

    def calculate_interception_resistance(self, technique: Optional[AntiJamTechnique] = None) -> float:
        technique = technique or self._technique
        if technique == AntiJamTechnique.FREQUENCY_HOPPING:
            resistance = 0.8 + 0.2 * min(1.0, self._hopping.hopping_rate_hz / 10_000.0)
        elif technique == AntiJamTechnique.DIRECT_SEQUENCE:
            resistance = 0.7 + 0.3 * min(1.0, self._spreading.spreading_factor / 10_000.0)
        elif technique == AntiJamTechnique.TIME_HOPPING:
            resistance = 0.6 + 0.4 * min(1.0, 1.0 / self._hopping.dwell_time_ms)
        elif technique == AntiJamTechnique.HYBRID_SPREAD:
            resistance = 0.9
        else:
            resistance = 0.3 + 0.02 * self.calculate_anti_jam_gain(technique)
        return _clamp(resistance, 0.0, 1.0)

    def calculate_protection_effectiveness(self, technique: Optional[AntiJamTechnique] = None) -> float:
        """Weighted blend of jammer resistance, interception resistance and throughput kept."""
        effectiveness = (
            0.4 * self.calculate_jammer_resistance(technique)
            + 0.3 * self.calculate_interception_resistance(technique)
            + 0.3 * (1.0 - self.calculate_throughput_degradation(technique))
        )
        return _clamp(effectiveness, 0.0, 1.0)

    def evaluate_anti_jam_effect(self) -> AntiJamEffectLevel:
        effectiveness = self.calculate_protection_effectiveness()
        for upper, level in PROTECTION_THRESHOLDS:
            if effectiveness < upper:
                return level
        return AntiJamEffectLevel.EXCELLENT_PROTECTION

    def calculate_adaptation_efficiency(self) -> float:
        if self._strategy not in (AntiJamStrategy.ADAPTIVE, AntiJamStrategy.COGNITIVE):
            return 0.0
        efficiency = self._adaptive.adaptation_speed * (1.0 - self._adaptive.convergence_threshold)
        return _clamp(efficiency, 0.0, 1.0)

    def calculate_resource_utilization(self) -> float:
        bandwidth = min(1.0, self._system_bandwidth_mhz / 100.0)
        power = min(1.0, (self._signal_power_dbm + 50.0) / 100.0)
        processing = min(1.0, self._processing_gain_db / 50.0)
        return (bandwidth + power + processing) / 3.0

    # Per-technique effectiveness, 0 unless the technique is active

    def _normalized(self, technique: AntiJamTechnique, gain: float, scale: float) -> float:
        if self._technique != technique:
            return 0.0
        return _clamp(gain / scale, 0.0, 1.0)

    def calculate_frequency_hopping_effectiveness(self) -> float:
        return self._normalized(AntiJamTechnique.FREQUENCY_HOPPING, self.calculate_frequency_hopping_gain(), 30.0)

    def calculate_spread_spectrum_effectiveness(self) -> float:
        return self._normalized(AntiJamTechnique.DIRECT_SEQUENCE, self.calculate_direct_sequence_gain(), 40.0)

    def calculate_adaptive_filtering_effectiveness(self) -> float:
        return self._normalized(AntiJamTechnique.ADAPTIVE_FILTERING, self.calculate_adaptive_filtering_gain(), 15.0)

    def calculate_beam_forming_effectiveness(self) -> float:
        return self._normalized(AntiJamTechnique.BEAM_FORMING, self.calculate_beam_forming_gain(), 20.0)

    def calculate_diversity_effectiveness(self) -> float:
        return self._normalized(AntiJamTechnique.DIVERSITY_RECEPTION, self.calculate_diversity_gain(), 10.0)

    def calculate_error_correction_effectiveness(self) -> float:
        return self._normalized(AntiJamTechnique.ERROR_CORRECTION, self._coding_gain_db, 20.0)

    # Recommendations

    def calculate_optimal_technique(self) -> AntiJamTechnique:
        """Technique with the highest protection effectiveness; earlier techniques win ties."""
        best = self._technique
        best_score = 0.0
        for technique in AntiJamTechnique:
            score = self.calculate_protection_effectiveness(technique)
            if score > best_score:
                best, best_score = technique, score
        return best

    def calculate_optimal_processing_gain(self) -> float:
        margin = self._interference_dbm - self._noise_power_dbm
        return _clamp(margin + 10.0, *self.PROCESSING_GAIN_RANGE)

    def calculate_optimal_hopping_rate(self) -> float:
        if self._technique != AntiJamTechnique.FREQUENCY_HOPPING:
            return self._hopping.hopping_rate_hz
        rate = 1000.0 * (1.0 + self._situation.jammer_density) * (self._system_bandwidth_mhz / 10.0)
        return _clamp(rate, 100.0, 10_000.0)

    def calculate_optimal_hopping_channels(self) -> int:
        if self._technique != AntiJamTechnique.FREQUENCY_HOPPING:
            return self._hopping.channels
        channels = int(self._system_bandwidth_mhz / self._hopping.channel_spacing_khz)
        return int(_clamp(channels, 10, 1000))

    def calculate_combined_technique_effect(self, techniques: Iterable[AntiJamTechnique]) -> float:
        """Sum of strategy-scaled gains with a 0.8 synergy decay per extra technique."""
        combined = 0.0
        synergy = 1.0
        for technique in techniques:
            combined += self.calculate_anti_jam_gain(technique) * synergy
            synergy *= SYNERGY_DECAY
        return combined

    def get_recommended_technique_combination(self) -> List[AntiJamTechnique]:
        density = self._situation.jammer_density
        if density > 0.7:
            return [
                AntiJamTechnique.HYBRID_SPREAD,
                AntiJamTechnique.ADAPTIVE_FILTERING,
                AntiJamTechnique.INTERFERENCE_CANCELLATION,
            ]
        if density > 0.4:
            return [AntiJamTechnique.FREQUENCY_HOPPING, AntiJamTechnique.ERROR_CORRECTION]
        return [AntiJamTechnique.DIRECT_SEQUENCE, AntiJamTechnique.POWER_CONTROL]

    def predict_performance_under_jamming(self, jammer_power_dbm: float, jammer_bandwidth_mhz: float) -> float:
        # Bandwidth is accepted for interface symmetry; the BER model is narrowband
        return 1.0 - self.calculate_throughput_degradation(interference_dbm=jammer_power_dbm)

    def calculate_required_anti_jam_gain(self, target_ber: float) -> float:
        if not MIN_BER < target_ber < MAX_BER:
            return 0.0
        required_snr = -10.0 * log10(2.0 * target_ber)
        current_snr = self._signal_power_dbm - max(self._noise_power_dbm, self._interference_dbm)
        return max(0.0, required_snr - current_snr)

    def calculate_max_tolerable_jammer_power(self) -> float:
        return self._signal_power_dbm + self.calculate_anti_jam_gain() - MIN_REQUIRED_SJR_DB

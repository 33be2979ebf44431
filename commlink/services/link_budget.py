"""Link budget orchestration across transmitter, path, receiver, jammer and anti-jam models.

The orchestrator owns one instance of every sub-model and one environment
profile table. Every accepted parameter change is pushed into all sub-models
(converting MHz to kHz and dBm to W where a sub-model works in other units)
and drops the cached :class:`LinkStatus`. When any sub-model refuses its value
the whole change is undone and the setter returns False, so the link ranges
here are the intersection of the sub-model ranges and a received signal level
the receiver or jammer cannot take is refused as well.

Sweeps, scenario comparisons, coverage and the optimisers run on a private
copy of the orchestrator so the caller's state is never touched.
"""
from __future__ import annotations

import copy
import logging
from math import erfc, exp, isfinite, log2, log10, sqrt
from typing import Callable, Dict, Iterable, List, Optional

from commlink.core.errors import CalculationError, InvalidParameterError
from commlink.domain.models import (
    CommunicationEnvironment,
    CommunicationQuality,
    CommunicationScenario,
    JammingEnvironment,
    LinkStatus,
    PerformanceSummary,
)
from commlink.rf.antijam import AntiJamStrategy, CommunicationAntiJamModel
from commlink.rf.constants import LIGHT_SPEED_KM_S, MAX_BER, MIN_BER
from commlink.rf.environment import EnvironmentConfigStore, EnvironmentType, ProfileLike
from commlink.rf.jammer import CommunicationJammerModel
from commlink.rf.propagation import CommunicationDistanceModel
from commlink.rf.receiver import CommunicationReceiveModel
from commlink.rf.transmission import BAND_LIMITS, SignalTransmissionModel
from commlink.rf.units import dbm_to_watts

logger = logging.getLogger(__name__)


def _khz_to_mhz(bounds) -> tuple:
    return (bounds[0] / 1000.0, bounds[1] / 1000.0)


def _intersect(*ranges) -> tuple:
    return (max(r[0] for r in ranges), min(r[1] for r in ranges))


# Link ranges are the values every sub-model can take after unit conversion
FREQUENCY_RANGE_MHZ = _intersect(
    (1.0, 30_000.0),
    _khz_to_mhz((min(b.min_khz for b in BAND_LIMITS.values()), max(b.max_khz for b in BAND_LIMITS.values()))),
    _khz_to_mhz(CommunicationJammerModel.FREQUENCY_RANGE),
)
BANDWIDTH_RANGE_MHZ = _intersect(
    CommunicationAntiJamModel.SYSTEM_BANDWIDTH_RANGE,
    _khz_to_mhz(CommunicationReceiveModel.BANDWIDTH_RANGE),
    _khz_to_mhz(CommunicationJammerModel.BANDWIDTH_RANGE),
)
TRANSMIT_POWER_RANGE_DBM = _intersect(
    CommunicationDistanceModel.TRANSMIT_POWER_RANGE,
    CommunicationAntiJamModel.SIGNAL_POWER_RANGE,
    (-50.0, 50.0),
)
NOISE_POWER_RANGE_DBM = CommunicationAntiJamModel.NOISE_POWER_RANGE
DISTANCE_RANGE_KM = (0.001, 1000.0)

JAMMER_FREQUENCY_RANGE_MHZ = _intersect((1.0, 30_000.0), _khz_to_mhz(CommunicationJammerModel.FREQUENCY_RANGE))
JAMMER_BANDWIDTH_RANGE_MHZ = _intersect(BANDWIDTH_RANGE_MHZ, _khz_to_mhz(CommunicationJammerModel.BANDWIDTH_RANGE))
JAMMER_DISTANCE_RANGE_KM = CommunicationJammerModel.RANGE_KM
JAMMER_DENSITY_RANGE = CommunicationAntiJamModel.JAMMER_DENSITY_RANGE

DEFAULT_PACKET_LENGTH_BITS = 8000
PROCESSING_DELAY_MS = 1.0
RETRANSMISSION_DELAY_MS = 2.0

# Link is considered up only when all three hold
CONNECTION_MIN_SNR_DB = 0.0
CONNECTION_MAX_BER = 0.1
CONNECTION_MAX_PACKET_LOSS = 0.5

NOT_JAMMED_JS_RATIO_DB = -100.0
SNR_MARGIN_DB = 10.0
TARGET_DATA_RATE_MBPS = 10.0
ASSUMED_SPECTRAL_EFFICIENCY = 2.0
MIN_OPTIMIZED_POWER_DBM = -45.0

COVERAGE_START_KM = 0.1
COVERAGE_END_KM = 100.0
COVERAGE_STEP_KM = 0.5


def _in(value: float, bounds) -> bool:
    return bounds[0] <= value <= bounds[1]


def bpsk_bit_error_rate(snr_db: float) -> float:
    ber = 0.5 * erfc(sqrt(10.0 ** (snr_db / 10.0)))
    return max(MIN_BER, min(MAX_BER, ber))


def sweep_points(start: float, end: float, step: float) -> List[float]:
    """Grid ``start + k * step`` up to and including ``end``."""
    if step <= 0:
        raise InvalidParameterError(f"sweep step must be positive, got {step}")
    if start > end:
        raise InvalidParameterError(f"sweep start {start} is above end {end}")
    tolerance = step * 1e-9
    points = []
    k = 0
    while True:
        value = start + k * step
        if value > end + tolerance:
            break
        points.append(min(value, end) if abs(value - end) <= tolerance else value)
        k += 1
    return points


def environment_errors(env: CommunicationEnvironment) -> List[str]:
    """Human readable range violations of a link parameter set (empty when valid)."""
    errors = []
    if not _in(env.frequency_mhz, FREQUENCY_RANGE_MHZ):
        errors.append(f"frequency_mhz={env.frequency_mhz} outside {FREQUENCY_RANGE_MHZ}")
    if not _in(env.bandwidth_mhz, BANDWIDTH_RANGE_MHZ):
        errors.append(f"bandwidth_mhz={env.bandwidth_mhz} outside {BANDWIDTH_RANGE_MHZ}")
    if not _in(env.transmit_power_dbm, TRANSMIT_POWER_RANGE_DBM):
        errors.append(f"transmit_power_dbm={env.transmit_power_dbm} outside {TRANSMIT_POWER_RANGE_DBM}")
    if not _in(env.distance_km, DISTANCE_RANGE_KM):
        errors.append(f"distance_km={env.distance_km} outside {DISTANCE_RANGE_KM}")
    if not _in(env.noise_power_dbm, NOISE_POWER_RANGE_DBM):
        errors.append(f"noise_power_dbm={env.noise_power_dbm} outside {NOISE_POWER_RANGE_DBM}")
    if not isinstance(env.environment_type, EnvironmentType):
        errors.append(f"unknown environment_type {env.environment_type!r}")
    return errors


def jamming_errors(jamming: JammingEnvironment) -> List[str]:
    errors = []
    if not CommunicationJammerModel.is_power_valid(jamming.jammer_power_dbm):
        errors.append(f"jammer_power_dbm={jamming.jammer_power_dbm} outside {CommunicationJammerModel.POWER_RANGE}")
    if not _in(jamming.jammer_frequency_mhz, JAMMER_FREQUENCY_RANGE_MHZ):
        errors.append(f"jammer_frequency_mhz={jamming.jammer_frequency_mhz} outside {JAMMER_FREQUENCY_RANGE_MHZ}")
    if not _in(jamming.jammer_bandwidth_mhz, JAMMER_BANDWIDTH_RANGE_MHZ):
        errors.append(f"jammer_bandwidth_mhz={jamming.jammer_bandwidth_mhz} outside {JAMMER_BANDWIDTH_RANGE_MHZ}")
    if not _in(jamming.jammer_distance_km, JAMMER_DISTANCE_RANGE_KM):
        errors.append(f"jammer_distance_km={jamming.jammer_distance_km} outside {JAMMER_DISTANCE_RANGE_KM}")
    if not _in(jamming.jammer_density, JAMMER_DENSITY_RANGE):
        errors.append(f"jammer_density={jamming.jammer_density} outside {JAMMER_DENSITY_RANGE}")
    if any(f <= 0 for f in jamming.jammer_frequencies_mhz):
        errors.append("jammer_frequencies_mhz must all be positive")
    return errors


class LinkBudgetOrchestrator:
    """Composite link assessment with a one-shot result cache."""

    def __init__(
        self,
        scenario: CommunicationScenario = CommunicationScenario.NORMAL,
        packet_length_bits: int = DEFAULT_PACKET_LENGTH_BITS,
    ):
        if packet_length_bits <= 0:
            raise InvalidParameterError(f"packet_length_bits must be positive, got {packet_length_bits}")
        self._packet_length_bits = packet_length_bits
        self._config_store = EnvironmentConfigStore()
        self._signal_model = SignalTransmissionModel()
        self._distance_model = CommunicationDistanceModel(config_store=self._config_store)
        self._receive_model = CommunicationReceiveModel()
        self._jammer_model = CommunicationJammerModel()
        self._anti_jam_model = CommunicationAntiJamModel()

        self._environment = CommunicationEnvironment()
        self._jamming = JammingEnvironment()
        self._scenario = CommunicationScenario.NORMAL
        self._cached: Optional[LinkStatus] = None

        if not self.set_scenario(scenario):
            raise InvalidParameterError(f"unknown scenario {scenario!r}")

    # Accessors return copies; change state through the setters below

    @property
    def scenario(self) -> CommunicationScenario:
        return self._scenario

    @property
    def environment(self) -> CommunicationEnvironment:
        return self._environment.model_copy()

    @property
    def jamming_environment(self) -> JammingEnvironment:
        return self._jamming.model_copy(deep=True)

    @property
    def packet_length_bits(self) -> int:
        return self._packet_length_bits

    @property
    def config_store(self) -> EnvironmentConfigStore:
        return copy.deepcopy(self._config_store)

    @property
    def signal_model(self) -> SignalTransmissionModel:
        return copy.deepcopy(self._signal_model)

    @property
    def distance_model(self) -> CommunicationDistanceModel:
        return copy.deepcopy(self._distance_model)

    @property
    def receive_model(self) -> CommunicationReceiveModel:
        return copy.deepcopy(self._receive_model)

    @property
    def jammer_model(self) -> CommunicationJammerModel:
        return copy.deepcopy(self._jammer_model)

    @property
    def anti_jam_model(self) -> CommunicationAntiJamModel:
        return copy.deepcopy(self._anti_jam_model)

    # Synchronisation

    _STATE_ATTRS = (
        "_config_store",
        "_signal_model",
        "_distance_model",
        "_receive_model",
        "_jammer_model",
        "_anti_jam_model",
        "_environment",
        "_jamming",
        "_scenario",
    )

    def invalidate_cache(self) -> None:
        self._cached = None

    def _sync_models(self) -> List[str]:
        """Push the shared link and jamming parameters into every sub-model.

        Returns the names of the values a sub-model refused; empty when every
        sub-model took its value.
        """
        env = self._environment
        jam = self._jamming
        frequency_khz = env.frequency_mhz * 1000.0
        bandwidth_khz = env.bandwidth_mhz * 1000.0
        refused: List[str] = []

        def push(name: str, accepted: bool) -> None:
            if not accepted:
                refused.append(name)

        push("transmitter frequency", self._signal_model.tune(frequency_khz))
        push("transmitter bandwidth", self._signal_model.set_signal_bandwidth(bandwidth_khz))
        push("transmitter power", self._signal_model.set_transmit_power(dbm_to_watts(env.transmit_power_dbm)))

        push("distance model environment", self._distance_model.set_environment_type(env.environment_type))
        push("distance model power", self._distance_model.set_transmit_power(env.transmit_power_dbm))

        signal_dbm = self._signal_strength()
        push("receiver bandwidth", self._receive_model.set_bandwidth(bandwidth_khz))
        push("received power", self._receive_model.set_received_power(signal_dbm))

        if jam.is_jammed:
            self._jammer_model.set_jammer_type(jam.jammer_type)
            push("jammer power", self._jammer_model.set_power(jam.jammer_power_dbm))
            push("jammer frequency", self._jammer_model.set_frequency(jam.jammer_frequency_mhz * 1000.0))
            push("jammer bandwidth", self._jammer_model.set_bandwidth(jam.jammer_bandwidth_mhz * 1000.0))
            push("jammer target frequency", self._jammer_model.set_target_frequency(frequency_khz))
            push("jammer target bandwidth", self._jammer_model.set_target_bandwidth(bandwidth_khz))
            push("jammer target distance", self._jammer_model.set_target_distance(jam.jammer_distance_km))
            push("jammer target power", self._jammer_model.set_target_power(signal_dbm))

        push("anti-jam bandwidth", self._anti_jam_model.set_system_bandwidth(env.bandwidth_mhz))
        push("anti-jam signal power", self._anti_jam_model.set_signal_power(env.transmit_power_dbm))
        push("anti-jam noise power", self._anti_jam_model.set_noise_power(env.noise_power_dbm))
        push("anti-jam jammer density", self._anti_jam_model.set_jammer_density(jam.jammer_density))
        if jam.is_jammed:
            push("anti-jam interference", self._anti_jam_model.set_interference_level(jam.jammer_power_dbm))

        self.invalidate_cache()
        return refused

    def _commit(self, change: Callable[[], object], what: str) -> bool:
        """Apply ``change`` and re-synchronise, or restore everything if a sub-model refuses."""
        saved = copy.deepcopy({name: getattr(self, name) for name in self._STATE_ATTRS})
        change()
        refused = self._sync_models()
        if refused:
            logger.debug("Rejected %s: sub-models refused %s", what, ", ".join(refused))
            for name, value in saved.items():
                setattr(self, name, value)
            return False
        return True

    # Setters

    def set_scenario(self, scenario: CommunicationScenario) -> bool:
        if not isinstance(scenario, CommunicationScenario):
            logger.debug("Rejected scenario %r", scenario)
            return False

        def change() -> None:
            self._scenario = scenario
            if scenario == CommunicationScenario.NORMAL:
                self._jamming.is_jammed = False
            elif scenario == CommunicationScenario.JAMMED:
                self._jamming.is_jammed = True
            elif scenario == CommunicationScenario.ANTI_JAM:
                self._jamming.is_jammed = True
                self._anti_jam_model.set_strategy(AntiJamStrategy.ADAPTIVE)

        if not self._commit(change, f"scenario {scenario.value}"):
            return False
        logger.debug("Scenario set to %s (jammed=%s)", scenario.value, self._jamming.is_jammed)
        return True

    def set_environment(self, env: CommunicationEnvironment) -> bool:
        errors = environment_errors(env)
        if errors:
            logger.debug("Rejected link parameters: %s", "; ".join(errors))
            return False

        def change() -> None:
            self._environment = env.model_copy()

        return self._commit(change, "link parameters")

    def set_jamming_environment(self, jamming: JammingEnvironment) -> bool:
        errors = jamming_errors(jamming)
        if errors:
            logger.debug("Rejected jamming parameters: %s", "; ".join(errors))
            return False

        def change() -> None:
            self._jamming = jamming.model_copy(deep=True)

        return self._commit(change, "jamming parameters")

    def _set_field(self, field: str, value: float, bounds) -> bool:
        if not _in(value, bounds):
            logger.debug("Rejected %s=%s", field, value)
            return False
        return self._commit(lambda: setattr(self._environment, field, value), f"{field}={value}")

    def set_frequency(self, frequency_mhz: float) -> bool:
        return self._set_field("frequency_mhz", frequency_mhz, FREQUENCY_RANGE_MHZ)

    def set_bandwidth(self, bandwidth_mhz: float) -> bool:
        return self._set_field("bandwidth_mhz", bandwidth_mhz, BANDWIDTH_RANGE_MHZ)

    def set_transmit_power(self, power_dbm: float) -> bool:
        return self._set_field("transmit_power_dbm", power_dbm, TRANSMIT_POWER_RANGE_DBM)

    def set_noise_power(self, noise_dbm: float) -> bool:
        return self._set_field("noise_power_dbm", noise_dbm, NOISE_POWER_RANGE_DBM)

    def set_distance(self, distance_km: float) -> bool:
        return self._set_field("distance_km", distance_km, DISTANCE_RANGE_KM)

    def set_environment_type(self, env_type: EnvironmentType) -> bool:
        if not isinstance(env_type, EnvironmentType):
            logger.debug("Rejected environment type %r", env_type)
            return False
        return self._commit(
            lambda: setattr(self._environment, "environment_type", env_type), f"environment {env_type.value}"
        )

    def set_environment_config(self, env_type: EnvironmentType, profile: ProfileLike) -> bool:
        """Replace one environment loss profile used by this orchestrator."""
        if not isinstance(env_type, EnvironmentType) or not EnvironmentConfigStore.validate_config(profile):
            logger.debug("Rejected profile for %r", env_type)
            return False
        return self._commit(
            lambda: self._config_store.set_config(env_type, profile), f"profile for {env_type.value}"
        )

    def reset_environment_configs(self) -> bool:
        return self._commit(self._config_store.reset_to_defaults, "default environment profiles")

    # Composite quantities

    def _signal_strength(self) -> float:
        env = self._environment
        path_loss = self._distance_model.calculate_total_path_loss(env.distance_km, env.frequency_mhz)
        return env.transmit_power_dbm - path_loss

    def _snr(self, signal_dbm: float) -> float:
        snr = signal_dbm - self._environment.noise_power_dbm
        if self._jamming.is_jammed:
            snr -= self._jammer_model.calculate_jammer_to_signal_ratio()
        if self._scenario == CommunicationScenario.ANTI_JAM:
            snr += self._anti_jam_model.calculate_anti_jam_gain()
        return snr

    def _throughput(self, snr_db: float, ber: float) -> float:
        """Shannon capacity in Mbps scaled by a BER-driven efficiency."""
        capacity = self._environment.bandwidth_mhz * log2(1.0 + 10.0 ** (snr_db / 10.0))
        efficiency = max(0.1, min(1.0, 0.9 - 0.5 * ber))
        return capacity * efficiency

    def _latency(self, ber: float) -> float:
        propagation_ms = self._environment.distance_km / LIGHT_SPEED_KM_S * 1000.0
        return propagation_ms + PROCESSING_DELAY_MS + ber * RETRANSMISSION_DELAY_MS

    def _packet_loss(self, ber: float) -> float:
        loss = 1.0 - (1.0 - ber) ** self._packet_length_bits
        return max(0.0, min(1.0, loss))

    @staticmethod
    def assess_quality(snr_db: float, ber: float, packet_loss: float) -> CommunicationQuality:
        score = 0
        if snr_db > 20:
            score += 2
        elif snr_db > 10:
            score += 1
        elif snr_db < 0:
            score -= 1

        if ber < 1e-6:
            score += 2
        elif ber < 1e-4:
            score += 1
        elif ber > 1e-2:
            score -= 1

        if packet_loss < 0.01:
            score += 1
        elif packet_loss > 0.1:
            score -= 1

        if score >= 4:
            return CommunicationQuality.EXCELLENT
        if score >= 2:
            return CommunicationQuality.GOOD
        if score >= 0:
            return CommunicationQuality.FAIR
        if score >= -2:
            return CommunicationQuality.POOR
        return CommunicationQuality.FAILED

    def calculate_link_status(self) -> LinkStatus:
        if self._cached is not None:
            return self._cached

        signal = self._signal_strength()
        snr = self._snr(signal)
        if not (isfinite(signal) and isfinite(snr)):
            raise CalculationError(f"link budget diverged (signal={signal}, snr={snr})")
        ber = bpsk_bit_error_rate(snr)
        throughput = self._throughput(snr, ber)
        latency = self._latency(ber)
        packet_loss = self._packet_loss(ber)
        quality = self.assess_quality(snr, ber, packet_loss)
        connected = snr > CONNECTION_MIN_SNR_DB and ber < CONNECTION_MAX_BER and packet_loss < CONNECTION_MAX_PACKET_LOSS

        status = LinkStatus(
            is_connected=connected,
            signal_strength_dbm=signal,
            snr_db=snr,
            bit_error_rate=ber,
            throughput_mbps=throughput,
            latency_ms=latency,
            packet_loss_rate=packet_loss,
            quality=quality,
            status_description=(
                f"Signal: {signal:.1f} dBm, SNR: {snr:.1f} dB, "
                f"BER: {ber:.2e}, Throughput: {throughput:.2f} Mbps"
            ),
        )
        logger.debug("Link status recomputed: %s", status.status_description)
        self._cached = status
        return status

    def calculate_performance(self) -> PerformanceSummary:
        status = self.calculate_link_status()
        data_rate_bps = status.throughput_mbps * 1e6
        return PerformanceSummary(
            effective_range_km=self._distance_model.calculate_effective_distance(),
            max_data_rate_mbps=status.throughput_mbps,
            power_efficiency_bps_per_w=data_rate_bps / dbm_to_watts(self._environment.transmit_power_dbm),
            spectral_efficiency_bps_per_hz=data_rate_bps / (self._environment.bandwidth_mhz * 1e6),
            reliability=1.0 - min(1.0, status.bit_error_rate * 1000.0),
            availability=1.0 / (1.0 + exp(-(status.snr_db - 5.0) / 2.0)),
            jammer_resistance=self._anti_jam_model.calculate_jammer_resistance(),
            interception_resistance=self._anti_jam_model.calculate_interception_resistance(),
        )

    # Range, power and frequency planning

    def calculate_communication_range(self) -> float:
        return self._distance_model.calculate_effective_distance()

    def calculate_required_power(self, target_range_km: float) -> float:
        """Transmit power (dBm) giving a 10 dB SNR at ``target_range_km``."""
        if target_range_km <= 0:
            raise InvalidParameterError(f"target range must be positive, got {target_range_km}")
        path_loss = self._distance_model.calculate_total_path_loss(target_range_km, self._environment.frequency_mhz)
        return self._environment.noise_power_dbm + SNR_MARGIN_DB + path_loss

    def calculate_optimal_frequency(self) -> float:
        profile = self._config_store.get_config(self._environment.environment_type)
        frequency = 2400.0 / profile.frequency_factor
        if profile.path_loss_exponent > 3.0:
            frequency *= 0.7
        elif profile.path_loss_exponent < 2.5:
            frequency *= 1.3
        return max(400.0, min(6000.0, frequency))

    def calculate_optimal_bandwidth(self) -> float:
        return TARGET_DATA_RATE_MBPS / ASSUMED_SPECTRAL_EFFICIENCY

    # Jamming analysis

    def calculate_jammer_effectiveness(self) -> float:
        if not self._jamming.is_jammed:
            return 0.0
        return self._jammer_model.calculate_jammer_effectiveness()

    def calculate_anti_jam_effectiveness(self) -> float:
        return self._anti_jam_model.calculate_protection_effectiveness()

    def calculate_jammer_to_signal_ratio(self) -> float:
        if not self._jamming.is_jammed:
            return NOT_JAMMED_JS_RATIO_DB
        return self._jammer_model.calculate_jammer_to_signal_ratio()

    def calculate_required_anti_jam_gain(self, target_ber: float) -> float:
        return self._anti_jam_model.calculate_required_anti_jam_gain(target_ber)

    def calculate_jammer_coverage(self) -> List[float]:
        """Jammer effectiveness against targets from 0.1 km to 100 km in 0.5 km steps."""
        if not self._jamming.is_jammed:
            return []
        return [
            self._jammer_model.effectiveness_at_distance(d)
            for d in sweep_points(COVERAGE_START_KM, COVERAGE_END_KM, COVERAGE_STEP_KM)
        ]

    # Optimisation, each returns a new parameter set

    def optimize_for_range(self, target_range_km: float) -> CommunicationEnvironment:
        return self._environment.model_copy(
            update={
                "transmit_power_dbm": self.calculate_required_power(target_range_km),
                "frequency_mhz": self.calculate_optimal_frequency(),
            }
        )

    def optimize_for_data_rate(self, target_rate_mbps: float) -> CommunicationEnvironment:
        if target_rate_mbps <= 0:
            raise InvalidParameterError(f"target data rate must be positive, got {target_rate_mbps}")
        bandwidth = target_rate_mbps / ASSUMED_SPECTRAL_EFFICIENCY
        required_snr = 10.0 * log10(2.0 ** (target_rate_mbps / bandwidth) - 1.0)
        return self._environment.model_copy(
            update={
                "bandwidth_mhz": bandwidth,
                "transmit_power_dbm": self._environment.noise_power_dbm + required_snr + SNR_MARGIN_DB,
            }
        )

    def optimize_for_power_efficiency(self) -> CommunicationEnvironment:
        # 10 dB minimum SNR plus 3 dB margin
        power = max(self._environment.noise_power_dbm + 13.0, MIN_OPTIMIZED_POWER_DBM)
        return self._environment.model_copy(
            update={"transmit_power_dbm": power, "frequency_mhz": self.calculate_optimal_frequency()}
        )

    def optimize_for_jammer_resistance(self) -> CommunicationEnvironment:
        gain = self._anti_jam_model.calculate_anti_jam_gain()
        frequency = self._environment.frequency_mhz
        if gain > 20.0:
            frequency *= 1.1
        elif gain < 10.0:
            frequency *= 0.9
        return self._environment.model_copy(
            update={
                "transmit_power_dbm": self._environment.transmit_power_dbm
                + self._anti_jam_model.calculate_required_anti_jam_gain(1e-6),
                "frequency_mhz": frequency,
            }
        )

    # Sweeps

    def what_if(self) -> "LinkBudgetOrchestrator":
        """Independent copy for what-if evaluation."""
        return copy.deepcopy(self)

    def _sweep(
        self, setter: Callable[["LinkBudgetOrchestrator", float], bool], name: str, values: Iterable[float]
    ) -> Dict[float, LinkStatus]:
        trial = self.what_if()
        results: Dict[float, LinkStatus] = {}
        for value in values:
            if not setter(trial, value):
                raise InvalidParameterError(f"{name}={value} cannot be applied to this link")
            results[value] = trial.calculate_link_status()
        return results

    def analyze_frequency_range(self, start_mhz: float, end_mhz: float, step_mhz: float) -> Dict[float, LinkStatus]:
        return self._sweep(
            LinkBudgetOrchestrator.set_frequency, "frequency_mhz", sweep_points(start_mhz, end_mhz, step_mhz)
        )

    def analyze_power_range(self, start_dbm: float, end_dbm: float, step_db: float) -> Dict[float, LinkStatus]:
        return self._sweep(
            LinkBudgetOrchestrator.set_transmit_power, "transmit_power_dbm", sweep_points(start_dbm, end_dbm, step_db)
        )

    def analyze_distance_range(self, start_km: float, end_km: float, step_km: float) -> Dict[float, LinkStatus]:
        return self._sweep(
            LinkBudgetOrchestrator.set_distance, "distance_km", sweep_points(start_km, end_km, step_km)
        )

    def analyze_multiple_scenarios(
        self, scenarios: Iterable[CommunicationScenario]
    ) -> Dict[CommunicationScenario, LinkStatus]:
        results: Dict[CommunicationScenario, LinkStatus] = {}
        for scenario in scenarios:
            trial = self.what_if()
            if not trial.set_scenario(scenario):
                raise InvalidParameterError(f"scenario {scenario!r} cannot be applied to this link")
            results[scenario] = trial.calculate_link_status()
        return results

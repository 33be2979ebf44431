"""Receiver model: noise floor, SNR, modulation BER and detection checks."""
from __future__ import annotations

import logging
from enum import Enum, auto
from math import erfc, exp, log10, pi, sqrt
from typing import Dict, Optional, Tuple

from commlink.core.errors import require_in_range
from commlink.rf.constants import K_BOLTZMANN, MAX_BER, MIN_BER

logger = logging.getLogger(__name__)

# Below this SNR every modulation is treated as a coin toss
BER_FLOOR_SNR_DB = -10.0


class ReceiverType(Enum):
    SUPERHETERODYNE = auto()
    DIRECT_CONVERSION = auto()
    SOFTWARE_DEFINED = auto()


class ReceiveModulation(str, Enum):
    BPSK = "bpsk"
    QPSK = "qpsk"
    QAM16 = "16qam"
    FM = "fm"
    AM = "am"


# Required SNR (dB) for BER <= 1e-6, <= 1e-4, <= 1e-2 and anything looser
REQUIRED_SNR_TABLE: Dict[ReceiveModulation, Tuple[float, float, float, float]] = {
    ReceiveModulation.BPSK: (10.5, 8.5, 6.0, 4.0),
    ReceiveModulation.QPSK: (10.5, 8.5, 6.0, 4.0),
    ReceiveModulation.QAM16: (16.0, 12.0, 9.0, 7.0),
    ReceiveModulation.FM: (12.0, 9.0, 6.0, 4.0),
    ReceiveModulation.AM: (14.0, 11.0, 8.0, 6.0),
}


def modulation_ber(snr_db: float, modulation: ReceiveModulation) -> float:
    """
    Approximate bit error rate for an AWGN channel.

    The FM and AM branches are threshold heuristics rather than exact
    closed forms.

    Args:
        snr_db: Signal-to-noise ratio in dB
        modulation: Receive modulation

    Returns:
        BER clamped to [1e-10, 0.5]
    """
    if snr_db < BER_FLOOR_SNR_DB:
        return MAX_BER

    snr = 10.0 ** (snr_db / 10.0)

    if modulation == ReceiveModulation.BPSK:
        ber = 0.5 * erfc(sqrt(snr))
    elif modulation == ReceiveModulation.QPSK:
        ber = 0.5 * erfc(sqrt(snr / 2.0))
    elif modulation == ReceiveModulation.QAM16:
        ber = 0.375 * erfc(sqrt(0.4 * snr))
    elif modulation == ReceiveModulation.FM:
        if snr < 2.0:
            ber = 0.5 * exp(-0.5 * snr)
        else:
            ber = (1.0 / (2.0 * sqrt(pi * snr))) * exp(-snr / 2.0)
    elif modulation == ReceiveModulation.AM:
        if snr < 0.1:
            ber = 0.5
        else:
            ber = 0.5 * (1.0 - sqrt(snr / (snr + 2.0)))
    else:
        return MAX_BER

    return max(MIN_BER, min(MAX_BER, ber))


def required_snr_for_ber(modulation: ReceiveModulation, target_ber: float = 1e-6) -> float:
    strict, good, fair, loose = REQUIRED_SNR_TABLE.get(modulation, REQUIRED_SNR_TABLE[ReceiveModulation.BPSK])
    if target_ber <= 1e-6:
        return strict
    if target_ber <= 1e-4:
        return good
    if target_ber <= 1e-2:
        return fair
    return loose


class CommunicationReceiveModel:
    """Receiver front-end with a noise floor kept in sync with its inputs.

    Bandwidth is in kHz, temperature in K, powers in dBm.
    """

    SENSITIVITY_RANGE = (-150.0, -30.0)
    NOISE_FIGURE_RANGE = (0.0, 20.0)
    BANDWIDTH_RANGE = (0.1, 10_000.0)
    TEMPERATURE_RANGE = (200.0, 400.0)
    ANTENNA_GAIN_RANGE = (-20.0, 50.0)
    RECEIVED_POWER_RANGE = (-200.0, 50.0)
    DETECTION_THRESHOLD_RANGE = (0.0, 30.0)

    def __init__(
        self,
        sensitivity_dbm: float = -100.0,
        noise_figure_db: float = 3.0,
        bandwidth_khz: float = 25.0,
        modulation: ReceiveModulation = ReceiveModulation.BPSK,
        receiver_type: ReceiverType = ReceiverType.SUPERHETERODYNE,
        temperature_k: float = 290.0,
        antenna_gain_dbi: float = 0.0,
        detection_threshold_db: float = 3.0,
    ):
        self._sensitivity_dbm = require_in_range("sensitivity_dbm", sensitivity_dbm, *self.SENSITIVITY_RANGE)
        self._noise_figure_db = require_in_range("noise_figure_db", noise_figure_db, *self.NOISE_FIGURE_RANGE)
        self._bandwidth_khz = require_in_range("bandwidth_khz", bandwidth_khz, *self.BANDWIDTH_RANGE)
        self._temperature_k = require_in_range("temperature_k", temperature_k, *self.TEMPERATURE_RANGE)
        self._antenna_gain_dbi = require_in_range("antenna_gain_dbi", antenna_gain_dbi, *self.ANTENNA_GAIN_RANGE)
        self._detection_threshold_db = require_in_range(
            "detection_threshold_db", detection_threshold_db, *self.DETECTION_THRESHOLD_RANGE
        )
        self._modulation = modulation
        self._receiver_type = receiver_type
        self._received_power_dbm = -120.0
        self._noise_floor_dbm = 0.0
        self._update_noise_floor()

    def _update_noise_floor(self) -> None:
        self._noise_floor_dbm = self.calculate_system_noise()

    @staticmethod
    def _in(value: float, bounds: Tuple[float, float]) -> bool:
        return bounds[0] <= value <= bounds[1]

    # Noise

    def calculate_thermal_noise(self) -> float:
        """kTB in dBm with bandwidth converted from kHz to Hz."""
        bandwidth_hz = self._bandwidth_khz * 1000.0
        return 10.0 * log10(K_BOLTZMANN * self._temperature_k * bandwidth_hz * 1000.0)

    def calculate_system_noise(self) -> float:
        return self.calculate_thermal_noise() + self._noise_figure_db

    @property
    def noise_floor_dbm(self) -> float:
        return self._noise_floor_dbm

    # Getters

    @property
    def sensitivity_dbm(self) -> float:
        return self._sensitivity_dbm

    @property
    def noise_figure_db(self) -> float:
        return self._noise_figure_db

    @property
    def bandwidth_khz(self) -> float:
        return self._bandwidth_khz

    @property
    def modulation(self) -> ReceiveModulation:
        return self._modulation

    @property
    def receiver_type(self) -> ReceiverType:
        return self._receiver_type

    @property
    def temperature_k(self) -> float:
        return self._temperature_k

    @property
    def antenna_gain_dbi(self) -> float:
        return self._antenna_gain_dbi

    @property
    def received_power_dbm(self) -> float:
        return self._received_power_dbm

    @property
    def detection_threshold_db(self) -> float:
        return self._detection_threshold_db

    # Setters

    def set_sensitivity(self, dbm: float) -> bool:
        if not self._in(dbm, self.SENSITIVITY_RANGE):
            logger.debug("Rejected sensitivity %s dBm", dbm)
            return False
        self._sensitivity_dbm = dbm
        return True

    def set_noise_figure(self, db: float) -> bool:
        if not self._in(db, self.NOISE_FIGURE_RANGE):
            logger.debug("Rejected noise figure %s dB", db)
            return False
        self._noise_figure_db = db
        self._update_noise_floor()
        return True

    def set_bandwidth(self, khz: float) -> bool:
        if not self._in(khz, self.BANDWIDTH_RANGE):
            logger.debug("Rejected receiver bandwidth %s kHz", khz)
            return False
        self._bandwidth_khz = khz
        self._update_noise_floor()
        return True

    def set_temperature(self, kelvin: float) -> bool:
        if not self._in(kelvin, self.TEMPERATURE_RANGE):
            logger.debug("Rejected ambient temperature %s K", kelvin)
            return False
        self._temperature_k = kelvin
        self._update_noise_floor()
        return True

    def set_antenna_gain(self, dbi: float) -> bool:
        if not self._in(dbi, self.ANTENNA_GAIN_RANGE):
            logger.debug("Rejected antenna gain %s dBi", dbi)
            return False
        self._antenna_gain_dbi = dbi
        return True

    def set_received_power(self, dbm: float) -> bool:
        if not self._in(dbm, self.RECEIVED_POWER_RANGE):
            logger.debug("Rejected received power %s dBm", dbm)
            return False
        self._received_power_dbm = dbm
        return True

    def set_detection_threshold(self, db: float) -> bool:
        if not self._in(db, self.DETECTION_THRESHOLD_RANGE):
            logger.debug("Rejected detection threshold %s dB", db)
            return False
        self._detection_threshold_db = db
        return True

    def set_modulation(self, modulation: ReceiveModulation) -> None:
        self._modulation = modulation

    def set_receiver_type(self, receiver_type: ReceiverType) -> None:
        self._receiver_type = receiver_type

    # Link quality

    def calculate_snr(self) -> float:
        return self._received_power_dbm - self._noise_floor_dbm

    def calculate_bit_error_rate(self) -> float:
        return modulation_ber(self.calculate_snr(), self._modulation)

    def calculate_effective_noise_power(self) -> float:
        return self._noise_floor_dbm + self._antenna_gain_dbi

    def calculate_minimum_detectable_power(self) -> float:
        return self._noise_floor_dbm + self._detection_threshold_db

    def is_signal_detectable(self) -> bool:
        return self._received_power_dbm > self.calculate_minimum_detectable_power()

    def is_signal_decodable(self, required_snr_db: Optional[float] = None) -> bool:
        """True when SNR meets ``required_snr_db``.

        Without an explicit threshold the modulation's requirement for a
        1e-6 BER is used.
        """
        if required_snr_db is None:
            required_snr_db = self.required_snr_for_ber(1e-6)
        return self.calculate_snr() >= required_snr_db

    def calculate_receive_margin(self) -> float:
        return self._received_power_dbm - self._sensitivity_dbm

    def required_snr_for_ber(self, target_ber: float = 1e-6) -> float:
        return required_snr_for_ber(self._modulation, target_ber)

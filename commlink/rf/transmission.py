"""Transmitter model: frequency band, modulation, bandwidth and power."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from commlink.core.errors import InvalidParameterError

logger = logging.getLogger(__name__)

MAX_TRANSMIT_POWER_W = 100.0


class FrequencyBand(str, Enum):
    SHORT_WAVE = "short_wave"
    ULTRA_SHORT_WAVE = "ultra_short_wave"
    MICROWAVE = "microwave"


class ModulationType(str, Enum):
    AM = "am"
    FM = "fm"
    BPSK = "bpsk"
    QPSK = "qpsk"
    QAM16 = "16qam"


@dataclass(frozen=True)
class BandLimits:
    """Frequency limits of a band in kHz."""
    min_khz: float
    max_khz: float
    default_center_khz: float

    def contains(self, frequency_khz: float) -> bool:
        return self.min_khz <= frequency_khz <= self.max_khz


BAND_LIMITS: Dict[FrequencyBand, BandLimits] = {
    FrequencyBand.SHORT_WAVE: BandLimits(1_500.0, 30_000.0, 15_750.0),
    FrequencyBand.ULTRA_SHORT_WAVE: BandLimits(30_000.0, 300_000.0, 165_000.0),
    FrequencyBand.MICROWAVE: BandLimits(300_000.0, 30_000_000.0, 15_150_000.0),
}


def band_for_frequency(frequency_khz: float) -> Optional[FrequencyBand]:
    """Return the first band containing ``frequency_khz``, or None."""
    for band, limits in BAND_LIMITS.items():
        if limits.contains(frequency_khz):
            return band
    return None


class SignalTransmissionModel:
    """Transmitter parameters with per-field validation.

    Frequencies and bandwidths are in kHz, power in W.
    """

    def __init__(
        self,
        band: FrequencyBand = FrequencyBand.SHORT_WAVE,
        center_frequency_khz: float = 10_000.0,
        modulation: ModulationType = ModulationType.FM,
        bandwidth_khz: float = 25.0,
        transmit_power_w: float = 10.0,
    ):
        if not self.is_frequency_in_band(center_frequency_khz, band):
            raise InvalidParameterError(
                f"center frequency {center_frequency_khz} kHz is outside the {band.value} band"
            )
        if bandwidth_khz <= 0:
            raise InvalidParameterError(f"signal bandwidth must be positive, got {bandwidth_khz}")
        if not 0 < transmit_power_w <= MAX_TRANSMIT_POWER_W:
            raise InvalidParameterError(f"transmit power must be in (0, 100] W, got {transmit_power_w}")

        self._band = band
        self._center_frequency_khz = center_frequency_khz
        self._modulation = modulation
        self._bandwidth_khz = bandwidth_khz
        self._transmit_power_w = transmit_power_w

    @staticmethod
    def is_frequency_in_band(frequency_khz: float, band: FrequencyBand) -> bool:
        limits = BAND_LIMITS.get(band)
        return limits is not None and limits.contains(frequency_khz)

    @property
    def frequency_band(self) -> FrequencyBand:
        return self._band

    @property
    def center_frequency_khz(self) -> float:
        return self._center_frequency_khz

    @property
    def modulation(self) -> ModulationType:
        return self._modulation

    @property
    def bandwidth_khz(self) -> float:
        return self._bandwidth_khz

    @property
    def transmit_power_w(self) -> float:
        return self._transmit_power_w

    def set_frequency_band(self, band: FrequencyBand) -> None:
        """Change band; an out-of-band centre frequency moves to the band default."""
        self._band = band
        if not self.is_frequency_in_band(self._center_frequency_khz, band):
            self._center_frequency_khz = BAND_LIMITS[band].default_center_khz
            logger.debug(
                f"Center frequency reset to {self._center_frequency_khz} kHz for band {band.value}"
            )

    def set_center_frequency(self, frequency_khz: float) -> bool:
        if not self.is_frequency_in_band(frequency_khz, self._band):
            logger.debug("Rejected center frequency %s kHz for band %s", frequency_khz, self._band.value)
            return False
        self._center_frequency_khz = frequency_khz
        return True

    def set_modulation(self, modulation: ModulationType) -> None:
        self._modulation = modulation

    def set_signal_bandwidth(self, bandwidth_khz: float) -> bool:
        if bandwidth_khz <= 0:
            logger.debug("Rejected signal bandwidth %s kHz", bandwidth_khz)
            return False
        self._bandwidth_khz = bandwidth_khz
        return True

    def set_transmit_power(self, power_w: float) -> bool:
        if not 0 < power_w <= MAX_TRANSMIT_POWER_W:
            logger.debug("Rejected transmit power %s W", power_w)
            return False
        self._transmit_power_w = power_w
        return True

    def tune(self, frequency_khz: float) -> bool:
        """Move to ``frequency_khz``, switching band when needed."""
        band = band_for_frequency(frequency_khz)
        if band is None:
            logger.debug("No band covers %s kHz", frequency_khz)
            return False
        if band != self._band:
            self.set_frequency_band(band)
        return self.set_center_frequency(frequency_khz)

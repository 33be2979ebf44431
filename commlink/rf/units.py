"""Unit conversions, auxiliary loss models and small statistics helpers."""
from __future__ import annotations

from math import log10, pi, sqrt
from typing import Sequence, Tuple

import numpy as np

from commlink.core.errors import InvalidParameterError
from commlink.domain.models import CommunicationQuality
from commlink.rf.constants import FREQ_WAVELENGTH_CONSTANT
from commlink.rf.environment import EnvironmentConfigStore, EnvironmentType


def db_to_linear(db: float) -> float:
    return 10.0 ** (db / 10.0)


def linear_to_db(linear: float) -> float:
    if linear <= 0:
        raise InvalidParameterError(f"linear value must be positive, got {linear}")
    return 10.0 * log10(linear)


def dbm_to_watts(dbm: float) -> float:
    return 10.0 ** ((dbm - 30.0) / 10.0)


def watts_to_dbm(watts: float) -> float:
    if watts <= 0:
        raise InvalidParameterError(f"power must be positive, got {watts} W")
    return 10.0 * log10(watts) + 30.0


def frequency_to_wavelength(frequency_mhz: float) -> float:
    """Wavelength in m for a frequency in MHz."""
    if frequency_mhz <= 0:
        raise InvalidParameterError(f"frequency_mhz must be positive, got {frequency_mhz}")
    return FREQ_WAVELENGTH_CONSTANT / frequency_mhz


def wavelength_to_frequency(wavelength_m: float) -> float:
    if wavelength_m <= 0:
        raise InvalidParameterError(f"wavelength must be positive, got {wavelength_m}")
    return FREQ_WAVELENGTH_CONSTANT / wavelength_m


# Auxiliary losses, all in dB with frequency in MHz and distance in km

def atmospheric_loss(frequency_mhz: float, distance_km: float, humidity_pct: float = 50.0) -> float:
    """Oxygen plus water-vapour absorption along the path."""
    f_ghz = frequency_mhz / 1000.0
    oxygen = 0.0067 * f_ghz * f_ghz if f_ghz < 10.0 else 0.067 * f_ghz
    water = 0.05 * (humidity_pct * 0.1) * f_ghz if f_ghz > 1.0 else 0.0
    return (oxygen + water) * distance_km


def rain_loss(frequency_mhz: float, distance_km: float, rain_rate_mm_h: float) -> float:
    """Specific attenuation k * R^alpha over the path."""
    f_ghz = frequency_mhz / 1000.0
    if f_ghz < 1.0:
        k, alpha = 0.0001, 0.5
    elif f_ghz < 10.0:
        k, alpha = 0.001 * f_ghz ** 1.5, 1.0
    else:
        k, alpha = 0.01 * f_ghz ** 0.5, 1.2
    return k * rain_rate_mm_h ** alpha * distance_km


def foliage_loss(frequency_mhz: float, distance_km: float, foliage_density: float) -> float:
    f_ghz = frequency_mhz / 1000.0
    return 0.2 * f_ghz ** 0.3 * foliage_density * distance_km


def urban_loss(frequency_mhz: float, distance_km: float, building_density: float) -> float:
    """Hata-style mobile antenna correction plus a building density term."""
    if distance_km <= 0:
        raise InvalidParameterError(f"distance_km must be positive, got {distance_km}")
    correction = 3.2 * log10(11.75 * 30.0) ** 2 - 4.97 if frequency_mhz > 150.0 else 0.0
    return (correction + building_density * 10.0) * log10(distance_km)


# Statistics

def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def standard_deviation(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1 denominator)."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def percentile(values: Sequence[float], pct: float) -> float:
    """Linearly interpolated percentile, ``pct`` in [0, 100]."""
    if len(values) == 0:
        return 0.0
    if not 0.0 <= pct <= 100.0:
        raise InvalidParameterError(f"percentile must be in [0, 100], got {pct}")
    return float(np.percentile(values, pct))


def confidence_interval(values: Sequence[float], confidence: float = 0.95) -> Tuple[float, float]:
    """Normal-approximation interval around the mean."""
    n = len(values)
    if n < 2:
        return 0.0, 0.0
    if confidence >= 0.99:
        z = 2.58
    elif confidence >= 0.95:
        z = 1.96
    elif confidence >= 0.90:
        z = 1.64
    else:
        z = 1.28
    center = mean(values)
    half_width = z * standard_deviation(values) / sqrt(n)
    return center - half_width, center + half_width


# Quick estimates

def quick_assess_quality(snr_db: float, ber: float) -> CommunicationQuality:
    if snr_db > 20 and ber < 1e-6:
        return CommunicationQuality.EXCELLENT
    if snr_db > 10 and ber < 1e-4:
        return CommunicationQuality.GOOD
    if snr_db > 5 and ber < 1e-2:
        return CommunicationQuality.FAIR
    if snr_db > 0 and ber < 0.1:
        return CommunicationQuality.POOR
    return CommunicationQuality.FAILED


def quick_calculate_power(
    frequency_mhz: float,
    range_km: float,
    environment_type: EnvironmentType = EnvironmentType.OPEN_FIELD,
    config_store: EnvironmentConfigStore | None = None,
) -> float:
    """Transmit power (dBm) needed to reach ``range_km`` with a -100 dBm receiver and 10 dB margin."""
    if frequency_mhz <= 0 or range_km <= 0:
        raise InvalidParameterError("frequency and range must be positive")
    profile = (config_store or EnvironmentConfigStore()).get_config(environment_type)
    wavelength = frequency_to_wavelength(frequency_mhz)
    reference_loss = 20.0 * log10(4.0 * pi / wavelength)
    path_loss = reference_loss + 10.0 * profile.path_loss_exponent * log10(range_km * 1000.0)
    frequency_penalty = profile.frequency_factor * log10(frequency_mhz / 1000.0) * 2.0
    return -100.0 + 10.0 + path_loss + profile.environment_loss_db + frequency_penalty

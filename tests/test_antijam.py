from __future__ import annotations

import pytest

from commlink.core.errors import InvalidParameterError
from commlink.rf.antijam import (
    AntiJamEffectLevel,
    AntiJamStrategy,
    AntiJamTechnique,
    CommunicationAntiJamModel,
    bpsk_ber,
)


@pytest.fixture
def model():
    return CommunicationAntiJamModel()


def test_frequency_hopping_gains(model):
    assert model.calculate_frequency_hopping_gain() == pytest.approx(20.0)
    assert model.calculate_total_processing_gain() == pytest.approx(40.0)
    assert model.calculate_anti_jam_gain() == pytest.approx(40.0)


@pytest.mark.parametrize(
    "strategy, expected",
    [
        (AntiJamStrategy.PASSIVE, 32.0),
        (AntiJamStrategy.ACTIVE, 40.0),
        (AntiJamStrategy.ADAPTIVE, 48.0),
        (AntiJamStrategy.COGNITIVE, 56.0),
    ],
)
def test_strategy_scales_gain(model, strategy, expected):
    model.set_strategy(strategy)
    assert model.calculate_anti_jam_gain() == pytest.approx(expected)


def test_other_technique_gains(model):
    assert model.calculate_total_processing_gain(AntiJamTechnique.DIRECT_SEQUENCE) == pytest.approx(50.0)
    assert model.calculate_total_processing_gain(AntiJamTechnique.TIME_HOPPING) == pytest.approx(70.0)
    assert model.calculate_total_processing_gain(AntiJamTechnique.HYBRID_SPREAD) == pytest.approx(55.0)
    assert model.calculate_total_processing_gain(AntiJamTechnique.POWER_CONTROL) == pytest.approx(23.0)
    assert model.calculate_interference_cancellation_gain() == pytest.approx(0.45)
    assert model.calculate_error_correction_gain() == pytest.approx(3.0)


def test_jammer_resistance(model):
    # (30 + 100 + 40) / (30 + 100 + 1) / 20
    assert model.calculate_jammer_resistance() == pytest.approx(0.0649, abs=1e-4)


def test_jammer_resistance_zero_when_signal_below_noise(model):
    model.set_signal_power(-110.0)
    assert model.calculate_jammer_resistance() == 0.0


def test_protection_levels(model):
    assert model.calculate_interception_resistance() == pytest.approx(0.82)
    assert model.calculate_throughput_degradation() == pytest.approx(0.0, abs=1e-6)
    assert model.evaluate_anti_jam_effect() == AntiJamEffectLevel.MEDIUM_PROTECTION
    assert model.calculate_detection_probability() == pytest.approx(1.0)


def test_heavy_jamming_degrades_prediction(model):
    assert model.predict_performance_under_jamming(30.0, 10.0) == pytest.approx(1.0, abs=1e-6)
    assert model.predict_performance_under_jamming(100.0, 10.0) < 0.05
    # interference stays untouched by what-if queries
    assert model.interference_dbm == -100.0


def test_max_tolerable_jammer_power(model):
    assert model.calculate_max_tolerable_jammer_power() == pytest.approx(60.0)


def test_required_anti_jam_gain(model):
    model.set_signal_power(-90.0)
    model.set_interference_level(-80.0)
    assert model.calculate_required_anti_jam_gain(1e-6) == pytest.approx(66.99, abs=0.01)
    assert model.calculate_required_anti_jam_gain(0.7) == 0.0


def test_optimal_technique_is_pure(model):
    assert model.calculate_optimal_technique() == AntiJamTechnique.TIME_HOPPING
    assert model.technique == AntiJamTechnique.FREQUENCY_HOPPING


def test_optimal_parameters(model):
    assert model.calculate_optimal_processing_gain() == pytest.approx(10.0)
    assert model.calculate_optimal_hopping_rate() == pytest.approx(1100.0)
    assert model.calculate_optimal_hopping_channels() == 10
    model.set_technique(AntiJamTechnique.DIRECT_SEQUENCE)
    assert model.calculate_optimal_hopping_rate() == model.hopping.hopping_rate_hz
    assert model.calculate_optimal_hopping_channels() == model.hopping.channels == 100


def test_combined_technique_effect(model):
    combined = model.calculate_combined_technique_effect(
        [AntiJamTechnique.FREQUENCY_HOPPING, AntiJamTechnique.DIRECT_SEQUENCE]
    )
    assert combined == pytest.approx(40.0 + 0.8 * 50.0)
    assert model.calculate_combined_technique_effect([]) == 0.0


@pytest.mark.parametrize(
    "density, first",
    [
        (0.1, AntiJamTechnique.DIRECT_SEQUENCE),
        (0.5, AntiJamTechnique.FREQUENCY_HOPPING),
        (0.9, AntiJamTechnique.HYBRID_SPREAD),
    ],
)
def test_recommendations_follow_density(model, density, first):
    model.set_jammer_density(density)
    assert model.get_recommended_technique_combination()[0] == first


def test_adaptation_efficiency(model):
    assert model.calculate_adaptation_efficiency() == 0.0
    model.set_strategy(AntiJamStrategy.ADAPTIVE)
    assert model.calculate_adaptation_efficiency() == pytest.approx(0.099)


def test_resource_utilization(model):
    assert model.calculate_resource_utilization() == pytest.approx((0.1 + 0.8 + 0.4) / 3.0)


def test_per_technique_effectiveness(model):
    assert model.calculate_frequency_hopping_effectiveness() == pytest.approx(20.0 / 30.0)
    assert model.calculate_spread_spectrum_effectiveness() == 0.0
    model.set_technique(AntiJamTechnique.ERROR_CORRECTION)
    assert model.calculate_error_correction_effectiveness() == pytest.approx(0.15)


def test_setters_reject_out_of_range(model):
    assert model.set_processing_gain(60.0) is False
    assert model.processing_gain_db == 20.0
    assert model.set_hopping_channels(1) is False
    assert model.set_jammer_density(1.5) is False
    assert model.set_chip_rate(0) is False
    assert model.set_hopping_channels(1000) is True
    assert model.calculate_frequency_hopping_gain() == pytest.approx(30.0)


def test_constructor_validates():
    with pytest.raises(InvalidParameterError):
        CommunicationAntiJamModel(noise_power_dbm=10.0)


def test_bpsk_ber_bounds():
    assert bpsk_ber(100.0) == 1e-10
    assert bpsk_ber(-100.0) <= 0.5


def test_gain_grows_with_strategy_sophistication(model):
    ordered = [
        AntiJamStrategy.PASSIVE,
        AntiJamStrategy.ACTIVE,
        AntiJamStrategy.ADAPTIVE,
        AntiJamStrategy.COOPERATIVE,
        AntiJamStrategy.COGNITIVE,
    ]
    gains = []
    for strategy in ordered:
        model.set_strategy(strategy)
        gains.append(model.calculate_anti_jam_gain())
    assert gains == sorted(gains)
    assert len(set(gains)) == len(gains)


def test_in_range_values_round_trip(model):
    assert model.set_dwell_time(2.5) is True
    assert model.hopping.dwell_time_ms == 2.5
    assert model.set_spreading_factor(128.0) is True
    assert model.spreading.spreading_factor == 128.0
    assert model.set_convergence_threshold(0.2) is False
    assert model.adaptive.convergence_threshold == 0.01

from __future__ import annotations

from math import log10

import pytest

from commlink.core.errors import InvalidParameterError
from commlink.domain.models import (
    CommunicationEnvironment,
    CommunicationQuality,
    CommunicationScenario,
    JammingEnvironment,
)
from commlink.rf.environment import DEFAULT_PROFILES, EnvironmentType
from commlink.services.link_budget import (
    NOT_JAMMED_JS_RATIO_DB,
    LinkBudgetOrchestrator,
    environment_errors,
    jamming_errors,
    sweep_points,
)


@pytest.fixture
def orchestrator():
    return LinkBudgetOrchestrator()


def test_default_link_status(orchestrator):
    status = orchestrator.calculate_link_status()
    # 20 dBm minus 114.79 dB of open-field loss at 5 km, 2.4 GHz
    assert status.signal_strength_dbm == pytest.approx(-94.79, abs=0.01)
    assert status.snr_db == pytest.approx(5.21, abs=0.01)
    assert status.bit_error_rate == pytest.approx(0.0049, abs=5e-4)
    # an 8000 bit packet almost never survives that BER
    assert status.packet_loss_rate > 0.99
    assert status.is_connected is False
    assert "SNR: 5.2 dB" in status.status_description


def test_short_link_is_excellent(orchestrator):
    assert orchestrator.set_distance(0.5) is True
    status = orchestrator.calculate_link_status()
    assert status.snr_db == pytest.approx(25.21, abs=0.01)
    assert status.quality == CommunicationQuality.EXCELLENT
    assert status.is_connected is True
    assert status.latency_ms == pytest.approx(1.0, abs=0.01)


def test_status_is_cached_until_a_change(orchestrator):
    first = orchestrator.calculate_link_status()
    assert orchestrator.calculate_link_status() is first
    orchestrator.set_transmit_power(30.0)
    second = orchestrator.calculate_link_status()
    assert second is not first
    assert second.snr_db == pytest.approx(first.snr_db + 10.0)


def test_rejected_setters_keep_state(orchestrator):
    assert orchestrator.set_frequency(50_000.0) is False
    assert orchestrator.set_transmit_power(80.0) is False
    assert orchestrator.set_distance(0.0) is False
    assert orchestrator.set_bandwidth(0.01) is False
    env = orchestrator.environment
    assert env.frequency_mhz == 2400.0
    assert env.transmit_power_dbm == 20.0
    assert env.distance_km == 5.0


def test_set_environment_validates_all_fields(orchestrator):
    bad = CommunicationEnvironment(frequency_mhz=0.5, distance_km=5000.0)
    assert len(environment_errors(bad)) == 2
    assert orchestrator.set_environment(bad) is False
    assert orchestrator.environment.frequency_mhz == 2400.0

    good = CommunicationEnvironment(frequency_mhz=900.0, transmit_power_dbm=30.0)
    assert orchestrator.set_environment(good) is True
    assert orchestrator.signal_model.center_frequency_khz == 900_000.0
    assert orchestrator.signal_model.transmit_power_w == pytest.approx(1.0)


def test_jamming_environment_validation(orchestrator):
    bad = JammingEnvironment(jammer_distance_km=0.01, jammer_density=2.0)
    assert len(jamming_errors(bad)) == 2
    assert orchestrator.set_jamming_environment(bad) is False


def test_scenarios_switch_jamming(orchestrator):
    assert orchestrator.jamming_environment.is_jammed is False
    orchestrator.set_scenario(CommunicationScenario.JAMMED)
    assert orchestrator.jamming_environment.is_jammed is True
    orchestrator.set_scenario(CommunicationScenario.RELAY)
    assert orchestrator.jamming_environment.is_jammed is True
    orchestrator.set_scenario(CommunicationScenario.NORMAL)
    assert orchestrator.jamming_environment.is_jammed is False


def test_jammed_link(orchestrator):
    orchestrator.set_scenario(CommunicationScenario.JAMMED)
    assert orchestrator.calculate_jammer_to_signal_ratio() == pytest.approx(0.76, abs=0.01)
    assert orchestrator.calculate_link_status().snr_db == pytest.approx(4.45, abs=0.01)
    assert 0.0 <= orchestrator.calculate_jammer_effectiveness() <= 1.0


def test_anti_jam_adds_gain(orchestrator):
    orchestrator.set_scenario(CommunicationScenario.ANTI_JAM)
    # frequency hopping 40 dB scaled by the adaptive strategy
    assert orchestrator.calculate_link_status().snr_db == pytest.approx(4.45 + 48.0, abs=0.01)


def test_not_jammed_defaults(orchestrator):
    assert orchestrator.calculate_jammer_to_signal_ratio() == NOT_JAMMED_JS_RATIO_DB
    assert orchestrator.calculate_jammer_effectiveness() == 0.0
    assert orchestrator.calculate_jammer_coverage() == []


def test_jammer_coverage_profile(orchestrator):
    orchestrator.set_scenario(CommunicationScenario.JAMMED)
    coverage = orchestrator.calculate_jammer_coverage()
    assert len(coverage) == 200
    assert all(0.0 <= c <= 1.0 for c in coverage)
    assert orchestrator.jammer_model.target_distance_km == 5.0


def test_required_power_and_range(orchestrator):
    assert orchestrator.calculate_required_power(5.0) == pytest.approx(24.79, abs=0.01)
    with pytest.raises(InvalidParameterError):
        orchestrator.calculate_required_power(0.0)
    assert orchestrator.calculate_communication_range() > 0.0


@pytest.mark.parametrize(
    "env_type, expected",
    [
        (EnvironmentType.OPEN_FIELD, 3120.0),
        (EnvironmentType.URBAN, 2000.0),
        (EnvironmentType.MOUNTAINOUS, 1120.0),
    ],
)
def test_optimal_frequency(orchestrator, env_type, expected):
    orchestrator.set_environment_type(env_type)
    assert orchestrator.calculate_optimal_frequency() == pytest.approx(expected)


def test_optimizers_return_new_parameters(orchestrator):
    by_rate = orchestrator.optimize_for_data_rate(20.0)
    assert by_rate.bandwidth_mhz == pytest.approx(10.0)
    assert by_rate.transmit_power_dbm == pytest.approx(-85.23, abs=0.01)

    by_range = orchestrator.optimize_for_range(5.0)
    assert by_range.frequency_mhz == pytest.approx(3120.0)
    assert by_range.transmit_power_dbm == pytest.approx(24.79, abs=0.01)

    efficient = orchestrator.optimize_for_power_efficiency()
    assert efficient.transmit_power_dbm == pytest.approx(-45.0)

    resistant = orchestrator.optimize_for_jammer_resistance()
    assert resistant.frequency_mhz == pytest.approx(2640.0)

    assert orchestrator.environment.transmit_power_dbm == 20.0
    assert orchestrator.calculate_optimal_bandwidth() == pytest.approx(5.0)


def test_performance_summary(orchestrator):
    orchestrator.set_distance(0.5)
    summary = orchestrator.calculate_performance()
    assert summary.max_data_rate_mbps > 0.0
    assert summary.reliability == pytest.approx(1.0)
    assert summary.availability > 0.99
    assert 0.0 <= summary.jammer_resistance <= 1.0


def test_distance_sweep(orchestrator):
    results = orchestrator.analyze_distance_range(1.0, 3.0, 1.0)
    assert list(results) == [1.0, 2.0, 3.0]
    snrs = [s.snr_db for s in results.values()]
    assert snrs == sorted(snrs, reverse=True)
    assert orchestrator.environment.distance_km == 5.0


def test_sweep_rejects_out_of_range_point(orchestrator):
    with pytest.raises(InvalidParameterError):
        orchestrator.analyze_power_range(40.0, 60.0, 5.0)
    with pytest.raises(InvalidParameterError):
        orchestrator.analyze_frequency_range(100.0, 200.0, 0.0)


def test_sweep_points():
    assert sweep_points(0.0, 1.0, 0.25) == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert sweep_points(0.1, 0.3, 0.1)[-1] == pytest.approx(0.3)
    with pytest.raises(InvalidParameterError):
        sweep_points(2.0, 1.0, 0.5)


def test_multiple_scenarios(orchestrator):
    results = orchestrator.analyze_multiple_scenarios(
        [CommunicationScenario.NORMAL, CommunicationScenario.JAMMED, CommunicationScenario.ANTI_JAM]
    )
    assert results[CommunicationScenario.JAMMED].snr_db < results[CommunicationScenario.NORMAL].snr_db
    assert results[CommunicationScenario.ANTI_JAM].snr_db > results[CommunicationScenario.NORMAL].snr_db
    assert orchestrator.scenario == CommunicationScenario.NORMAL


def test_what_if_copy_is_independent(orchestrator):
    trial = orchestrator.what_if()
    trial.set_distance(1.0)
    assert trial.reset_environment_configs() is True
    assert orchestrator.environment.distance_km == 5.0
    assert trial.environment.distance_km == 1.0


def test_packet_length_must_be_positive():
    with pytest.raises(InvalidParameterError):
        LinkBudgetOrchestrator(packet_length_bits=0)
    with pytest.raises(InvalidParameterError):
        LinkBudgetOrchestrator(scenario="stealth")


def test_link_ranges_fit_every_sub_model(orchestrator):
    # receiver and jammer stop at 10 000 kHz
    assert orchestrator.set_bandwidth(20.0) is False
    assert orchestrator.set_transmit_power(40.0) is False
    assert orchestrator.set_frequency(1.2) is False
    assert orchestrator.set_environment(CommunicationEnvironment(noise_power_dbm=10.0)) is False
    assert orchestrator.receive_model.bandwidth_khz == 10_000.0
    assert orchestrator.distance_model.transmit_power_dbm == 20.0
    assert orchestrator.anti_jam_model.noise_power_dbm == -100.0


def test_accepted_values_reach_every_sub_model(orchestrator):
    orchestrator.set_scenario(CommunicationScenario.JAMMED)
    assert orchestrator.set_bandwidth(5.0) is True
    assert orchestrator.set_transmit_power(25.0) is True
    assert orchestrator.set_noise_power(-90.0) is True
    assert orchestrator.signal_model.bandwidth_khz == 5000.0
    assert orchestrator.receive_model.bandwidth_khz == 5000.0
    assert orchestrator.jammer_model.target_bandwidth_khz == 5000.0
    assert orchestrator.anti_jam_model.system_bandwidth_mhz == 5.0
    assert orchestrator.distance_model.transmit_power_dbm == 25.0
    assert orchestrator.anti_jam_model.signal_power_dbm == 25.0
    assert orchestrator.anti_jam_model.noise_power_dbm == -90.0
    assert orchestrator.set_noise_power(5.0) is False
    assert orchestrator.environment.noise_power_dbm == -90.0


def test_unrepresentable_signal_is_refused(orchestrator):
    orchestrator.set_scenario(CommunicationScenario.JAMMED)
    assert orchestrator.set_environment_type(EnvironmentType.URBAN) is True
    assert orchestrator.set_frequency(30_000.0) is True
    before = orchestrator.calculate_link_status()
    assert before.signal_strength_dbm == pytest.approx(-136.51, abs=0.01)

    # -205.5 dBm is below the receiver floor, -189.9 dBm below the jammer's target floor
    assert orchestrator.set_distance(1000.0) is False
    assert orchestrator.set_distance(300.0) is False
    assert orchestrator.environment.distance_km == 5.0
    status = orchestrator.calculate_link_status()
    assert status.snr_db == pytest.approx(before.snr_db)
    assert orchestrator.jammer_model.target_power_dbm == pytest.approx(status.signal_strength_dbm)
    assert orchestrator.receive_model.received_power_dbm == pytest.approx(status.signal_strength_dbm)

    orchestrator.set_scenario(CommunicationScenario.NORMAL)
    assert orchestrator.set_distance(300.0) is True
    assert orchestrator.receive_model.received_power_dbm == pytest.approx(-189.85, abs=0.01)
    assert orchestrator.set_scenario(CommunicationScenario.JAMMED) is False
    assert orchestrator.scenario == CommunicationScenario.NORMAL
    assert orchestrator.jamming_environment.is_jammed is False


def test_profile_changes_go_through_the_orchestrator(orchestrator):
    orchestrator.set_environment_type(EnvironmentType.URBAN)
    before = orchestrator.calculate_link_status().signal_strength_dbm
    harsher = {
        "path_loss_exponent": 5.0,
        "environment_loss_db": 40.0,
        "shadowing_std_dev_db": 8.0,
        "frequency_factor": 1.2,
    }

    # accessors hand out copies
    assert orchestrator.config_store.set_config(EnvironmentType.URBAN, harsher) is True
    assert orchestrator.calculate_link_status().signal_strength_dbm == pytest.approx(before)

    assert orchestrator.set_environment_config(EnvironmentType.URBAN, harsher) is True
    after = orchestrator.calculate_link_status().signal_strength_dbm
    assert after == pytest.approx(before - 20.0 * log10(5.0) - 30.0)
    assert orchestrator.config_store.get_config(EnvironmentType.URBAN).path_loss_exponent == 5.0
    assert orchestrator.set_environment_config(EnvironmentType.URBAN, {**harsher, "path_loss_exponent": 9.0}) is False

    assert orchestrator.reset_environment_configs() is True
    assert orchestrator.calculate_link_status().signal_strength_dbm == pytest.approx(before)


def test_profile_pushing_signal_below_jammer_floor_is_refused(orchestrator):
    orchestrator.set_scenario(CommunicationScenario.JAMMED)
    orchestrator.set_environment_type(EnvironmentType.URBAN)
    extreme = {
        "path_loss_exponent": 6.0,
        "environment_loss_db": 50.0,
        "shadowing_std_dev_db": 8.0,
        "frequency_factor": 1.2,
    }
    assert orchestrator.set_environment_config(EnvironmentType.URBAN, extreme) is False
    assert orchestrator.config_store.get_config(EnvironmentType.URBAN) == DEFAULT_PROFILES[EnvironmentType.URBAN]
    assert orchestrator.scenario == CommunicationScenario.JAMMED

from __future__ import annotations

import pytest

from commlink.core.errors import InvalidParameterError
from commlink.rf.environment import EnvironmentType
from commlink.rf.propagation import (
    CommunicationDistanceModel,
    PropagationModel,
    distance_from_path_loss,
    effective_distance,
    free_space_path_loss,
    quick_calculate_range,
)


def test_fspl_golden():
    # 20*log10(1) + 20*log10(1000) + 32.45
    assert free_space_path_loss(1.0, 1000.0) == pytest.approx(92.45)
    assert free_space_path_loss(5.0, 2400.0) == pytest.approx(114.03, abs=0.01)


def test_fspl_monotonic():
    assert free_space_path_loss(2.0, 2400.0) > free_space_path_loss(1.0, 2400.0)
    assert free_space_path_loss(1.0, 5000.0) > free_space_path_loss(1.0, 2400.0)


def test_fspl_rejects_non_positive():
    with pytest.raises(InvalidParameterError):
        free_space_path_loss(0.0, 2400.0)
    with pytest.raises(InvalidParameterError):
        free_space_path_loss(1.0, -5.0)


def test_distance_from_path_loss_inverts_fspl():
    loss = free_space_path_loss(3.0, 2400.0)
    assert distance_from_path_loss(loss, 2400.0) == pytest.approx(3.0)
    with pytest.raises(InvalidParameterError):
        distance_from_path_loss(-1.0, 2400.0)


def test_environment_adds_loss():
    model = PropagationModel()
    open_loss = model.total_path_loss(5.0, 2400.0, EnvironmentType.OPEN_FIELD)
    urban_loss = model.total_path_loss(5.0, 2400.0, EnvironmentType.URBAN)
    assert open_loss == pytest.approx(114.79, abs=0.01)
    assert urban_loss > open_loss


def test_effective_distance_defaults_capped_by_line_of_sight():
    model = CommunicationDistanceModel()
    assert model.calculate_effective_distance() == pytest.approx(10.0)


def test_effective_distance_within_line_of_sight():
    model = CommunicationDistanceModel(environment_type=EnvironmentType.URBAN, env_attenuation=2.0)
    d = model.calculate_effective_distance()
    assert 0.0 < d <= 10.0


def test_effective_distance_zero_without_budget():
    assert effective_distance(10.0, 0.0, 0.0, 10.0, 1.0) == 0.0
    # 6 dB of budget doubles the attenuated distance
    assert effective_distance(10.0, 0.0, -6.0, 0.0, 2.0) == pytest.approx(10.0)


def test_constructor_validates_attenuation_against_environment():
    with pytest.raises(InvalidParameterError):
        CommunicationDistanceModel(environment_type=EnvironmentType.URBAN, env_attenuation=1.0)
    with pytest.raises(InvalidParameterError):
        CommunicationDistanceModel(transmit_power_dbm=40.0)


def test_setters_keep_previous_value_on_rejection():
    model = CommunicationDistanceModel()
    assert model.set_transmit_power(40.0) is False
    assert model.transmit_power_dbm == 20.0
    assert model.set_link_margin(2.0) is False
    assert model.link_margin_db == 10.0
    assert model.set_receive_sensitivity(-95.0) is True
    assert model.receive_sensitivity_dbm == -95.0


def test_set_environment_type_resets_attenuation():
    model = CommunicationDistanceModel()
    assert model.set_environment_type(EnvironmentType.MOUNTAINOUS) is True
    assert model.environment_type == EnvironmentType.MOUNTAINOUS
    assert model.env_attenuation == pytest.approx(2.5)
    assert model.set_env_attenuation(1.0) is False

    assert model.set_environment_type("desert") is False
    assert model.environment_type == EnvironmentType.MOUNTAINOUS
    assert model.env_attenuation == pytest.approx(2.5)


def test_quick_range_decreases_with_frequency():
    low = quick_calculate_range(900.0, 20.0)
    high = quick_calculate_range(5000.0, 20.0)
    assert 0.0 < high < low <= 10.0
    # 110 dB budget at 2.4 GHz is used up near 2.9 km
    assert 2.0 < quick_calculate_range(2400.0, 20.0) < 4.0
    assert CommunicationDistanceModel().quick_calculate_range(0.0) == 0.0


def test_quick_range_works_for_urban():
    assert quick_calculate_range(900.0, 20.0, EnvironmentType.URBAN) > 0.0


def test_open_field_path_loss_is_free_space():
    model = PropagationModel()
    for d in (0.1, 1.0, 7.5, 250.0):
        for f in (30.0, 900.0, 2400.0):
            assert model.path_loss(d, f, EnvironmentType.OPEN_FIELD) == free_space_path_loss(d, f)


@pytest.mark.parametrize("env", list(EnvironmentType))
def test_total_path_loss_monotonic(env):
    model = PropagationModel()
    distances = [0.5, 1.0, 2.0, 5.0, 20.0]
    losses = [model.total_path_loss(d, 2400.0, env) for d in distances]
    assert losses == sorted(losses)
    frequencies = [100.0, 900.0, 2400.0, 5800.0]
    losses = [model.total_path_loss(5.0, f, env) for f in frequencies]
    assert losses == sorted(losses)


def test_effective_distance_example_link():
    model = CommunicationDistanceModel(
        max_line_of_sight_km=10.0,
        environment_type=EnvironmentType.OPEN_FIELD,
        env_attenuation=1.0,
        receive_sensitivity_dbm=-100.0,
        link_margin_db=10.0,
        transmit_power_dbm=20.0,
    )
    assert 0.0 < model.calculate_effective_distance() <= 10.0

from __future__ import annotations

import pytest

from commlink.core.errors import InvalidParameterError
from commlink.rf.receiver import (
    CommunicationReceiveModel,
    ReceiveModulation,
    modulation_ber,
    required_snr_for_ber,
)


def test_noise_floor_defaults():
    model = CommunicationReceiveModel()
    # kTB at 290 K over 25 kHz is about -130 dBm, plus 3 dB noise figure
    assert model.noise_floor_dbm == pytest.approx(-127.0, abs=0.05)


def test_noise_floor_tracks_bandwidth():
    model = CommunicationReceiveModel()
    before = model.noise_floor_dbm
    assert model.set_bandwidth(250.0) is True
    assert model.noise_floor_dbm == pytest.approx(before + 10.0)


def test_rejected_setter_leaves_state():
    model = CommunicationReceiveModel()
    before = model.noise_floor_dbm
    assert model.set_noise_figure(25.0) is False
    assert model.set_temperature(100.0) is False
    assert model.noise_floor_dbm == before
    assert model.set_sensitivity(-20.0) is False
    assert model.sensitivity_dbm == -100.0


def test_constructor_validates_ranges():
    with pytest.raises(InvalidParameterError):
        CommunicationReceiveModel(bandwidth_khz=0.0)


def test_snr_and_detection():
    model = CommunicationReceiveModel()
    model.set_received_power(-100.0)
    assert model.calculate_snr() == pytest.approx(27.0, abs=0.05)
    assert model.is_signal_detectable()
    assert model.is_signal_decodable()
    assert model.calculate_receive_margin() == pytest.approx(0.0)

    model.set_received_power(-126.0)
    assert not model.is_signal_detectable()
    assert not model.is_signal_decodable()


def test_modulation_ber():
    assert modulation_ber(-20.0, ReceiveModulation.BPSK) == 0.5
    assert modulation_ber(10.0, ReceiveModulation.BPSK) < modulation_ber(10.0, ReceiveModulation.QPSK)
    assert modulation_ber(10.0, ReceiveModulation.QAM16) > modulation_ber(10.0, ReceiveModulation.QPSK)
    assert modulation_ber(60.0, ReceiveModulation.BPSK) == 1e-10
    for modulation in ReceiveModulation:
        assert 1e-10 <= modulation_ber(5.0, modulation) <= 0.5


def test_required_snr_table():
    assert required_snr_for_ber(ReceiveModulation.BPSK, 1e-6) == 10.5
    assert required_snr_for_ber(ReceiveModulation.QAM16, 1e-3) == 9.0
    assert required_snr_for_ber(ReceiveModulation.AM, 0.1) == 6.0


@pytest.mark.parametrize("modulation", list(ReceiveModulation))
def test_ber_non_increasing_with_received_power(modulation):
    model = CommunicationReceiveModel(modulation=modulation)
    bers = []
    for power in range(-140, -80, 2):
        model.set_received_power(float(power))
        bers.append(model.calculate_bit_error_rate())
    assert all(a >= b for a, b in zip(bers, bers[1:]))


@pytest.mark.parametrize("modulation", list(ReceiveModulation))
def test_default_decodability_uses_strict_requirement(modulation):
    model = CommunicationReceiveModel(modulation=modulation)
    for power in (-125.0, -116.0, -110.0, -100.0):
        model.set_received_power(power)
        assert model.is_signal_decodable() == model.is_signal_decodable(model.required_snr_for_ber(1e-6))

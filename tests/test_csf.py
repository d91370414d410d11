"""
Tests for the Chung-Legge contrast sensitivity model.
"""

from __future__ import annotations

import numpy as np
import pytest

from devas import ChungLeggeCSF, CSFModel, InvalidParameterError


def test_peak_values() -> None:
    csf = ChungLeggeCSF()
    assert csf.peak_frequency(1.0, 1.0) == pytest.approx(0.914)
    assert csf.peak_sensitivity(1.0, 1.0) == pytest.approx(199.0)
    assert csf.sensitivity(0.914, 1.0, 1.0) == pytest.approx(199.0)

    assert csf.peak_frequency(0.5, 0.25) == pytest.approx(0.457)
    assert csf.peak_sensitivity(0.5, 0.25) == pytest.approx(49.75)
    assert csf.sensitivity(0.457, 0.5, 0.25) == pytest.approx(49.75)


def test_unimodal_around_peak() -> None:
    csf = ChungLeggeCSF()
    for acuity, contrast in [(1.0, 1.0), (0.2, 0.5), (2.5, 0.05)]:
        peak = csf.peak_frequency(acuity, contrast)
        below = csf.sensitivity(np.geomspace(peak / 50.0, peak, 40), acuity, contrast)
        above = csf.sensitivity(np.geomspace(peak, peak * 50.0, 40), acuity, contrast)
        assert np.all(np.diff(below) > 0.0)
        assert np.all(np.diff(above) < 0.0)
        assert np.all(below > 0.0) and np.all(above > 0.0)


def test_sensitivity_scalar_and_array() -> None:
    csf = ChungLeggeCSF()
    scalar = csf.sensitivity(2.0)
    assert isinstance(scalar, float)

    freqs = np.array([0.5, 2.0, 8.0])
    values = csf.sensitivity(freqs)
    assert values.shape == freqs.shape
    assert values[1] == pytest.approx(scalar)


def test_cutoff_has_unit_sensitivity() -> None:
    csf = ChungLeggeCSF()
    for acuity, contrast in [(1.0, 1.0), (0.3, 0.1), (2.0, 0.8)]:
        cutoff = csf.cutoff_frequency(acuity, contrast)
        assert cutoff > csf.peak_frequency(acuity, contrast)
        assert csf.sensitivity(cutoff, acuity, contrast) == pytest.approx(1.0)


def test_normal_cutoff_value() -> None:
    csf = ChungLeggeCSF()
    expected = 10.0 ** (np.log10(0.914) + np.sqrt(np.log10(199.0)) / 1.28)
    assert csf.cutoff_frequency(1.0, 1.0) == pytest.approx(expected)


def test_peak_from_cutoff_inverts_cutoff() -> None:
    csf = ChungLeggeCSF()
    assert csf.peak_from_cutoff(csf.cutoff_frequency(1.0, 1.0), 1.0) == pytest.approx(
        csf.peak_frequency(1.0, 1.0)
    )
    cutoff = csf.cutoff_frequency(0.4, 0.3)
    assert csf.peak_from_cutoff(cutoff, 0.3) == pytest.approx(csf.peak_frequency(0.4, 0.3))


@pytest.mark.parametrize("acuity", [0.1, 0.5, 1.0, 2.0])
@pytest.mark.parametrize("contrast", [0.05, 0.5, 1.0])
def test_cutoff_acuity_adjust_scales_cutoff(acuity: float, contrast: float) -> None:
    csf = ChungLeggeCSF()
    adjusted = csf.cutoff_acuity_adjust(acuity, contrast)
    assert csf.cutoff_frequency(adjusted, contrast) == pytest.approx(
        acuity * csf.cutoff_frequency(1.0, 1.0)
    )


def test_cutoff_acuity_adjust_identity_at_normal_contrast() -> None:
    csf = ChungLeggeCSF()
    assert csf.cutoff_acuity_adjust(1.0, 1.0) == pytest.approx(1.0)
    # Lower contrast moves the peak up to keep the same cutoff
    assert csf.cutoff_acuity_adjust(1.0, 0.1) > 1.0


def test_logmar() -> None:
    csf = ChungLeggeCSF()
    cutoff = csf.cutoff_frequency(1.0, 1.0)
    assert csf.frequency_to_logmar(cutoff) == pytest.approx(0.0)
    assert csf.frequency_to_logmar(cutoff / 10.0) == pytest.approx(1.0)

    stats = csf.describe(0.1, 1.0)
    assert stats["cutoff_logmar"] == pytest.approx(1.0)
    assert set(stats) >= {"peak_sensitivity", "peak_frequency", "peak_logmar", "cutoff_frequency"}


def test_describe_without_visible_frequencies() -> None:
    csf = ChungLeggeCSF()
    stats = csf.describe(1.0, 0.004)
    assert "cutoff_frequency" not in stats


@pytest.mark.parametrize(
    "freq, acuity, contrast",
    [
        (0.0, 1.0, 1.0),
        (-1.0, 1.0, 1.0),
        (1.0, 0.0, 1.0),
        (1.0, -2.0, 1.0),
        (1.0, 1.0, 0.0),
        (1.0, 1.0, 1.5),
    ],
)
def test_invalid_arguments(freq: float, acuity: float, contrast: float) -> None:
    csf = ChungLeggeCSF()
    with pytest.raises(InvalidParameterError):
        csf.sensitivity(freq, acuity, contrast)
    with pytest.raises(ValueError):
        csf.sensitivity(freq, acuity, contrast)


def test_cutoff_requires_visible_peak() -> None:
    csf = ChungLeggeCSF()
    with pytest.raises(InvalidParameterError):
        csf.cutoff_frequency(1.0, 0.004)
    with pytest.raises(InvalidParameterError):
        csf.peak_from_cutoff(10.0, 0.004)
    with pytest.raises(InvalidParameterError):
        csf.peak_from_cutoff(0.0, 1.0)


def test_legacy_model() -> None:
    model = CSFModel.legacy_comparison()
    assert model.peak_sensitivity == 200.0
    assert model.peak_frequency == 1.959
    assert model.k_left == CSFModel.normal_vision().k_left

    csf = ChungLeggeCSF(model)
    assert csf.sensitivity(1.959) == pytest.approx(200.0)

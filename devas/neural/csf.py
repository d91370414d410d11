"""
Chung-Legge contrast sensitivity function (Chung & Legge 2016).

Sensitivity is the reciprocal of the Michelson contrast threshold, modeled as
a dual-slope log-parabola around a normal-vision peak. Low vision is
expressed by two scalar adjustments relative to normal vision:

``acuity_adjust``
    ratio of the impaired peak-sensitivity frequency to the normal one.
``contrast_adjust``
    ratio of the impaired peak sensitivity to the normal one, in (0, 1].
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np

from devas.core.errors import InvalidParameterError

ArrayLike = Union[float, np.ndarray]


@dataclass(frozen=True)
class CSFModel:
    """Normal-vision constants of the log-parabola CSF."""

    peak_sensitivity: float = 199.0
    peak_frequency: float = 0.914  # cycles per degree
    k_left: float = 0.68
    k_right: float = 1.28

    @classmethod
    def normal_vision(cls) -> "CSFModel":
        """Chung & Legge (2016) fit to normal observers."""

        return cls()

    @classmethod
    def legacy_comparison(cls) -> "CSFModel":
        """Constants used by the CSF-as-MTF comparison filter."""

        return cls(peak_sensitivity=200.0, peak_frequency=1.959)


class ChungLeggeCSF:
    """
    Evaluate sensitivity and derived frequencies for a given CSF model.
    """

    def __init__(self, model: Optional[CSFModel] = None) -> None:
        self.model = model or CSFModel.normal_vision()

    def sensitivity(
        self,
        freq: ArrayLike,
        acuity_adjust: float = 1.0,
        contrast_adjust: float = 1.0,
    ) -> ArrayLike:
        """
        Contrast sensitivity at ``freq`` cycles per degree.

        Parameters
        ----------
        freq : float or np.ndarray
            Spatial frequency in cycles/degree, strictly positive.
        acuity_adjust : float
            Peak frequency scale relative to normal vision.
        contrast_adjust : float
            Peak sensitivity scale relative to normal vision, in (0, 1].
        """

        self._check_adjustments(acuity_adjust, contrast_adjust)
        freq_arr = np.asarray(freq, dtype=np.float64)
        if np.any(freq_arr <= 0.0):
            raise InvalidParameterError("freq", freq, "spatial frequency must be > 0")

        model = self.model
        log_peak_sens = math.log10(model.peak_sensitivity) + math.log10(contrast_adjust)
        log_peak_freq = math.log10(model.peak_frequency) + math.log10(acuity_adjust)

        log_freq = np.log10(freq_arr)
        k = np.where(
            freq_arr < model.peak_frequency * acuity_adjust,
            model.k_left,
            model.k_right,
        )
        log_sens = log_peak_sens - (k * (log_freq - log_peak_freq)) ** 2
        sens = np.power(10.0, log_sens)

        if sens.ndim == 0:
            return float(sens)
        return sens

    def peak_sensitivity(self, acuity_adjust: float = 1.0, contrast_adjust: float = 1.0) -> float:
        self._check_adjustments(acuity_adjust, contrast_adjust)
        return contrast_adjust * self.model.peak_sensitivity

    def peak_frequency(self, acuity_adjust: float = 1.0, contrast_adjust: float = 1.0) -> float:
        self._check_adjustments(acuity_adjust, contrast_adjust)
        return self.model.peak_frequency * acuity_adjust

    def cutoff_frequency(self, acuity_adjust: float = 1.0, contrast_adjust: float = 1.0) -> float:
        """
        Frequency above the peak at which sensitivity falls to 1.
        """

        self._check_adjustments(acuity_adjust, contrast_adjust)
        model = self.model
        log_cutoff = (
            math.log10(model.peak_frequency)
            + math.log10(acuity_adjust)
            + self._log_sensitivity_span(contrast_adjust) / model.k_right
        )
        cutoff = 10.0**log_cutoff
        if cutoff <= 0.0:
            raise InvalidParameterError("cutoff_frequency", cutoff, "must be > 0")
        return cutoff

    def peak_from_cutoff(self, cutoff_frequency: float, contrast_adjust: float = 1.0) -> float:
        """
        Peak-sensitivity frequency of a CSF with the given cutoff frequency.
        """

        if cutoff_frequency <= 0.0:
            raise InvalidParameterError("cutoff_frequency", cutoff_frequency, "must be > 0")
        self._check_adjustments(1.0, contrast_adjust)

        log_peak = (
            math.log10(cutoff_frequency)
            - self._log_sensitivity_span(contrast_adjust) / self.model.k_right
        )
        return 10.0**log_peak

    def cutoff_acuity_adjust(self, acuity_adjust: float, contrast_adjust: float = 1.0) -> float:
        """
        Convert a cutoff-relative acuity adjustment into a peak-relative one.

        ``acuity_adjust`` scales the normal-vision cutoff frequency. The return
        value scales the peak frequency such that the impaired CSF, with the
        given contrast adjustment, reaches sensitivity 1 at that scaled cutoff.
        """

        if acuity_adjust <= 0.0:
            raise InvalidParameterError("acuity_adjust", acuity_adjust, "must be > 0")

        impaired_cutoff = acuity_adjust * self.cutoff_frequency(1.0, 1.0)
        impaired_peak = self.peak_from_cutoff(impaired_cutoff, contrast_adjust)
        return impaired_peak / self.peak_frequency(1.0, contrast_adjust)

    def frequency_to_logmar(self, freq: ArrayLike) -> ArrayLike:
        """Express a frequency as logMAR relative to the normal cutoff."""

        freq_arr = np.asarray(freq, dtype=np.float64)
        if np.any(freq_arr <= 0.0):
            raise InvalidParameterError("freq", freq, "spatial frequency must be > 0")
        logmar = np.log10(self.cutoff_frequency(1.0, 1.0) / freq_arr)
        if logmar.ndim == 0:
            return float(logmar)
        return logmar

    def describe(self, acuity_adjust: float = 1.0, contrast_adjust: float = 1.0) -> Dict[str, float]:
        """Summary statistics of the adjusted CSF."""

        peak_freq = self.peak_frequency(acuity_adjust, contrast_adjust)
        stats = {
            "peak_sensitivity": self.peak_sensitivity(acuity_adjust, contrast_adjust),
            "peak_frequency": peak_freq,
            "peak_logmar": self.frequency_to_logmar(peak_freq),
        }
        if contrast_adjust * self.model.peak_sensitivity >= 1.0:
            cutoff = self.cutoff_frequency(acuity_adjust, contrast_adjust)
            stats["cutoff_frequency"] = cutoff
            stats["cutoff_logmar"] = self.frequency_to_logmar(cutoff)
        return stats

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _log_sensitivity_span(self, contrast_adjust: float) -> float:
        log_peak_sens = math.log10(contrast_adjust) + math.log10(self.model.peak_sensitivity)
        if log_peak_sens < 0.0:
            raise InvalidParameterError(
                "contrast_adjust",
                contrast_adjust,
                "peak sensitivity below 1, no frequency is visible",
            )
        return math.sqrt(log_peak_sens)

    @staticmethod
    def _check_adjustments(acuity_adjust: float, contrast_adjust: float) -> None:
        if not acuity_adjust > 0.0:
            raise InvalidParameterError("acuity_adjust", acuity_adjust, "must be > 0")
        if not (0.0 < contrast_adjust <= 1.0):
            raise InvalidParameterError("contrast_adjust", contrast_adjust, "out of range (0, 1]")

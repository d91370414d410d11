"""
Main low-vision filtering pipeline.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from devas.core.config import MAX_PLAUSIBLE_ACUITY, AcuityReference, FilterConfig, FilterType
from devas.core.errors import InvalidParameterError
from devas.core.image import FieldOfView, XYYImage
from devas.filtering.bands import PeliBandFilter
from devas.filtering.chroma import ChromaFilter, clip_to_gamut, desaturate
from devas.filtering.mtf import CSFTransferFilter
from devas.neural.csf import ChungLeggeCSF, CSFModel
from devas.preprocessing.margin import add_margin, margin_size, strip_margin
from devas.spectral.fft import get_transform

logger = logging.getLogger(__name__)

Results = Dict[str, Any]


class LowVisionFilter:
    """
    Simulate the appearance of an xyY image to a low-vision observer.

    Pipeline stages:
        1. Input validation
        2. Margin padding (optional)
        3. Luminance filtering (band thresholding or CSF transfer)
        4. Chromaticity filtering, desaturation and gamut clipping
        5. Output assembly
        6. Margin removal (optional)
    """

    def __init__(self, config: Optional[FilterConfig] = None) -> None:
        self.config = config or FilterConfig()
        self.config.validate()

        logger.info("Initializing low-vision filter")
        logger.info("  Filter: %s", self.config.filter_type.value)
        logger.info(
            "  Acuity: %.3f (%s), contrast: %.3f",
            self.config.acuity,
            self.config.acuity_reference.value,
            self.config.contrast,
        )

        self._init_components()

    def _init_components(self) -> None:
        self.transform = get_transform(self.config.fft_backend)
        self.csf = ChungLeggeCSF(self.config.csf_model)
        self.acuity_adjust = self._peak_acuity_adjust()

        stats = self.csf.describe(self.acuity_adjust, self.config.contrast)
        logger.info(
            "  CSF peak %.3f c/deg (logMAR %.2f), peak sensitivity %.1f",
            stats["peak_frequency"],
            stats["peak_logmar"],
            stats["peak_sensitivity"],
        )
        if "cutoff_frequency" in stats:
            logger.info(
                "  CSF cutoff %.3f c/deg (logMAR %.2f)",
                stats["cutoff_frequency"],
                stats["cutoff_logmar"],
            )

        if self.config.filter_type == FilterType.CSF_MTF:
            self.band_filter = None
            self.chroma_filter = None
            self.mtf_filter: Optional[CSFTransferFilter] = CSFTransferFilter(
                ChungLeggeCSF(CSFModel.legacy_comparison()), self.transform
            )
        else:
            self.mtf_filter = None
            self.band_filter = PeliBandFilter(
                self.csf,
                self.transform,
                smoothing=self.config.smoothing,
                smoothing_method=self.config.smoothing_method,
            )
            self.chroma_filter = ChromaFilter(self.csf, self.transform, self.config.white_point)

    def _peak_acuity_adjust(self) -> float:
        if self.config.acuity_reference == AcuityReference.CUTOFF:
            adjusted = self.csf.cutoff_acuity_adjust(self.config.acuity, self.config.contrast)
            logger.info("  Cutoff acuity %.3f -> peak acuity %.3f", self.config.acuity, adjusted)
            if adjusted > MAX_PLAUSIBLE_ACUITY:
                raise InvalidParameterError(
                    "acuity",
                    self.config.acuity,
                    f"cutoff acuity maps to peak acuity {adjusted:.3f} > {MAX_PLAUSIBLE_ACUITY}",
                )
            return adjusted
        return self.config.acuity

    def process(
        self,
        image: XYYImage,
        return_intermediate: bool = False,
    ) -> Union[XYYImage, Results]:
        """
        Filter ``image``; the result has the same size, view and description.
        """

        image = self._stage_validate(image)

        logger.info("Processing image: shape=%s, fov=%s", image.shape, image.view)
        logger.info(
            "Input luminance range: [%0.2e, %0.2e] cd/m^2",
            float(np.min(image.luminance)),
            float(np.max(image.luminance)),
        )

        results: Optional[Results] = {"input": image} if return_intermediate else None

        margins = margin_size(self.config.margin, image.shape) if self.config.margin > 0.0 else None
        working = self._stage_add_margin(image, margins, results) if margins else image

        if self.mtf_filter is not None:
            luminance, x, y = self._stage_transfer(working, results)
        else:
            luminance = self._stage_luminance(working, results)
            x, y = self._stage_chroma(working, results)

        output = self._stage_assemble(working, luminance, x, y, results)

        if margins:
            output = self._stage_strip_margin(output, margins, image.view, results)

        logger.info(
            "Processing complete. Output luminance range: [%0.2e, %0.2e] cd/m^2",
            float(np.min(output.luminance)),
            float(np.max(output.luminance)),
        )

        if return_intermediate and results is not None:
            results["output"] = output
            return results

        return output

    # ------------------------------------------------------------------
    # Individual pipeline stages
    # ------------------------------------------------------------------

    def _stage_validate(self, image: XYYImage) -> XYYImage:
        logger.debug("Stage 1: input validation")

        if not isinstance(image, XYYImage):
            raise InvalidParameterError("image", type(image).__name__, "expected an XYYImage")
        if not image.view.is_valid:
            raise InvalidParameterError("field_of_view", image.view, "invalid or missing field of view")
        if not np.isfinite(image.data).all():
            raise InvalidParameterError("image", image.shape, "input contains NaN or Inf values")
        if np.any(image.luminance < 0.0):
            logger.warning("Input contains negative luminance, clipping to 0")
            data = image.data.copy()
            data[:, :, 2] = np.clip(data[:, :, 2], 0.0, None)
            image = image.with_data(data)
        return image

    def _stage_add_margin(
        self,
        image: XYYImage,
        margins: Tuple[int, int],
        results: Optional[Results],
    ) -> XYYImage:
        logger.debug("Stage 2: add margin %s", margins)

        padded = add_margin(
            margins[0],
            margins[1],
            image,
            fill=self.config.margin_fill,
            background=self.config.margin_background,
        )
        if results is not None:
            results["with_margin"] = padded
        return padded

    def _stage_luminance(self, image: XYYImage, results: Optional[Results]) -> np.ndarray:
        logger.debug("Stage 3: band decomposition and thresholding")

        band_result = self.band_filter.filter(
            image.luminance,
            image.view,
            self.acuity_adjust,
            self.config.contrast,
        )
        if results is not None:
            results["dc"] = band_result.dc
            results["bands"] = band_result.bands
            results["no_visible_contrast"] = band_result.no_visible_contrast
            results["filtered_luminance"] = band_result.luminance
        return band_result.luminance

    def _stage_chroma(
        self,
        image: XYYImage,
        results: Optional[Results],
    ) -> Tuple[np.ndarray, np.ndarray]:
        logger.debug("Stage 4: chromaticity filtering")

        x, y = self.chroma_filter.filter(
            image.chroma_x,
            image.chroma_y,
            image.view,
            self.acuity_adjust,
            self.config.contrast,
            self.config.saturation,
        )
        if results is not None:
            results["filtered_x"] = x
            results["filtered_y"] = y
        return x, y

    def _stage_transfer(
        self,
        image: XYYImage,
        results: Optional[Results],
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        logger.debug("Stage 3-4: CSF transfer filtering")

        weights = self.mtf_filter.transfer(
            image.shape, image.view, self.acuity_adjust, self.config.contrast
        )
        luminance = self.mtf_filter.filter_channel(image.luminance, weights)

        white_x, white_y = self.config.white_point
        if self.config.saturation > 0.0:
            x = self.mtf_filter.filter_channel(image.chroma_x, weights)
            y = self.mtf_filter.filter_channel(image.chroma_y, weights)
            x, y = desaturate(x, y, self.config.saturation, self.config.white_point)
            x, y = clip_to_gamut(x, y, self.config.white_point)
        else:
            x = np.full(image.shape, white_x)
            y = np.full(image.shape, white_y)

        if results is not None:
            results["transfer"] = weights
            results["filtered_luminance"] = luminance
        return luminance, x, y

    def _stage_assemble(
        self,
        image: XYYImage,
        luminance: np.ndarray,
        x: np.ndarray,
        y: np.ndarray,
        results: Optional[Results],
    ) -> XYYImage:
        logger.debug("Stage 5: output assembly")

        negative = int(np.count_nonzero(luminance < 0.0))
        if negative:
            logger.debug("Clamping %d negative luminance values", negative)

        data = np.stack([x, y, np.maximum(luminance, 0.0)], axis=-1)
        return image.with_data(data)

    def _stage_strip_margin(
        self,
        image: XYYImage,
        margins: Tuple[int, int],
        view: FieldOfView,
        results: Optional[Results],
    ) -> XYYImage:
        logger.debug("Stage 6: strip margin %s", margins)

        stripped = strip_margin(margins[0], margins[1], image, view=view)
        if results is not None:
            results["filtered_with_margin"] = image
        return stripped


def devas_filter(
    image: XYYImage,
    acuity: float,
    contrast: float,
    smoothing: bool = True,
    saturation: float = 1.0,
) -> XYYImage:
    """
    Convenience wrapper for quick low-vision filtering.
    """

    config = FilterConfig(
        acuity=acuity,
        contrast=contrast,
        smoothing=smoothing,
        saturation=saturation,
    )

    return LowVisionFilter(config).process(image)

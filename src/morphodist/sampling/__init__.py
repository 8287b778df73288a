"""Stratified sampling of control images and cells."""

from morphodist.sampling.sampler import (
    StratifiedSampler,
    SampleResult,
    sample_images,
    sample_objects,
)

__all__ = ["StratifiedSampler", "SampleResult", "sample_images", "sample_objects"]

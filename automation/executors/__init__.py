"""Acquisition executors and the Playwright tee sheet adapter."""

from .booking import AcquisitionProtocol, acquire_first_available
from .core import AcquisitionConfig, AcquisitionResult, DEFAULT_ACQUISITION_CONFIG

__all__ = [
    "AcquisitionProtocol",
    "acquire_first_available",
    "AcquisitionConfig",
    "AcquisitionResult",
    "DEFAULT_ACQUISITION_CONFIG",
]

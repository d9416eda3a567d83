"""
Tracking subpackage.

Provides the good-features-to-track probe used for visual feedback
independently of marker detection.
"""

from .feature import (
    FeatureProbe,
    FeatureProbeConfiguration,
    FeatureProbeResult,
)

__all__ = [
    "FeatureProbe",
    "FeatureProbeConfiguration",
    "FeatureProbeResult",
]

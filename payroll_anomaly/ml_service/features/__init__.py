from .feature_extractor import (
    FEATURE_NAMES,
    EntryObservation,
    FeatureExtractor,
    PayDayContext,
    TimecardFeatures,
    build_pay_day_context,
    to_matrix,
)

__all__ = [
    "FEATURE_NAMES",
    "EntryObservation",
    "FeatureExtractor",
    "PayDayContext",
    "TimecardFeatures",
    "build_pay_day_context",
    "to_matrix",
]

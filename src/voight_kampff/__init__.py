"""Voight-Kampff - human vs. automated GitHub account classification."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from voight_kampff.config import ScoringConfig, load_config
from voight_kampff.exceptions import VoightKampffError
from voight_kampff.models import (
    AccountProfile,
    ActivityEvent,
    AnalysisResult,
    Classification,
    EventType,
    Flag,
    ResultMetadata,
)
from voight_kampff.scorer import ReplicantScorer, evaluate, identify_replicant

try:
    __version__ = version("voight-kampff")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AccountProfile",
    "ActivityEvent",
    "AnalysisResult",
    "Classification",
    "EventType",
    "Flag",
    "ReplicantScorer",
    "ResultMetadata",
    "ScoringConfig",
    "VoightKampffError",
    "__version__",
    "evaluate",
    "identify_replicant",
    "load_config",
]

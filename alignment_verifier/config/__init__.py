"""Configuration management for the alignment verifier."""

from alignment_verifier.config.settings import (
    AppSettings,
    CodeHostConfig,
    DomainHintConfig,
    TrackerConfig,
    VerificationConfig,
)

__all__ = [
    "AppSettings",
    "CodeHostConfig",
    "DomainHintConfig",
    "TrackerConfig",
    "VerificationConfig",
]

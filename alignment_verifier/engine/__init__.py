"""Verification engine: task resolution, evidence collection, classification and reporting."""

from alignment_verifier.engine.classifier import AlignmentClassifier, AlignmentRule
from alignment_verifier.engine.collector import EvidenceCollector
from alignment_verifier.engine.matcher import EvidenceMatcher
from alignment_verifier.engine.report import build_report
from alignment_verifier.engine.resolver import TaskResolver
from alignment_verifier.engine.verifier import AlignmentVerifier, run_verification, verify_alignment

__all__ = [
    "AlignmentClassifier",
    "AlignmentRule",
    "AlignmentVerifier",
    "EvidenceCollector",
    "EvidenceMatcher",
    "TaskResolver",
    "build_report",
    "run_verification",
    "verify_alignment",
]

"""
Pipeline Module
===============

Session state and the frame-capture -> remote-stylize -> ordered-reassembly
pipeline.

Components:
    - Session: Captured/stylized sequences and the busy flag
    - StylizeWorker: Single worker issuing remote calls strictly in order
    - PipelineOrchestrator: Bulk stylize and single-frame edit
    - RunReport: Summary of one run
"""

# Session first: photomaton.source imports it while this package initializes
from photomaton.pipeline.session import Session
from photomaton.pipeline.worker import StylizeWorker
from photomaton.pipeline.orchestrator import (
    PipelineOrchestrator,
    RunReport,
)


__all__ = [
    "PipelineOrchestrator",
    "RunReport",
    "Session",
    "StylizeWorker",
]

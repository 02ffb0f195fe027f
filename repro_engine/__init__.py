"""Reproduction protocol application engine."""

from repro_engine.engine import ReproductionEngine

__all__ = ["ReproductionEngine"]

"""Training pipelines and evaluation metrics."""

from .pipelines import load_preset, presets, run_pipeline

__all__ = ["load_preset", "presets", "run_pipeline"]

"""Pipeline services package.

This package provides orchestration pipelines for multi-step workflows.
"""

from app.services.pipeline.video_generation import VideoGenerationOutcome, VideoGenerationPipeline

__all__ = ["VideoGenerationOutcome", "VideoGenerationPipeline"]

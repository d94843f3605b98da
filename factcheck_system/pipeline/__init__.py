"""Pipeline orchestration for scheduled fact verification runs.

- VerificationPipeline: articles -> extracted facts -> web verification
"""

from factcheck_system.pipeline.verification_pipeline import VerificationPipeline

__all__ = ["VerificationPipeline"]

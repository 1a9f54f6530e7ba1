"""Job layer package for cleansing run orchestration."""

from .cleansing_pipeline import CleansingPipeline, CleansingPipelineConfig, job_cleansing_run
from .interfaces import CleansingBatchesResult, CleansingPipelinePort, CleansingRunResult

__all__ = [
	"CleansingBatchesResult",
	"CleansingPipeline",
	"CleansingPipelineConfig",
	"CleansingPipelinePort",
	"CleansingRunResult",
	"job_cleansing_run",
]

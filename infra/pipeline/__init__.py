from infra.pipeline.logger import PipelineLogger, create_logger

__all__ = [
    "PipelineLogger",
    "create_logger",
]

"""Question answering pipeline and the application context that wires it."""

from sqlagent.pipeline.context import AgentContext
from sqlagent.pipeline.orchestrator import PipelineState, SQLAgentPipeline

__all__ = ["AgentContext", "PipelineState", "SQLAgentPipeline"]

from .dsl import target, github_actions, workflow, WorkflowBuilder, BuildDefinition
from .generator import assemble, generate, generate_all, check, GenerationStrategy, DEFAULT_STRATEGY
from .model import Target, WorkflowDescriptor, ShortTrigger, Workflow

__all__ = [
    "target", "github_actions", "workflow", "WorkflowBuilder", "BuildDefinition",
    "assemble", "generate", "generate_all", "check", "GenerationStrategy", "DEFAULT_STRATEGY",
    "Target", "WorkflowDescriptor", "ShortTrigger", "Workflow",
]

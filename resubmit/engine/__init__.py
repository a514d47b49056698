"""Follow-up and retry submission for session-based execution."""
from .models import (
    Cancelled,
    ConfirmationResult,
    Confirmed,
    FollowUpRequest,
    GateDecision,
    RetryContext,
    RetryOutcome,
    RetryParams,
    WorkflowState,
)
from .config import ClientConfig, ConfirmationGate, SubmissionClient
from .errors import ResubmitError, SubmissionError
from .prompt import PromptFragments, compose_prompt
from .follow_up import FollowUpWorkflow
from .retry import RetryWorkflow, ask_confirmation

__all__ = [
    # Models
    "Cancelled",
    "ConfirmationResult",
    "Confirmed",
    "FollowUpRequest",
    "GateDecision",
    "RetryContext",
    "RetryOutcome",
    "RetryParams",
    "WorkflowState",
    # Config
    "ClientConfig",
    "ConfirmationGate",
    "SubmissionClient",
    # YAML config (lazy import)
    "load_yaml_config",
    # Prompt
    "PromptFragments",
    "compose_prompt",
    # Workflows
    "FollowUpWorkflow",
    "RetryWorkflow",
    "ask_confirmation",
    # Errors
    "ResubmitError",
    "SubmissionError",
]


def __getattr__(name: str):
    if name == "load_yaml_config":
        from .yaml_config import load_yaml_config
        return load_yaml_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

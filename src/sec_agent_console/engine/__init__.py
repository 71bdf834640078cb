"""Workflow engine access.

The console drives workflows it does not own. This package holds the gateway
contract and the Temporal adapter behind it.
"""

from sec_agent_console.engine.gateway import (
    ISSUE_APPROVAL_TOPIC,
    GatewayError,
    IssueWorkflowInput,
    WorkflowFailedError,
    WorkflowGateway,
    WorkflowKind,
    WorkflowNotFoundError,
    WorkflowStep,
    WorkflowSummary,
)

__all__ = [
    "ISSUE_APPROVAL_TOPIC",
    "GatewayError",
    "IssueWorkflowInput",
    "WorkflowFailedError",
    "WorkflowGateway",
    "WorkflowKind",
    "WorkflowNotFoundError",
    "WorkflowStep",
    "WorkflowSummary",
]

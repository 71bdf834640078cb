"""Temporal-backed workflow gateway.

Wraps the Temporal Python SDK client so engine calls stay out of the console
code and tests can swap in a fake gateway.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from temporalio.api.enums.v1 import EventType
from temporalio.client import Client, WorkflowFailureError
from temporalio.service import RPCError, RPCStatusCode

from sec_agent_console.config import ConsoleSettings
from sec_agent_console.engine.gateway import (
    GatewayError,
    WorkflowFailedError,
    WorkflowKind,
    WorkflowNotFoundError,
    WorkflowStep,
    WorkflowSummary,
    sort_summaries,
)

logger = logging.getLogger(__name__)

_STEP_STATUS_BY_EVENT: dict[int, str] = {
    EventType.EVENT_TYPE_ACTIVITY_TASK_STARTED: "running",
    EventType.EVENT_TYPE_ACTIVITY_TASK_COMPLETED: "completed",
    EventType.EVENT_TYPE_ACTIVITY_TASK_FAILED: "failed",
    EventType.EVENT_TYPE_ACTIVITY_TASK_TIMED_OUT: "timed_out",
    EventType.EVENT_TYPE_ACTIVITY_TASK_CANCELED: "canceled",
}

_ATTRIBUTES_BY_EVENT: dict[int, str] = {
    EventType.EVENT_TYPE_ACTIVITY_TASK_STARTED: "activity_task_started_event_attributes",
    EventType.EVENT_TYPE_ACTIVITY_TASK_COMPLETED: "activity_task_completed_event_attributes",
    EventType.EVENT_TYPE_ACTIVITY_TASK_FAILED: "activity_task_failed_event_attributes",
    EventType.EVENT_TYPE_ACTIVITY_TASK_TIMED_OUT: "activity_task_timed_out_event_attributes",
    EventType.EVENT_TYPE_ACTIVITY_TASK_CANCELED: "activity_task_canceled_event_attributes",
}


def _event_time(event: Any) -> datetime | None:
    if not event.HasField("event_time"):
        return None
    return event.event_time.ToDatetime().replace(tzinfo=UTC)


def _rpc_error(workflow_id: str, err: RPCError) -> GatewayError:
    if err.status == RPCStatusCode.NOT_FOUND:
        return WorkflowNotFoundError(workflow_id, err.message)
    return GatewayError(f"temporal rpc failed ({err.status.name}): {err.message}")


class TemporalWorkflowGateway:
    """Workflow gateway over a connected :class:`temporalio.client.Client`."""

    def __init__(
        self,
        client: Client,
        *,
        task_queue: str,
        workflow_types: Mapping[WorkflowKind, str],
    ) -> None:
        self._client = client
        self._task_queue = task_queue
        self._workflow_types = dict(workflow_types)

    @classmethod
    async def connect(cls, settings: ConsoleSettings) -> TemporalWorkflowGateway:
        logger.info(
            "Connecting to Temporal",
            extra={"address": settings.temporal_address, "namespace": settings.temporal_namespace},
        )
        try:
            client = await Client.connect(
                settings.temporal_address,
                namespace=settings.temporal_namespace,
            )
        except RuntimeError as e:
            raise GatewayError(f"cannot connect to {settings.temporal_address}: {e}") from e
        return cls(
            client,
            task_queue=settings.task_queue,
            workflow_types={
                WorkflowKind.SCAN: settings.scan_workflow_type,
                WorkflowKind.ISSUE: settings.issue_workflow_type,
            },
        )

    async def start_workflow(self, kind: WorkflowKind, payload: object | None = None) -> str:
        workflow_type = self._workflow_types.get(kind)
        if workflow_type is None:
            raise GatewayError(f"no workflow type configured for {kind.value!r}")

        workflow_id = f"{kind.value}-{uuid.uuid4().hex}"
        try:
            handle = await self._client.start_workflow(
                workflow_type,
                args=[payload] if payload is not None else [],
                id=workflow_id,
                task_queue=self._task_queue,
            )
        except RPCError as e:
            raise _rpc_error(workflow_id, e) from e

        logger.info(
            "Workflow started",
            extra={"workflow_id": handle.id, "workflow_type": workflow_type},
        )
        return handle.id

    async def await_result(self, workflow_id: str) -> object:
        handle = self._client.get_workflow_handle(workflow_id)
        try:
            return await handle.result()
        except WorkflowFailureError as e:
            raise WorkflowFailedError(workflow_id, str(e.cause or e)) from e
        except RPCError as e:
            raise _rpc_error(workflow_id, e) from e

    async def list_workflows(self) -> list[WorkflowSummary]:
        summaries: list[WorkflowSummary] = []
        try:
            async for execution in self._client.list_workflows():
                status = execution.status.name.lower() if execution.status is not None else "unknown"
                summaries.append(
                    WorkflowSummary(
                        workflow_id=execution.id,
                        workflow_type=execution.workflow_type,
                        status=status,
                        started_at=execution.start_time,
                        closed_at=execution.close_time,
                    )
                )
        except RPCError as e:
            raise GatewayError(f"temporal rpc failed ({e.status.name}): {e.message}") from e
        return sort_summaries(summaries)

    async def get_steps(self, workflow_id: str) -> list[WorkflowStep]:
        """Derive steps from the activity events in the workflow history.

        Each scheduled activity is one step; later activity events for the same
        scheduled event update its status. Received signals are recorded as
        steps too, so the approval hand-off shows up in the list.
        """

        handle = self._client.get_workflow_handle(workflow_id)
        steps: dict[int, WorkflowStep] = {}
        try:
            async for event in handle.fetch_history_events():
                when = _event_time(event)
                if event.event_type == EventType.EVENT_TYPE_ACTIVITY_TASK_SCHEDULED:
                    attrs = event.activity_task_scheduled_event_attributes
                    steps[event.event_id] = WorkflowStep(
                        step_id=event.event_id,
                        name=attrs.activity_type.name,
                        status="scheduled",
                        started_at=when,
                    )
                elif event.event_type == EventType.EVENT_TYPE_WORKFLOW_EXECUTION_SIGNALED:
                    attrs = event.workflow_execution_signaled_event_attributes
                    steps[event.event_id] = WorkflowStep(
                        step_id=event.event_id,
                        name=f"signal:{attrs.signal_name}",
                        status="received",
                        started_at=when,
                        completed_at=when,
                    )
                elif event.event_type in _STEP_STATUS_BY_EVENT:
                    attrs = getattr(event, _ATTRIBUTES_BY_EVENT[event.event_type])
                    scheduled = steps.get(attrs.scheduled_event_id)
                    if scheduled is None:
                        continue
                    status = _STEP_STATUS_BY_EVENT[event.event_type]
                    steps[scheduled.step_id] = WorkflowStep(
                        step_id=scheduled.step_id,
                        name=scheduled.name,
                        status=status,
                        started_at=scheduled.started_at,
                        completed_at=when if status != "running" else None,
                    )
        except RPCError as e:
            raise _rpc_error(workflow_id, e) from e

        return [steps[key] for key in sorted(steps)]

    async def send_signal(self, workflow_id: str, payload: object, topic: str) -> None:
        handle = self._client.get_workflow_handle(workflow_id)
        try:
            await handle.signal(topic, payload)
        except RPCError as e:
            raise _rpc_error(workflow_id, e) from e

        logger.info("Signal delivered", extra={"workflow_id": workflow_id, "topic": topic})

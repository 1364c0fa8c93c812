"""Trigger predicates.

Pure functions over event metadata: no environment lookups, no globals.
"""

from __future__ import annotations

from core.domain.models import EventContext, EventType
from core.domain.workflow import DocPublishWorkflow


def should_publish(
    event_type: EventType | str,
    branch: str,
    publish_branch: str = "dev",
) -> bool:
    """True iff the event is a push to `publish_branch`."""

    if not isinstance(event_type, EventType):
        try:
            event_type = EventType.parse(event_type)
        except ValueError:
            return False
    return event_type is EventType.PUSH and branch == publish_branch


def should_trigger(event: EventContext, workflow: DocPublishWorkflow) -> bool:
    """Whether the event starts a job at all (the workflow's `on:` block)."""

    if event.event_type is EventType.PULL_REQUEST:
        return workflow.on.pull_request
    return event.branch in workflow.on.push_branches


def should_publish_event(event: EventContext, workflow: DocPublishWorkflow) -> bool:
    return should_publish(event.event_type, event.branch, workflow.publish_branch)

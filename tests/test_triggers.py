from __future__ import annotations

import pytest

from core.domain.models import EventContext, EventType
from core.domain.workflow import DocPublishWorkflow, TriggerRules
from core.triggers import should_publish, should_publish_event, should_trigger


@pytest.mark.parametrize(
    ("event_type", "branch", "expected"),
    [
        (EventType.PUSH, "dev", True),
        (EventType.PUSH, "main", False),
        (EventType.PUSH, "dev2", False),
        (EventType.PULL_REQUEST, "dev", False),
        (EventType.PULL_REQUEST, "feature/x", False),
        ("push", "dev", True),
        ("pull_request", "dev", False),
        ("schedule", "dev", False),
    ],
)
def test_should_publish_only_for_push_to_dev(event_type, branch, expected) -> None:
    assert should_publish(event_type, branch) is expected


def test_should_publish_honours_custom_branch() -> None:
    assert should_publish(EventType.PUSH, "main", publish_branch="main") is True
    assert should_publish(EventType.PUSH, "dev", publish_branch="main") is False


def test_should_trigger_push_only_on_listed_branches() -> None:
    workflow = DocPublishWorkflow()

    assert should_trigger(EventContext(event_type=EventType.PUSH, branch="dev"), workflow)
    assert not should_trigger(EventContext(event_type=EventType.PUSH, branch="main"), workflow)


def test_should_trigger_every_pull_request() -> None:
    workflow = DocPublishWorkflow()
    event = EventContext(event_type=EventType.PULL_REQUEST, branch="feature/x")

    assert should_trigger(event, workflow)
    assert not should_trigger(event, workflow.model_copy(update={"on": TriggerRules(pull_request=False)}))


def test_should_publish_event_uses_workflow_branch() -> None:
    workflow = DocPublishWorkflow(publish_branch="release")

    assert should_publish_event(EventContext(event_type=EventType.PUSH, branch="release"), workflow)
    assert not should_publish_event(EventContext(event_type=EventType.PUSH, branch="dev"), workflow)

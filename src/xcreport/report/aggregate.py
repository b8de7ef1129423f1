"""Bottom-up failure propagation for steps and test results."""
from __future__ import annotations

from typing import Optional, Sequence

from xcreport.report import Status, Step, StepContainer, TestResult


def select_failed_step(steps: Sequence[Step]) -> Optional[Step]:
    """Pick the step that represents failure among direct children.

    The last non-passed step in recording order wins.
    """
    failed = [s for s in steps if s.status != Status.PASSED]
    if not failed:
        return None
    return failed[-1]


def propagate_failure(node: StepContainer) -> Optional[Step]:
    """Copy the representative failed child's summary onto ``node``.

    Steps take over status, message and trace. Test results keep the
    status reported by the runner and only take message and trace.
    Values the selected child does not have leave the node untouched.

    Returns:
        The selected child, or None when every child passed.
    """
    selected = select_failed_step(node.steps)
    if selected is None:
        return None

    if not isinstance(node, TestResult):
        node.status = selected.status
    if selected.message is not None:
        node.message = selected.message
    if selected.trace is not None:
        node.trace = selected.trace
    return selected

# meresahar/services/lifecycle.py
"""Issue creation and administrator status/urgency transitions.

Any status may follow any other unless ``strict`` is set, in which case only
forward moves along Pending -> Ongoing -> Completed are accepted. The strict
check lives in the UPDATE's WHERE clause so a transition stays one write.
"""
import logging
from typing import Any, Optional

from sqlalchemy import or_

from meresahar.db.store import IssueStore
from meresahar.models.issue import Issue, IssueStatus, IssueUrgency, DEFAULT_STATUS, DEFAULT_URGENCY
from meresahar.services.images import SLOT_COLUMNS, ImageSlot

ALLOWED_TRANSITIONS: dict[IssueStatus, set[IssueStatus]] = {
    IssueStatus.pending: {IssueStatus.pending, IssueStatus.ongoing, IssueStatus.completed},
    IssueStatus.ongoing: {IssueStatus.ongoing, IssueStatus.completed},
    IssueStatus.completed: {IssueStatus.completed},
}


class IssueNotFound(Exception):
    def __init__(self, issue_id: int):
        super().__init__(f"Issue {issue_id} not found")
        self.issue_id = issue_id


class TransitionRejected(Exception):
    def __init__(self, issue_id: int, new_status: IssueStatus):
        super().__init__(f"Issue {issue_id} cannot move to {new_status.value}")
        self.issue_id = issue_id
        self.new_status = new_status


def predecessors(new_status: IssueStatus) -> list[IssueStatus]:
    return [s for s, targets in ALLOWED_TRANSITIONS.items() if new_status in targets]


def submit_issue(
    store: IssueStore,
    category: str,
    description: Any = "",
    username: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    image: Optional[bytes] = None,
) -> int:
    values = {
        "username": username or None,
        "category": category,
        # forms occasionally post non-string payloads; store their text form
        "description": "" if description is None else str(description),
        "latitude": latitude,
        "longitude": longitude,
        "status": DEFAULT_STATUS.value,
        "urgency": DEFAULT_URGENCY.value,
        SLOT_COLUMNS[ImageSlot.before]: image,
    }
    issue_id = store.insert_issue(values)
    logging.info(
        f"Issue #{issue_id} reported: user={username or 'Anonymous'} category={category} "
        f"lat={latitude} lng={longitude} image={'yes' if image else 'no'}"
    )
    return issue_id


def apply_transition(
    store: IssueStore,
    issue_id: int,
    new_status: IssueStatus,
    new_urgency: Optional[IssueUrgency] = None,
    after_image: Optional[bytes] = None,
    strict: bool = False,
) -> None:
    new_status = IssueStatus(new_status)
    values: dict[str, Any] = {"status": new_status.value}
    if new_urgency is not None:
        values["urgency"] = IssueUrgency(new_urgency).value

    if after_image and new_status == IssueStatus.completed:
        values[SLOT_COLUMNS[ImageSlot.after]] = after_image
    elif after_image:
        logging.info(f"Issue #{issue_id}: after image ignored for status {new_status.value}")

    conditions = []
    if strict:
        allowed = [s.value for s in predecessors(new_status)]
        cond = Issue.status.in_(allowed)
        if DEFAULT_STATUS.value in allowed:
            cond = or_(cond, Issue.status.is_(None))
        conditions.append(cond)

    if store.update_issue(issue_id, values, *conditions) == 0:
        if strict and store.exists(issue_id):
            raise TransitionRejected(issue_id, new_status)
        raise IssueNotFound(issue_id)

    logging.info(
        f"Issue #{issue_id} -> status={new_status.value} urgency={values.get('urgency', '(unchanged)')} "
        f"after_image={'updated' if 'after_image' in values else 'kept'}"
    )

"""Who may change which task fields.

Each rule grants a role, standing in a given relation to the task, a set
of editable fields (``None`` meaning every field). The first matching rule
decides; no match means the caller may not touch the task at all.
"""
from typing import FrozenSet, Iterable, NamedTuple, Optional

from coastboard.core.auth import ADMIN, MEMBER, SessionUser
from coastboard.core.errors import Forbidden

ANY = "any"
ASSIGNEE = "assignee"


class Rule(NamedTuple):
    role: str
    relation: str
    fields: Optional[FrozenSet[str]]


TASK_UPDATE_POLICY = (
    Rule(ADMIN, ANY, None),
    Rule(MEMBER, ASSIGNEE, frozenset({"status"})),
)


def relation_to(caller: SessionUser, task) -> str:
    return ASSIGNEE if caller.id in (task.assignee_ids or []) else ANY


def allowed_fields(caller: SessionUser, task) -> Optional[FrozenSet[str]]:
    """Editable fields for ``caller`` on ``task``; raises Forbidden when none."""
    relation = relation_to(caller, task)
    for rule in TASK_UPDATE_POLICY:
        if rule.role == caller.role and rule.relation in (ANY, relation):
            return rule.fields
    raise Forbidden("You can only update tasks assigned to you")


def authorize_update(caller: SessionUser, task, fields: Iterable[str]) -> None:
    permitted = allowed_fields(caller, task)
    if permitted is None:
        return
    denied = sorted(set(fields) - permitted)
    if denied:
        raise Forbidden(f"Members can only update: {', '.join(sorted(permitted))}")

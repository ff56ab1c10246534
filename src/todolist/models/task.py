"""Task composition model.

Leaf tasks carry their own ``done`` flag. Linked tasks derive ``done`` from
the live state of their member tasks every time it is read; member lists
are kept by reference so callers may add or complete members later.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Sequence

from ..errors import TaskCycleError


@dataclass(slots=True, frozen=True)
class SimpleTask:
    name: str
    done: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "done", bool(self.done))


@dataclass(slots=True, eq=False)
class MutableTask:
    """Leaf task whose completion can be changed in place."""

    name: str
    done: bool = False

    def __post_init__(self) -> None:
        self.done = bool(self.done)

    def complete(self) -> None:
        self.done = True

    def reopen(self) -> None:
        self.done = False

    def toggle(self) -> bool:
        self.done = not self.done
        return self.done


CompletionRule = Callable[[Sequence["Task"]], bool]

_evaluating: ContextVar[frozenset[int]] = ContextVar("todolist_task_evaluation", default=frozenset())


def _evaluate(task: "LinkedTask | BlockableLinkedTask", compute: Callable[[], Any]) -> Any:
    active = _evaluating.get()
    if id(task) in active:
        raise TaskCycleError(task.name)
    token = _evaluating.set(active | {id(task)})
    try:
        return compute()
    finally:
        _evaluating.reset(token)


def is_done(task: "Task") -> bool:
    """Strict completion: a partially done blockable task does not count."""

    return task.done is True


def all_members_done(members: Sequence["Task"]) -> bool:
    return all(is_done(member) for member in members)


def any_member_done(members: Sequence["Task"]) -> bool:
    return any(is_done(member) for member in members)


@dataclass(slots=True, frozen=True, eq=False)
class LinkedTask:
    """Task completed according to ``completion`` applied to its members."""

    name: str
    completed_by: list[Task] = field(default_factory=list)
    completion: CompletionRule = all_members_done

    @property
    def done(self) -> bool:
        return _evaluate(self, lambda: bool(self.completion(self.completed_by)))

    @property
    def partial(self) -> bool:
        def compute() -> bool:
            if bool(self.completion(self.completed_by)):
                return False
            return any_member_done(self.completed_by)

        return _evaluate(self, compute)


@dataclass(slots=True, frozen=True, eq=False)
class BlockableLinkedTask:
    """Task that needs every member done and none of its blockers done.

    ``done`` is ``True`` when all members are done (vacuously so without
    members), ``False`` when blocked or when no member is done, and ``None``
    when only some members are done.
    """

    name: str
    completed_by: list[Task] = field(default_factory=list)
    blocked_by: list[Task] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return _evaluate(self, lambda: any_member_done(self.blocked_by))

    @property
    def done(self) -> bool | None:
        def compute() -> bool | None:
            if any_member_done(self.blocked_by):
                return False
            finished = [is_done(member) for member in self.completed_by]
            if all(finished):
                return True
            if not any(finished):
                return False
            return None

        return _evaluate(self, compute)

    @property
    def partial(self) -> bool:
        return self.done is None


Task = SimpleTask | MutableTask | LinkedTask | BlockableLinkedTask


def iter_members(task: Task) -> Iterator[Task]:
    """Yield the direct members of ``task``: members first, then blockers."""

    if isinstance(task, (SimpleTask, MutableTask)):
        return
    if isinstance(task, LinkedTask):
        yield from task.completed_by
        return
    if isinstance(task, BlockableLinkedTask):
        yield from task.completed_by
        yield from task.blocked_by
        return
    raise TypeError(f"Unsupported task type: {type(task).__name__}")


def ensure_acyclic(task: Task) -> Task:
    """Return ``task`` if no task reachable from it refers back to itself."""

    finished: set[int] = set()
    path: set[int] = set()

    def visit(node: Task) -> None:
        key = id(node)
        if key in finished:
            return
        if key in path:
            raise TaskCycleError(node.name)
        path.add(key)
        for member in iter_members(node):
            visit(member)
        path.discard(key)
        finished.add(key)

    visit(task)
    return task


def create_simple_task(name: str, done: bool = False) -> SimpleTask:
    return SimpleTask(name, done)


def create_mutable_task(name: str, done: bool = False) -> MutableTask:
    return MutableTask(name, done)


def create_linked_task(
    name: str,
    members: list[Task] | None = None,
    completion: CompletionRule = all_members_done,
) -> LinkedTask:
    """Create a task whose completion is ``completion(members)``.

    ``members`` is kept by reference. Raises ``TaskCycleError`` if the
    resulting graph has a cycle.
    """

    task = LinkedTask(name, members if members is not None else [], completion)
    ensure_acyclic(task)
    return task


def create_complete_all_task(name: str, completed_by: list[Task] | None = None) -> LinkedTask:
    return create_linked_task(name, completed_by, all_members_done)


def create_complete_any_task(name: str, completed_by: list[Task] | None = None) -> LinkedTask:
    return create_linked_task(name, completed_by, any_member_done)


def create_complete_all_steps_blocking_task(
    name: str,
    completed_by: list[Task] | None = None,
    blocked_by: list[Task] | None = None,
) -> BlockableLinkedTask:
    task = BlockableLinkedTask(
        name,
        completed_by if completed_by is not None else [],
        blocked_by if blocked_by is not None else [],
    )
    ensure_acyclic(task)
    return task


def task_to_dict(task: Task) -> dict[str, Any]:
    """Render ``task`` and its members as a JSON-ready dictionary."""

    if isinstance(task, SimpleTask):
        return {"kind": "simple", "name": task.name, "done": task.done}
    if isinstance(task, MutableTask):
        return {"kind": "mutable", "name": task.name, "done": task.done}
    if isinstance(task, LinkedTask):
        return {
            "kind": "linked",
            "name": task.name,
            "done": task.done,
            "partial": task.partial,
            "completed_by": [task_to_dict(member) for member in task.completed_by],
        }
    if isinstance(task, BlockableLinkedTask):
        return {
            "kind": "blockable",
            "name": task.name,
            "done": task.done,
            "partial": task.partial,
            "blocked": task.blocked,
            "completed_by": [task_to_dict(member) for member in task.completed_by],
            "blocked_by": [task_to_dict(member) for member in task.blocked_by],
        }
    raise TypeError(f"Unsupported task type: {type(task).__name__}")


__all__ = [
    "BlockableLinkedTask",
    "CompletionRule",
    "LinkedTask",
    "MutableTask",
    "SimpleTask",
    "Task",
    "all_members_done",
    "any_member_done",
    "create_complete_all_steps_blocking_task",
    "create_complete_any_task",
    "create_linked_task",
    "create_mutable_task",
    "create_simple_task",
    "ensure_acyclic",
    "is_done",
    "iter_members",
    "task_to_dict",
]

"""Blackboard — shared context / hypothesis store for sleep agents.

Agents write hypotheses here; the controller reads the live ones each cycle,
resolves conflicts and writes the resolved actions back.  The blackboard is
constructed per sleep session and injected into agents and controller.

Concurrency
~~~~~~~~~~~
No internal locking.  All mutating calls must run to completion on one
logical thread of control.  Listeners are notified synchronously, in
subscription order, after every post / update / resolve / reset; a listener
must not mutate the blackboard from inside its own invocation.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog

from dreambreeze.arbitration.models import (
    ActionType,
    BlackboardSnapshot,
    Hypothesis,
    ResolvedAction,
)
from dreambreeze.models import SleepContext

logger = structlog.get_logger(__name__)

Listener = Callable[[], None]
Clock = Callable[[], int]


def now_ms() -> int:
    """Wall-clock epoch milliseconds."""
    return int(time.time() * 1000)


class Blackboard:
    """Mutable store of context, hypotheses and resolved actions.

    Parameters
    ----------
    clock
        Zero-argument callable returning epoch milliseconds.  Used for
        expiry filtering and exposed to agents via :meth:`now`.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or now_ms
        self._hypotheses: dict[tuple[str, ActionType], Hypothesis] = {}
        self._context = SleepContext()
        self._resolved: list[ResolvedAction] = []
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0

    def now(self) -> int:
        return self._clock()

    # ── Hypotheses ────────────────────────────────────────────

    def post_hypothesis(self, hypothesis: Hypothesis | dict[str, Any]) -> Hypothesis:
        """Insert or replace by ``(agent_id, action.type)`` and notify.

        Plain dicts are validated into a :class:`Hypothesis`; malformed
        input raises :class:`pydantic.ValidationError`.
        """
        if not isinstance(hypothesis, Hypothesis):
            hypothesis = Hypothesis.model_validate(hypothesis)

        # dict assignment keeps the original slot on replacement
        self._hypotheses[hypothesis.key] = hypothesis
        logger.debug(
            "blackboard.hypothesis_posted",
            agent=hypothesis.agent_id,
            action=hypothesis.action.type,
            confidence=hypothesis.confidence,
            priority=hypothesis.priority.value,
        )
        self._notify()
        return hypothesis

    def get_hypotheses(self) -> list[Hypothesis]:
        """Return hypotheses whose ``expires_at`` is still in the future.

        Expired entries stay in storage; they are only excluded here.
        """
        now = self._clock()
        return [h for h in self._hypotheses.values() if h.expires_at > now]

    # ── Context ───────────────────────────────────────────────

    def update_context(self, **fields: Any) -> None:
        """Shallow-merge *fields* into the context (last write wins)."""
        merged = {**dict(self._context), **fields}
        self._context = SleepContext.model_validate(merged)
        self._notify()

    def get_context(self) -> SleepContext:
        return self._context.model_copy(deep=True)

    # ── Resolution ────────────────────────────────────────────

    def resolve(self, actions: list[ResolvedAction]) -> None:
        """Overwrite the resolved-actions list.  Called by the controller."""
        self._resolved = list(actions)
        self._notify()

    def get_resolved_actions(self) -> list[ResolvedAction]:
        return list(self._resolved)

    def get_snapshot(self) -> BlackboardSnapshot:
        return BlackboardSnapshot(
            hypotheses=self.get_hypotheses(),
            context=self.get_context(),
            resolved_actions=self.get_resolved_actions(),
        )

    # ── Subscriptions ─────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; return an idempotent unsubscribe callable."""
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    # ── Lifecycle ─────────────────────────────────────────────

    def reset(self) -> None:
        """Clear hypotheses and resolved actions, restore default context."""
        self._hypotheses.clear()
        self._resolved = []
        self._context = SleepContext()
        logger.debug("blackboard.reset")
        self._notify()

    # ── Internals ─────────────────────────────────────────────

    def _notify(self) -> None:
        for listener in list(self._listeners.values()):
            listener()

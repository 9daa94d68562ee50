import logging
from typing import List

from autoturn.core.conditions import ConditionEvaluator
from autoturn.core.dispatcher import ActionDispatcher
from autoturn.core.ledger import RunContext, RunSummary
from autoturn.core.notifications import LoggingNotifier, Notifier
from autoturn.models import ErrorKind, QueuedAction, Token

logger = logging.getLogger(__name__)


class ExecutionEngine:
    """
    Runs a subject's action queue for one turn.

    Only one run may be in flight at a time, across every subject. A call that
    arrives while another run is active is dropped, not queued.

    Per action: check the condition, dispatch, record the outcome, then run the
    `on_success` / `on_failure` branch target if there is one (without its
    condition, and without following its own branches), and pause for the
    pacing delay. Stopping cancels the pause and ends the run at the next
    step; an executor call already in progress still completes.
    """

    def __init__(
        self,
        dispatcher: ActionDispatcher,
        evaluator: ConditionEvaluator | None = None,
        notifier: Notifier | None = None,
        pacing_delay_ms: int = 500,
    ):
        self.dispatcher = dispatcher
        self.evaluator = evaluator or ConditionEvaluator()
        self.notifier = notifier or LoggingNotifier()
        self.pacing_delay_ms = pacing_delay_ms

        self._executing = False
        self._context: RunContext | None = None

    @property
    def is_executing(self) -> bool:
        return self._executing

    def _is_active(self, context: RunContext) -> bool:
        return self._executing and self._context is context and not context.stopped

    async def execute_queue(self, subject: Token, actions: List[QueuedAction]) -> RunSummary | None:
        """
        Execute `actions` for `subject`. Returns None when another run is in
        flight; otherwise a summary of this run.
        """
        if self._executing:
            logger.debug(
                "%s: execution already in progress, ignoring request for %s",
                ErrorKind.CONCURRENT_RUN_REJECTED.value,
                subject.name,
            )
            return None

        self._executing = True
        context = RunContext(subject=subject, actions=list(actions))
        self._context = context

        # Snapshot of what runs this turn; `context.actions` keeps the rest for branch lookup
        ordered = sorted((a for a in context.actions if a.enabled), key=lambda a: a.order)
        executed = 0
        skipped = 0

        logger.info("Executing %d action(s) for %s", len(ordered), subject.name)
        try:
            for action in ordered:
                if not self._is_active(context):
                    break

                if not self.evaluator.evaluate(action.condition, context, action):
                    skipped += 1
                    self.notifier.skip_notice(subject, action, "condition not met")
                    continue

                outcome = await self._run_action(action, context)
                executed += 1
                if not await self._pace(context):
                    break

                branch_id = action.on_success if outcome.success else action.on_failure
                if branch_id and self._is_active(context):
                    branch = context.find_action(branch_id)
                    if branch is None:
                        logger.debug("Branch target %s not found in queue", branch_id)
                        continue
                    logger.debug("Branching from %s to %s", action.name, branch.name)
                    await self._run_action(branch, context)
                    executed += 1
                    if not await self._pace(context):
                        break

            stopped = context.stopped
            if not stopped:
                self.notifier.run_summary(subject, executed)
            return RunSummary(
                subject_id=subject.id,
                executed=executed,
                skipped=skipped,
                stopped=stopped,
                results=dict(context.results),
            )

        except Exception as e:
            logger.error("Error executing queue for %s: %s", subject.name, e)
            self.notifier.run_error(subject, str(e))
            raise

        finally:
            if self._context is context:
                self._executing = False
                self._context = None

    async def _run_action(self, action: QueuedAction, context: RunContext):
        logger.debug("Executing action %s (%s)", action.name, action.type)
        outcome = await self.dispatcher.dispatch(action, context)
        context.record(action.id, outcome)
        if not outcome.success:
            logger.debug("Action %s failed: %s", action.name, outcome.message)
        return outcome

    async def _pace(self, context: RunContext) -> bool:
        """Pause between actions. False if the run was stopped meanwhile."""
        await context.pacer.sleep(self.pacing_delay_ms / 1000)
        return self._is_active(context)

    def stop_execution(self) -> None:
        """Emergency stop. Safe to call when nothing is running."""
        context = self._context
        if context is not None:
            context.stopped = True
            context.pacer.cancel()
            logger.info("Action execution stopped for %s", context.subject.name)
        self._executing = False
        self._context = None

    def get_status(self) -> dict:
        context = self._context
        return {
            "executing": self._executing,
            "current_subject": context.subject.name if context else None,
            "actions_completed": len(context.results) if context else None,
        }

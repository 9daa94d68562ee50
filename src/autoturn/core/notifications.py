import logging
from typing import Protocol

from autoturn.models import QueuedAction, Token

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Where run reports go. The host UI implements this; the default just logs."""

    def run_summary(self, subject: Token, executed: int) -> None: ...

    def run_error(self, subject: Token, message: str) -> None: ...

    def skip_notice(self, subject: Token, action: QueuedAction, reason: str) -> None: ...


class LoggingNotifier:

    def run_summary(self, subject: Token, executed: int) -> None:
        logger.info("Executed %d action(s) for %s", executed, subject.name)

    def run_error(self, subject: Token, message: str) -> None:
        logger.error("Action execution failed for %s: %s", subject.name, message)

    def skip_notice(self, subject: Token, action: QueuedAction, reason: str) -> None:
        logger.debug("Skipping action %s for %s: %s", action.name, subject.name, reason)

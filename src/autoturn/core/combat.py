import asyncio
import logging
from typing import Awaitable, Callable, List

from autoturn.core.rules_engine import RulesEngine
from autoturn.core.turn_hooks import OwnershipCheck, always_owned
from autoturn.models import Token

logger = logging.getLogger(__name__)

# Called with (token whose turn it is, is_new_turn)
TurnListener = Callable[[Token, bool], Awaitable[object]]


class Combat:
    """
    Minimal combat tracker: initiative order, current turn and round.
    Listeners are awaited in registration order every time a turn begins.

    Only tokens flagged for auto-initiative are rolled for, and only when
    this client may drive them. Everyone else keeps whatever initiative
    they were given; combatants with none go last.
    """

    def __init__(
        self,
        combatants: List[Token],
        rules: RulesEngine | None = None,
        is_owner: OwnershipCheck = always_owned,
        roll_delay_ms: int = 0,
    ):
        self.combatants = list(combatants)
        self.rules = rules or RulesEngine()
        self.is_owner = is_owner
        self.roll_delay_ms = roll_delay_ms
        self.round = 0
        self.turn = 0
        self.started = False
        self._rolling = False
        self._listeners: List[TurnListener] = []

    def add_listener(self, listener: TurnListener) -> None:
        self._listeners.append(listener)

    @property
    def current(self) -> Token | None:
        if not self.started or not self.combatants:
            return None
        return self.combatants[self.turn]

    # =========================================================================
    # AUTO-INITIATIVE
    # =========================================================================

    @staticmethod
    def toggle_auto_initiative(token: Token) -> bool:
        token.auto_initiative = not token.auto_initiative
        logger.info("Auto-initiative %s for %s", "enabled" if token.auto_initiative else "disabled", token.name)
        return token.auto_initiative

    def auto_roll_candidates(self) -> List[Token]:
        """Flagged, owned combatants still waiting for an initiative."""
        return [
            token for token in self.combatants
            if token.initiative is None and token.auto_initiative and self.is_owner(token)
        ]

    async def roll_auto_initiative(self) -> int:
        """
        Roll 1d20 + DEX modifier for every auto-roll candidate, pausing
        roll_delay_ms between rolls. A call made while another is still
        rolling does nothing. Returns how many were rolled.
        """
        if self._rolling:
            logger.debug("Already rolling initiative, skipping")
            return 0

        self._rolling = True
        try:
            candidates = self.auto_roll_candidates()
            rolled = 0
            for idx, token in enumerate(candidates):
                # Set by someone else while we were waiting
                if token.initiative is not None:
                    continue
                token.initiative = self.rules.roll_initiative(token.attributes["DEX"])
                logger.debug("Rolled initiative for %s: %d", token.name, token.initiative)
                rolled += 1
                if self.roll_delay_ms > 0 and idx < len(candidates) - 1:
                    await asyncio.sleep(self.roll_delay_ms / 1000)
        finally:
            self._rolling = False

        if rolled:
            logger.info("Rolled initiative for %d combatant(s)", rolled)
        return rolled

    def reset_auto_initiative(self) -> int:
        """Clear initiative on flagged combatants only. Returns how many were cleared."""
        cleared = 0
        for token in self.combatants:
            if token.auto_initiative and token.initiative is not None:
                token.initiative = None
                cleared += 1
        if cleared:
            logger.info("Reset initiative for %d combatant(s)", cleared)
        return cleared

    async def add_combatant(self, token: Token) -> None:
        """Join mid-combat at the end of the order; flagged tokens roll right away."""
        self.combatants.append(token)
        if token.auto_initiative:
            await self.roll_auto_initiative()

    # =========================================================================
    # TURNS
    # =========================================================================

    def sort_by_initiative(self) -> None:
        # Stable: ties keep the order combatants joined in
        self.combatants.sort(key=lambda t: (t.initiative is None, -(t.initiative or 0)))

    async def start(self) -> Token | None:
        await self.roll_auto_initiative()
        self.sort_by_initiative()
        self.round = 1
        self.turn = 0
        self.started = True
        logger.info("Combat started: %s", ", ".join(f"{t.name} ({t.initiative})" for t in self.combatants))
        await self._fire()
        return self.current

    async def next_turn(self) -> Token | None:
        """Advance to the next living combatant, wrapping into a new round."""
        if not self.started:
            return await self.start()
        if not any(t.alive for t in self.combatants):
            return None

        while True:
            self.turn += 1
            if self.turn >= len(self.combatants):
                self.turn = 0
                self.round += 1
                logger.info("Round %d", self.round)
                # Anyone flagged who joined or was reset since the last round
                await self.roll_auto_initiative()
            if self.combatants[self.turn].alive:
                break

        await self._fire()
        return self.current

    async def _fire(self) -> None:
        token = self.current
        if token is None:
            return
        logger.debug("Round %d, turn of %s", self.round, token.name)
        for listener in self._listeners:
            await listener(token, True)

"""
Combat tracker tests: auto-initiative, turn order, round wrap.
Every token has DEX 10, so an initiative equals its scripted d20.
Run with: pytest src/autoturn/core/test_combat.py
"""

import asyncio

from autoturn.core import Combat, RulesEngine
from autoturn.models import Disposition, Position, Token


class FixedRandom:
    """randint stand-in that replays scripted values."""

    def __init__(self, *values: int):
        self.values = list(values)

    def randint(self, low: int, high: int) -> int:
        return self.values.pop(0)


def make_token(token_id: str, auto: bool = True, initiative: int | None = None, hp: int = 10) -> Token:
    return Token(
        id=token_id,
        name=token_id.title(),
        position=Position(0, 0),
        disposition=Disposition.HOSTILE,
        hp=hp,
        max_hp=10,
        initiative=initiative,
        auto_initiative=auto,
    )


def names(combat: Combat) -> list[str]:
    return [t.id for t in combat.combatants]


def test_start_rolls_flagged_tokens_and_sorts():
    """Only flagged tokens roll; ties keep join order and unrolled tokens go last."""
    tokens = [
        make_token("manual", auto=False),
        make_token("archer"),
        make_token("knight"),
        make_token("priest", auto=False, initiative=12),
    ]
    combat = Combat(tokens, rules=RulesEngine(rng=FixedRandom(12, 15)))
    turns = []

    async def listener(token, is_new_turn):
        turns.append((token.id, is_new_turn))

    combat.add_listener(listener)
    current = asyncio.run(combat.start())

    assert tokens[1].initiative == 12
    assert tokens[2].initiative == 15
    assert tokens[0].initiative is None
    assert names(combat) == ["knight", "archer", "priest", "manual"]
    assert current.id == "knight"
    assert combat.round == 1
    assert turns == [("knight", True)]
    print("✓ Auto-initiative rolled and combatants sorted")


def test_ownership_limits_auto_rolls():
    tokens = [make_token("mine"), make_token("theirs")]
    combat = Combat(tokens, rules=RulesEngine(rng=FixedRandom(9)), is_owner=lambda t: t.id == "mine")

    assert [t.id for t in combat.auto_roll_candidates()] == ["mine"]
    assert asyncio.run(combat.roll_auto_initiative()) == 1
    assert tokens[0].initiative == 9
    assert tokens[1].initiative is None


def test_next_turn_wraps_rounds_and_skips_the_dead():
    tokens = [
        make_token("a", initiative=20),
        make_token("b", initiative=15, hp=0),
        make_token("c", initiative=10),
    ]
    combat = Combat(tokens, rules=RulesEngine(rng=FixedRandom()))
    turns = []

    async def listener(token, is_new_turn):
        turns.append((combat.round, token.id, is_new_turn))

    combat.add_listener(listener)

    async def play():
        for _ in range(4):
            await combat.next_turn()

    asyncio.run(play())

    assert turns == [(1, "a", True), (1, "c", True), (2, "a", True), (2, "c", True)]
    print("✓ Round wrap and dead combatants skipped")


def test_next_turn_with_everyone_down_returns_none():
    tokens = [make_token("a", initiative=5), make_token("b", initiative=3)]
    combat = Combat(tokens, rules=RulesEngine(rng=FixedRandom()))

    async def play():
        await combat.start()
        for token in tokens:
            token.hp = 0
        return await combat.next_turn()

    assert asyncio.run(play()) is None
    assert combat.round == 1


def test_reset_clears_only_flagged_and_rerolls_next_round():
    tokens = [make_token("auto"), make_token("manual", auto=False, initiative=8)]
    combat = Combat(tokens, rules=RulesEngine(rng=FixedRandom(14, 3)))

    async def play():
        await combat.start()
        cleared = combat.reset_auto_initiative()
        assert tokens[0].initiative is None
        assert tokens[1].initiative == 8
        await combat.next_turn()        # manual
        await combat.next_turn()        # wraps into round 2 and rolls again
        return cleared

    assert asyncio.run(play()) == 1
    assert combat.round == 2
    assert tokens[0].initiative == 3


def test_concurrent_roll_request_is_ignored():
    tokens = [make_token("a"), make_token("b")]
    combat = Combat(tokens, rules=RulesEngine(rng=FixedRandom(11, 6)), roll_delay_ms=10)

    async def both():
        return await asyncio.gather(combat.roll_auto_initiative(), combat.roll_auto_initiative())

    assert asyncio.run(both()) == [2, 0]
    assert [t.initiative for t in tokens] == [11, 6]


def test_flagged_combatant_rolls_on_joining():
    combat = Combat([make_token("a", initiative=10)], rules=RulesEngine(rng=FixedRandom(17)))
    late = make_token("late")
    bystander = make_token("bystander", auto=False)

    async def play():
        await combat.add_combatant(late)
        await combat.add_combatant(bystander)

    asyncio.run(play())

    assert late.initiative == 17
    assert bystander.initiative is None
    assert names(combat) == ["a", "late", "bystander"]


def test_toggle_auto_initiative():
    token = make_token("a", auto=False)
    assert Combat.toggle_auto_initiative(token)
    assert token.auto_initiative
    assert not Combat.toggle_auto_initiative(token)

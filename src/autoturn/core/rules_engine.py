import re
import random
from dataclasses import dataclass
from typing import Dict

# ============================================================
# RULES ENGINE
# ============================================================

DICE_PATTERN = re.compile(r"(\d+)d(\d+)([+-]\w+)?")


@dataclass
class AttackRoll:
    natural: int
    total: int

    @property
    def critical(self) -> bool:
        return self.natural == 20

    @property
    def fumble(self) -> bool:
        return self.natural == 1


class RulesEngine:
    """
    Dice rolling and the handful of 5e-style mechanics the executors need.
    Pass a seeded `random.Random` (or any object with `randint`) for
    reproducible rolls.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def calculate_modifier(self, attribute_value: int) -> int:
        """
        Calculates standard D&D style modifier: (val - 10) // 2
        e.g., 10 -> 0, 12 -> +1, 8 -> -1
        """
        return (attribute_value - 10) // 2

    def roll_dice(self, formula: str, context: Dict[str, int] | None = None, critical: bool = False) -> int:
        """
        Parses a dice string (e.g., '1d20+5', '2d6', '1d20+STR') and rolls it.
        A bare integer ('0', '4') is returned as is.

        Args:
            formula: The dice string.
            context: A dictionary mapping attribute names (STR, DEX) to their *modifiers*.
                     Used if the formula contains non-numeric modifiers.
            critical: Roll the dice twice as many times (modifier added once).
        """
        formula = formula.strip()
        if formula.lstrip("+-").isdigit():
            return int(formula)

        match = DICE_PATTERN.fullmatch(formula)
        if not match:
            raise ValueError(f"Invalid dice formula format: {formula}")

        num_dice = int(match.group(1)) * (2 if critical else 1)
        die_sides = int(match.group(2))
        modifier_str = match.group(3)

        total = 0
        for _ in range(num_dice):
            total += self.rng.randint(1, die_sides)

        if modifier_str:
            sign = 1 if modifier_str[0] == '+' else -1
            value_part = modifier_str[1:]

            if value_part.isdigit():
                mod_value = int(value_part)
            else:
                # Attribute reference (e.g., +STR)
                if context is None:
                    raise ValueError(f"Formula requires context for attribute '{value_part}' but none provided.")
                mod_value = context.get(value_part.upper(), 0)

            total += (sign * mod_value)

        return total

    def roll_d20(self, advantage: bool = False, disadvantage: bool = False) -> int:
        """Natural d20. Advantage and disadvantage cancel each other out."""
        first = self.rng.randint(1, 20)
        if advantage == disadvantage:
            return first
        second = self.rng.randint(1, 20)
        return max(first, second) if advantage else min(first, second)

    def attack_roll(self, bonus: int, advantage: bool = False, disadvantage: bool = False) -> AttackRoll:
        natural = self.roll_d20(advantage, disadvantage)
        return AttackRoll(natural=natural, total=natural + bonus)

    def attack_hits(self, roll: AttackRoll, target_ac: int) -> bool:
        """Natural 20 always hits, natural 1 always misses, otherwise meet or beat AC."""
        if roll.critical:
            return True
        if roll.fumble:
            return False
        return roll.total >= target_ac

    def saving_throw(self, attribute_value: int, dc: int) -> bool:
        """Roll a save for a creature with the given attribute score. True if it succeeds."""
        total = self.roll_d20() + self.calculate_modifier(attribute_value)
        return total >= dc

    def roll_initiative(self, dexterity: int) -> int:
        return self.roll_d20() + self.calculate_modifier(dexterity)

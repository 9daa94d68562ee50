from autoturn.models.schemas import Attribute, Attributes, Disposition, ItemType, Position
from typing import Dict
from dataclasses import dataclass, field


def default_attributes() -> Attributes:
    return Attributes(STR=10, DEX=10, CON=10, INT=10, WIS=10, CHA=10)


# Items, weapons and spells a token can use
@dataclass
class Item:
    id: str
    name: str
    item_type: ItemType = ItemType.WEAPON
    description: str = ""
    # Limited uses (charges); None means unlimited
    uses: int | None = None
    max_uses: int | None = None
    # Spells consume a slot of this level; cantrips are level 0
    level: int = 0
    # Name of a resource pool on the owner consumed per use ("ki", "superiority")
    consume_target: str | None = None
    reach: int = 5                          # Feet
    attack_bonus: int | None = None         # Present => item makes an attack roll
    damage: str | None = None               # Dice formula, e.g. "1d8+3"
    save_dc: int | None = None              # Present => target makes a saving throw
    save_attribute: Attribute = Attribute.DEX
    healing: str | None = None              # Dice formula restored to the user

    @property
    def has_attack(self) -> bool:
        return self.attack_bonus is not None

    @property
    def has_damage(self) -> bool:
        return bool(self.damage)

    @property
    def has_save(self) -> bool:
        return self.save_dc is not None


# Anything standing on the battle map: the automated subject, its allies and foes
@dataclass
class Token:
    id: str
    name: str
    position: Position
    disposition: Disposition
    hp: int
    max_hp: int
    ac: int = 10
    speed: int = 30                         # Walking movement budget per turn, in feet
    attributes: Attributes = field(default_factory=default_attributes)
    spell_slots: Dict[int, int] = field(default_factory=dict)    # Remaining casts per spell level
    resources: Dict[str, int] = field(default_factory=dict)      # Named pools ("ki", "rage")
    hidden: bool = False
    advantage: bool | None = None           # None when the host doesn't track it
    disadvantage: bool | None = None
    initiative: int | None = None
    auto_initiative: bool = False           # Roll initiative for this token automatically

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def hp_percent(self) -> float:
        return self.hp / self.max_hp * 100

    def hostile_disposition(self) -> Disposition:
        """Disposition of the tokens this one fights."""
        return Disposition(self.disposition.value * -1)

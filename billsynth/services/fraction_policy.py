from billsynth.core.config import GenerationConfig
from billsynth.services.inventory import Item, has_fraction


class FractionPolicy:
    """
    Decides whether an item may be sold in a non-integer quantity.

    Allowed when the item is high-value (MRP above the threshold), when it is
    already a broken unit, or when one whole unit would not fit in the room
    left on the bill. "Broken unit" means the originally loaded quantity was
    fractional under the `original` rule, or the current remaining quantity
    is fractional under the `current` rule.
    """

    def __init__(self, config: GenerationConfig):
        self.high_value_mrp = config.high_value_mrp
        self.rule = config.fraction_rule

    def is_broken_unit(self, item: Item) -> bool:
        if self.rule == "current":
            return has_fraction(item.remaining_qty)
        return item.originally_fractional

    def allows_fraction(self, item: Item, room_left: float) -> bool:
        if item.mrp > self.high_value_mrp:
            return True
        if self.is_broken_unit(item):
            return True
        return item.single_unit_cost > room_left

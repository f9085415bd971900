from __future__ import annotations

from typing import Dict, List, Type

from .rule import Rule


class RuleRegistry:
    """Rule classes keyed by id; iteration always follows pipeline order."""

    def __init__(self):
        self._by_id: Dict[str, Type[Rule]] = {}
        self._by_order: Dict[int, Type[Rule]] = {}

    def register(self, rule_cls: Type[Rule]) -> None:
        rule_id = getattr(rule_cls, "rule_id", None)
        if not rule_id:
            raise ValueError(f"{rule_cls.__name__} has no rule_id")
        if rule_id in self._by_id:
            raise ValueError(f"Duplicate rule_id registered: {rule_id}")
        order = getattr(rule_cls, "order", None)
        if not isinstance(order, int):
            raise ValueError(f"Rule {rule_id} needs an integer order, got {order!r}")
        clash = self._by_order.get(order)
        if clash is not None:
            raise ValueError(f"Rules {clash.rule_id} and {rule_id} share order {order}")
        self._by_id[rule_id] = rule_cls
        self._by_order[order] = rule_cls

    def ordered(self) -> List[Type[Rule]]:
        return [self._by_order[k] for k in sorted(self._by_order)]

    def create_all(self) -> List[Rule]:
        return [rule_cls() for rule_cls in self.ordered()]

    def get(self, rule_id: str) -> Type[Rule]:
        return self._by_id[rule_id]

    def ids(self) -> List[str]:
        return [rule_cls.rule_id for rule_cls in self.ordered()]

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)


registry = RuleRegistry()


def register_rule(rule_cls: Type[Rule]) -> Type[Rule]:
    """Class decorator adding a rule to the default pipeline."""
    registry.register(rule_cls)
    return rule_cls

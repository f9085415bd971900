"""Describe the registered validation rules for reviewers and config authors."""

from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel

from .registry import registry

# Importing the package registers the built-in rules.
from . import rules as _builtin_rules  # noqa: F401


class RuleCatalogEntry(BaseModel):
    position: int
    rule_id: str
    rule_title: str
    order: int
    enabled_by_default: bool

    module: str
    class_name: str

    config_model: str
    config_defaults: Dict[str, Any]
    config_schema: Dict[str, Any]


def build_catalog() -> List[RuleCatalogEntry]:
    """Registered rules in the order the pipeline applies them."""
    entries: List[RuleCatalogEntry] = []
    for position, rule_cls in enumerate(registry.ordered(), start=1):
        defaults = rule_cls.config_model()
        entries.append(
            RuleCatalogEntry(
                position=position,
                rule_id=rule_cls.rule_id,
                rule_title=getattr(rule_cls, "rule_title", ""),
                order=rule_cls.order,
                enabled_by_default=bool(getattr(defaults, "enabled", True)),
                module=rule_cls.__module__,
                class_name=rule_cls.__name__,
                config_model=rule_cls.config_model.__name__,
                config_defaults=defaults.model_dump(mode="json"),
                config_schema=rule_cls.config_model.model_json_schema(),
            )
        )
    return entries


def render_markdown(entries: List[RuleCatalogEntry]) -> str:
    lines = ["| # | Rule | Title | Default |", "|---|------|-------|---------|"]
    for e in entries:
        state = "on" if e.enabled_by_default else "off"
        lines.append(f"| {e.position} | `{e.rule_id}` | {e.rule_title} | {state} |")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the validation rules catalog.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json", "markdown"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    entries = build_catalog()
    if args.format == "markdown":
        print(render_markdown(entries))
        return
    payload = [e.model_dump(mode="json") for e in entries]
    if args.format == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))


if __name__ == "__main__":
    main()

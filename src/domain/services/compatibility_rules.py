"""Node category compatibility rules (SoT).

Single source of truth for:
- Connection verdicts (`ConnectionValidator` attaches the score + rationale)
- Connection suggestions (`WorkflowSuggestionEngine` ranks candidates)
- Machine-consumable rules output (`GET /api/workflow-validation/rules`)

The table is loaded once at import time and cannot be mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from src.domain.exceptions import DomainError
from src.domain.value_objects.node_category import NodeCategory, category_name

if TYPE_CHECKING:
    from src.domain.entities.node import Node

# Rule table versioning (independent from app version).
RULE_TABLE_VERSION = "2025-05-01/v1"

WILDCARD = "*"

# A connection without an explicit rule needs a score strictly above this to be accepted.
VALID_SCORE_THRESHOLD = 50
# A candidate connection needs a score strictly above this to be suggested.
SUGGEST_SCORE_THRESHOLD = 60

FALLBACK_SCORE = 50
FALLBACK_RATIONALE = "generic connection"


@dataclass(frozen=True, slots=True)
class CompatibilityRule:
    source: str
    target: str
    score: int
    rationale: str

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            raise DomainError(f"compatibility score out of range: {self.score}")
        if not self.source or not self.target:
            raise DomainError("compatibility rule categories must be non-empty")

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)

    @property
    def is_fallback(self) -> bool:
        return self.source == WILDCARD and self.target == WILDCARD

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source,
            "target": self.target,
            "score": self.score,
            "rationale": self.rationale,
        }


FALLBACK_RULE = CompatibilityRule(WILDCARD, WILDCARD, FALLBACK_SCORE, FALLBACK_RATIONALE)


def _key(value: NodeCategory | str | None) -> str:
    if value is None:
        return ""
    return category_name(NodeCategory.normalize(value))


class CompatibilityRuleTable:
    """Immutable (source, target) -> rule table with wildcard fallback.

    Lookup precedence: exact, (source, *), (*, target), global fallback.
    Exactly one rule is returned for every pair, including unknown categories.
    """

    __slots__ = ("_rules", "_known", "_fallback", "version")

    def __init__(self, rules: Iterable[CompatibilityRule], *, version: str = RULE_TABLE_VERSION) -> None:
        index: dict[tuple[str, str], CompatibilityRule] = {}
        fallback = FALLBACK_RULE
        for rule in rules:
            normalized = CompatibilityRule(
                source=rule.source if rule.source == WILDCARD else _key(rule.source),
                target=rule.target if rule.target == WILDCARD else _key(rule.target),
                score=rule.score,
                rationale=rule.rationale,
            )
            if normalized.is_fallback:
                fallback = normalized
                continue
            if normalized.key in index:
                raise DomainError(f"duplicate compatibility rule: {normalized.source} -> {normalized.target}")
            index[normalized.key] = normalized

        known = {c for key in index for c in key if c != WILDCARD}
        self._rules = MappingProxyType(index)
        self._known = frozenset(known)
        self._fallback = fallback
        self.version = version

    def __len__(self) -> int:
        return len(self._rules) + 1

    @property
    def fallback(self) -> CompatibilityRule:
        return self._fallback

    def rules(self) -> list[CompatibilityRule]:
        return [*self._rules.values(), self._fallback]

    def knows_category(self, category: NodeCategory | str | None) -> bool:
        """Whether any explicit rule mentions this category (or node type)."""
        return _key(category) in self._known

    def lookup(self, source: NodeCategory | str | None, target: NodeCategory | str | None) -> CompatibilityRule:
        src = _key(source)
        tgt = _key(target)
        for candidate in ((src, tgt), (src, WILDCARD), (WILDCARD, tgt)):
            rule = self._rules.get(candidate)
            if rule is not None:
                return rule
        return self._fallback


_DEFAULT_RULES: tuple[CompatibilityRule, ...] = (
    # Trigger to Action connections
    CompatibilityRule("trigger", "action", 95, "Triggers naturally connect to actions"),
    CompatibilityRule("webhook", "api", 90, "Webhooks work perfectly with API calls"),
    CompatibilityRule("schedule", "email", 85, "Scheduled email sending is a common pattern"),
    # Action to Action connections
    CompatibilityRule("api", "transformer", 80, "Transform API responses before the next step"),
    CompatibilityRule("transformer", "action", 75, "Use transformed data in your next action"),
    CompatibilityRule("action", "action", 70, "Chain multiple actions together for complex workflows"),
    # Conditional flows
    CompatibilityRule("condition", "action", 85, "Trigger actions based on specific conditions"),
    CompatibilityRule("filter", "action", 80, "Filter data before passing to the next action"),
    CompatibilityRule("action", "condition", 75, "Evaluate conditions after actions complete"),
    # AI nodes
    CompatibilityRule("action", "openai", 85, "Process data with AI"),
    CompatibilityRule("openai", "action", 80, "Take action based on AI processing"),
    # Data processing
    CompatibilityRule("api", "filter", 75, "Filter API responses before proceeding"),
    CompatibilityRule("api", "code", 85, "Process API responses with custom code"),
    CompatibilityRule("code", "action", 80, "Execute actions with processed data"),
    # Category-level rules
    CompatibilityRule("trigger", "condition", 80, "Branch right after the trigger fires"),
    CompatibilityRule("trigger", "transformer", 75, "Normalize trigger payloads before acting on them"),
    CompatibilityRule("trigger", "agent", 70, "Let an agent handle incoming events"),
    CompatibilityRule("data", "transformer", 85, "Reshape data before using it"),
    CompatibilityRule("data", "condition", 70, "Route records based on their content"),
    CompatibilityRule("transformer", "integration", 75, "Send transformed data to an integration"),
    CompatibilityRule("integration", "action", 70, "Act on data received from an integration"),
    CompatibilityRule("agent", "action", 80, "Take action based on agent output"),
    CompatibilityRule("condition", "agent", 70, "Hand a branch over to an agent"),
    CompatibilityRule(WILDCARD, "trigger", 5, "Triggers start workflows and cannot receive connections"),
    FALLBACK_RULE,
)

DEFAULT_RULE_TABLE = CompatibilityRuleTable(_DEFAULT_RULES)


def get_default_rule_table() -> CompatibilityRuleTable:
    return DEFAULT_RULE_TABLE


def effective_category(node: Node, table: CompatibilityRuleTable = DEFAULT_RULE_TABLE) -> str:
    """Category used as the rule table key for a node.

    The node type wins when the table carries explicit rules for it
    (e.g. `webhook`, `openai`), otherwise the node category is used.
    """
    if node.node_type and table.knows_category(node.node_type):
        return _key(node.node_type)
    return node.category_name

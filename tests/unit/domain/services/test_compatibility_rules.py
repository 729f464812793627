"""测试：兼容性规则表

验收标准：
- 查找是全函数：任意 (source, target) 恰好返回一条规则
- 优先级：精确匹配 > (source, *) > (*, target) > 全局兜底
"""

import itertools

import pytest

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.services.compatibility_rules import (
    DEFAULT_RULE_TABLE,
    FALLBACK_RATIONALE,
    FALLBACK_SCORE,
    RULE_TABLE_VERSION,
    WILDCARD,
    CompatibilityRule,
    CompatibilityRuleTable,
    effective_category,
)
from src.domain.value_objects.node_category import NodeCategory


class TestDefaultRuleTable:
    def test_trigger_to_action_scores_95(self):
        rule = DEFAULT_RULE_TABLE.lookup(NodeCategory.TRIGGER, NodeCategory.ACTION)

        assert rule.score == 95
        assert rule.rationale == "Triggers naturally connect to actions"

    def test_lookup_is_case_insensitive(self):
        assert DEFAULT_RULE_TABLE.lookup("Webhook", "API").score == 90

    def test_unknown_pair_falls_back_to_generic_connection(self):
        rule = DEFAULT_RULE_TABLE.lookup("quantum", "teleport")

        assert rule.score == FALLBACK_SCORE == 50
        assert rule.rationale == FALLBACK_RATIONALE == "generic connection"
        assert rule.is_fallback is True

    def test_anything_into_trigger_scores_low(self):
        rule = DEFAULT_RULE_TABLE.lookup(NodeCategory.ACTION, NodeCategory.TRIGGER)

        assert rule.score < 50

    def test_lookup_is_total_over_categories(self):
        """测试：所有已知分类（含未知与空值）两两组合都能查到规则"""
        categories = [*NodeCategory, "webhook", "unknown", "", None]

        for source, target in itertools.product(categories, repeat=2):
            rule = DEFAULT_RULE_TABLE.lookup(source, target)
            assert isinstance(rule, CompatibilityRule)
            assert 0 <= rule.score <= 100

    def test_rules_lists_fallback_last_and_is_a_copy(self):
        rules = DEFAULT_RULE_TABLE.rules()
        rules.clear()

        assert DEFAULT_RULE_TABLE.rules()[-1].is_fallback
        assert len(DEFAULT_RULE_TABLE.rules()) == len(DEFAULT_RULE_TABLE)

    def test_version_is_exposed(self):
        assert DEFAULT_RULE_TABLE.version == RULE_TABLE_VERSION


class TestLookupPrecedence:
    def _table(self) -> CompatibilityRuleTable:
        return CompatibilityRuleTable(
            [
                CompatibilityRule("data", "agent", 90, "exact"),
                CompatibilityRule("data", WILDCARD, 40, "source wildcard"),
                CompatibilityRule(WILDCARD, "agent", 30, "target wildcard"),
            ],
            version="test",
        )

    def test_exact_match_wins(self):
        assert self._table().lookup("data", "agent").rationale == "exact"

    def test_source_wildcard_beats_target_wildcard(self):
        table = CompatibilityRuleTable(
            [
                CompatibilityRule("data", WILDCARD, 40, "source wildcard"),
                CompatibilityRule(WILDCARD, "agent", 30, "target wildcard"),
            ]
        )

        assert table.lookup("data", "agent").rationale == "source wildcard"

    def test_target_wildcard_used_when_no_source_rule(self):
        assert self._table().lookup("action", "agent").rationale == "target wildcard"

    def test_global_fallback_can_be_overridden(self):
        table = CompatibilityRuleTable([CompatibilityRule(WILDCARD, WILDCARD, 10, "custom fallback")])

        assert table.lookup("a", "b").rationale == "custom fallback"
        assert table.fallback.score == 10


class TestRuleTableConstruction:
    def test_duplicate_rule_should_raise_error(self):
        with pytest.raises(DomainError, match="duplicate compatibility rule"):
            CompatibilityRuleTable(
                [
                    CompatibilityRule("trigger", "action", 95, "a"),
                    CompatibilityRule("Trigger", "ACTION", 90, "b"),
                ]
            )

    @pytest.mark.parametrize("score", [-1, 101])
    def test_score_out_of_range_should_raise_error(self, score):
        with pytest.raises(DomainError, match="out of range"):
            CompatibilityRule("a", "b", score, "x")

    def test_knows_category(self):
        assert DEFAULT_RULE_TABLE.knows_category("openai") is True
        assert DEFAULT_RULE_TABLE.knows_category("google_sheets") is False


class TestEffectiveCategory:
    def test_known_node_type_wins(self):
        node = Node(id="w", category=NodeCategory.TRIGGER, node_type="webhook")

        assert effective_category(node) == "webhook"

    def test_unknown_node_type_uses_category(self):
        node = Node(id="w", category=NodeCategory.TRIGGER, node_type="telegram")

        assert effective_category(node) == "trigger"

"""测试：SuggestionSession 会话内建议忽略"""

from src.application.services.suggestion_session import SuggestionSession, SuggestionSessionRegistry
from src.domain.services.workflow_suggestion_engine import Suggestion, SuggestionPriority


def _suggestion(suggestion_id: str) -> Suggestion:
    return Suggestion(
        id=suggestion_id,
        title=suggestion_id,
        text=suggestion_id,
        action_label="Go",
        priority=SuggestionPriority.MEDIUM,
    )


class TestSuggestionSession:
    def test_dismissed_suggestion_is_filtered_for_same_graph(self):
        session = SuggestionSession()
        session.dismiss("wf_1", "add-output")

        result = session.filter("wf_1", [_suggestion("add-output"), _suggestion("add-error-handling")])

        assert [s.id for s in result] == ["add-error-handling"]

    def test_other_graphs_are_not_affected(self):
        session = SuggestionSession()
        session.dismiss("wf_1", "add-output")

        assert session.is_dismissed("wf_1", "add-output") is True
        assert session.is_dismissed("wf_2", "add-output") is False
        assert [s.id for s in session.filter("wf_2", [_suggestion("add-output")])] == ["add-output"]

    def test_dismissed_ids(self):
        session = SuggestionSession()
        session.dismiss("wf_1", "a")
        session.dismiss("wf_1", "b")
        session.dismiss("wf_2", "c")

        assert session.dismissed_ids("wf_1") == {"a", "b"}

    def test_reset_single_graph_and_all(self):
        session = SuggestionSession()
        session.dismiss("wf_1", "a")
        session.dismiss("wf_2", "b")

        session.reset("wf_1")
        assert session.dismissed_ids("wf_1") == set()
        assert session.dismissed_ids("wf_2") == {"b"}

        session.reset()
        assert session.dismissed_ids("wf_2") == set()


class TestSuggestionSessionRegistry:
    def test_get_returns_same_session_per_id(self):
        registry = SuggestionSessionRegistry()

        first = registry.get("editor-1")
        first.dismiss("wf_1", "a")

        assert registry.get("editor-1") is first
        assert registry.get("editor-2").is_dismissed("wf_1", "a") is False

    def test_close_discards_session(self):
        registry = SuggestionSessionRegistry()
        registry.get("editor-1").dismiss("wf_1", "a")

        registry.close("editor-1")

        assert registry.get("editor-1").is_dismissed("wf_1", "a") is False

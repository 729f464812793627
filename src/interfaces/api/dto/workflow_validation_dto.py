"""Workflow validation DTOs（编辑器校验契约）

字段名使用 camelCase 别名，与前端约定的
`{isValid, message, source?, target?}` 与 `{field, message}[]` 形态一致；
请求同时接受 snake_case（populate_by_name）。
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.ports.node_type_registry import NodeTypeDefinition
from src.domain.services.compatibility_rules import CompatibilityRule
from src.domain.services.connection_validator import ConnectionVerdict
from src.domain.services.graph_structure_validator import GraphFinding
from src.domain.services.node_config_validator import FieldError
from src.domain.services.workflow_suggestion_engine import ConnectionSuggestion, Suggestion


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class GraphPayload(CamelModel):
    """图快照（节点 / 边保持编辑器 JSON 原样，由领域层解析）"""

    id: str | None = None
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    edges: list[dict[str, Any]] = Field(default_factory=list)

    def to_graph_dict(self) -> dict[str, Any]:
        return {"id": self.id, "nodes": self.nodes, "edges": self.edges}


class ConnectionValidationRequest(GraphPayload):
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    # 带 sessionId 时按“最后请求生效 + 最短展示时长”交付
    session_id: str | None = None


class GraphValidationRequest(GraphPayload):
    pass


class NodeConfigValidationRequest(CamelModel):
    node_type: str = Field(min_length=1)
    config: dict[str, Any] = Field(default_factory=dict)


class NodeConfigSubmissionRequest(CamelModel):
    """配置向导：按顺序校验一组节点"""

    nodes: list[dict[str, Any]] = Field(default_factory=list)
    step: int | None = None


class SuggestionsRequest(GraphPayload):
    session_id: str = "default"
    selected_node_id: str | None = None


class ConnectionSuggestionsRequest(GraphPayload):
    node_id: str


class DismissSuggestionRequest(CamelModel):
    session_id: str = "default"
    graph_id: str = Field(min_length=1)
    suggestion_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ConnectionVerdictResponse(CamelModel):
    is_valid: bool
    superseded: bool = False
    message: str | None = None
    code: str | None = None
    advisory: str | None = None
    source: str | None = None
    target: str | None = None
    score: int | None = None
    rationale: str | None = None

    @classmethod
    def from_verdict(cls, verdict: ConnectionVerdict, *, superseded: bool = False) -> ConnectionVerdictResponse:
        return cls(
            superseded=superseded,
            is_valid=verdict.is_valid,
            message=verdict.message,
            code=verdict.code,
            advisory=verdict.advisory,
            source=verdict.source,
            target=verdict.target,
            score=verdict.score,
            rationale=verdict.rationale,
        )


class GraphFindingDto(CamelModel):
    is_valid: bool
    status: str
    message: str | None = None
    code: str | None = None
    edge_id: str | None = None
    node_id: str | None = None
    source: str | None = None
    target: str | None = None

    @classmethod
    def from_finding(cls, finding: GraphFinding) -> GraphFindingDto:
        return cls(
            is_valid=finding.is_valid,
            status=finding.status.value,
            message=finding.message,
            code=finding.code,
            edge_id=finding.edge_id,
            node_id=finding.node_id,
            source=finding.source,
            target=finding.target,
        )


class GraphValidationResponse(CamelModel):
    graph_id: str
    is_valid: bool
    results: list[GraphFindingDto] = Field(default_factory=list)


class FieldErrorDto(CamelModel):
    field: str
    message: str

    @classmethod
    def from_error(cls, error: FieldError) -> FieldErrorDto:
        return cls(field=error.field, message=error.message)


class NodeConfigValidationResponse(CamelModel):
    node_type: str
    is_valid: bool
    errors: list[FieldErrorDto] = Field(default_factory=list)


class StepValidationDto(CamelModel):
    node_id: str
    can_advance: bool
    errors: list[FieldErrorDto] = Field(default_factory=list)


class NodeConfigSubmissionResponse(CamelModel):
    can_complete: bool
    steps: list[StepValidationDto] = Field(default_factory=list)


class SuggestionDto(CamelModel):
    id: str
    title: str
    text: str
    action_label: str
    priority: str
    node_id: str | None = None

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> SuggestionDto:
        return cls(
            id=suggestion.id,
            title=suggestion.title,
            text=suggestion.text,
            action_label=suggestion.action_label,
            priority=suggestion.priority.value,
            node_id=suggestion.node_id,
        )


class SuggestionsResponse(CamelModel):
    graph_id: str
    suggestions: list[SuggestionDto] = Field(default_factory=list)


class ConnectionSuggestionDto(CamelModel):
    source_id: str
    target_id: str
    score: int
    rationale: str

    @classmethod
    def from_suggestion(cls, suggestion: ConnectionSuggestion) -> ConnectionSuggestionDto:
        return cls(
            source_id=suggestion.source_id,
            target_id=suggestion.target_id,
            score=suggestion.score,
            rationale=suggestion.rationale,
        )


class ConnectionSuggestionsResponse(CamelModel):
    node_id: str
    suggestions: list[ConnectionSuggestionDto] = Field(default_factory=list)


class DismissSuggestionResponse(CamelModel):
    graph_id: str
    dismissed: list[str] = Field(default_factory=list)


class CompatibilityRuleDto(CamelModel):
    source: str
    target: str
    score: int
    rationale: str

    @classmethod
    def from_rule(cls, rule: CompatibilityRule) -> CompatibilityRuleDto:
        return cls(source=rule.source, target=rule.target, score=rule.score, rationale=rule.rationale)


class RulesResponse(CamelModel):
    version: str
    valid_score_threshold: int
    suggest_score_threshold: int
    rules: list[CompatibilityRuleDto] = Field(default_factory=list)


class NodeTypeDto(CamelModel):
    type_id: str
    category: str
    label: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    ports: list[dict[str, Any]] = Field(default_factory=list)
    field_schema: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_definition(cls, definition: NodeTypeDefinition) -> NodeTypeDto:
        return cls(
            type_id=definition.type_id,
            category=definition.category_name,
            label=definition.label,
            description=definition.description,
            tags=list(definition.tags),
            ports=[p.to_dict() for p in definition.ports],
            field_schema=[f.to_dict() for f in definition.field_schema],
        )


class NodeTypesResponse(CamelModel):
    node_types: list[NodeTypeDto] = Field(default_factory=list)

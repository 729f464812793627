"""Workflow validation endpoints (editor canvas + configuration wizard).

All endpoints are stateless over the posted graph snapshot. Per-session state
lives on the container: suggestion dismissals, and the last-request-wins
coordinator behind `/connection` when a `sessionId` is sent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends

from src.application.services.node_configuration_flow import NodeConfigurationFlow
from src.domain.entities.node import Node
from src.domain.entities.workflow_graph import WorkflowGraph
from src.domain.exceptions import DomainError, DomainValidationError
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.container import get_container
from src.interfaces.api.dto.workflow_validation_dto import (
    CompatibilityRuleDto,
    ConnectionSuggestionDto,
    ConnectionSuggestionsRequest,
    ConnectionSuggestionsResponse,
    ConnectionValidationRequest,
    ConnectionVerdictResponse,
    DismissSuggestionRequest,
    DismissSuggestionResponse,
    FieldErrorDto,
    GraphFindingDto,
    GraphValidationRequest,
    GraphValidationResponse,
    NodeConfigSubmissionRequest,
    NodeConfigSubmissionResponse,
    NodeConfigValidationRequest,
    NodeConfigValidationResponse,
    NodeTypeDto,
    NodeTypesResponse,
    RulesResponse,
    StepValidationDto,
    SuggestionDto,
    SuggestionsRequest,
    SuggestionsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow-validation", tags=["workflow-validation"])


def _parse_graph(payload: Mapping[str, Any]) -> WorkflowGraph:
    try:
        return WorkflowGraph.from_dict(payload)
    except DomainError as exc:
        raise DomainValidationError(
            "Invalid graph payload",
            code="invalid_graph",
            errors=[{"code": "invalid_graph", "message": str(exc), "path": "graph"}],
        ) from exc


def _parse_nodes(raw_nodes: list[dict[str, Any]]) -> list[Node]:
    nodes: list[Node] = []
    for index, raw in enumerate(raw_nodes):
        try:
            nodes.append(Node.from_dict(raw))
        except DomainError as exc:
            raise DomainValidationError(
                "Invalid node payload",
                code="invalid_node",
                errors=[{"code": "invalid_node", "message": str(exc), "path": f"nodes[{index}]"}],
            ) from exc
    return nodes


@router.post("/connection", response_model=ConnectionVerdictResponse)
async def validate_connection(
    request: ConnectionValidationRequest,
    container: ApiContainer = Depends(get_container),
) -> ConnectionVerdictResponse:
    graph = _parse_graph(request.to_graph_dict())
    verdict = container.validation_service.validate_connection(
        graph,
        request.source,
        request.target,
        request.source_handle,
        request.target_handle,
    )
    if request.session_id is None:
        return ConnectionVerdictResponse.from_verdict(verdict)

    # 同一会话内只有最新一次请求的结论生效
    coordinator = container.validation_coordinator
    ticket = coordinator.issue(lambda: verdict, key=f"connection:{request.session_id}")
    delivered = await coordinator.wait_for(ticket)
    if delivered is None:
        logger.debug("connection verdict %s superseded for session %s", ticket.id, request.session_id)
    return ConnectionVerdictResponse.from_verdict(verdict, superseded=delivered is None)


@router.post("/graph", response_model=GraphValidationResponse)
def validate_graph(
    request: GraphValidationRequest,
    container: ApiContainer = Depends(get_container),
) -> GraphValidationResponse:
    graph = _parse_graph(request.to_graph_dict())
    report = container.validation_service.validate_graph(graph)
    return GraphValidationResponse(
        graph_id=graph.graph_id,
        is_valid=report.is_valid,
        results=[GraphFindingDto.from_finding(f) for f in report.results],
    )


@router.post("/node-config", response_model=NodeConfigValidationResponse)
def validate_node_config(
    request: NodeConfigValidationRequest,
    container: ApiContainer = Depends(get_container),
) -> NodeConfigValidationResponse:
    node_type = request.node_type.strip().lower()
    errors = container.validation_service.validate_node_config(node_type, request.config)
    return NodeConfigValidationResponse(
        node_type=node_type,
        is_valid=not errors,
        errors=[FieldErrorDto.from_error(e) for e in errors],
    )


@router.post("/node-config/submission", response_model=NodeConfigSubmissionResponse)
def validate_node_config_submission(
    request: NodeConfigSubmissionRequest,
    container: ApiContainer = Depends(get_container),
) -> NodeConfigSubmissionResponse:
    flow = NodeConfigurationFlow(
        _parse_nodes(request.nodes),
        registry=container.registry,
        validator=container.config_validator,
    )

    if request.step is not None:
        steps = [flow.validate_step(request.step)]
    else:
        steps = [flow.validate_step(i) for i in range(len(flow))]

    return NodeConfigSubmissionResponse(
        can_complete=flow.validate_submission().can_complete,
        steps=[
            StepValidationDto(
                node_id=step.node_id,
                can_advance=step.can_advance,
                errors=[FieldErrorDto.from_error(e) for e in step.errors],
            )
            for step in steps
        ],
    )


@router.post("/suggestions", response_model=SuggestionsResponse)
def suggest(
    request: SuggestionsRequest,
    container: ApiContainer = Depends(get_container),
) -> SuggestionsResponse:
    graph = _parse_graph(request.to_graph_dict())
    suggestions = container.validation_service.suggest(graph, selected_node_id=request.selected_node_id)
    session = container.suggestion_sessions.get(request.session_id)
    visible = session.filter(graph.graph_id, suggestions)
    return SuggestionsResponse(
        graph_id=graph.graph_id,
        suggestions=[SuggestionDto.from_suggestion(s) for s in visible],
    )


@router.post("/suggestions/connections", response_model=ConnectionSuggestionsResponse)
def suggest_connections(
    request: ConnectionSuggestionsRequest,
    container: ApiContainer = Depends(get_container),
) -> ConnectionSuggestionsResponse:
    graph = _parse_graph(request.to_graph_dict())
    suggestions = container.validation_service.suggest_connections(graph, request.node_id)
    return ConnectionSuggestionsResponse(
        node_id=request.node_id,
        suggestions=[ConnectionSuggestionDto.from_suggestion(s) for s in suggestions],
    )


@router.post("/suggestions/dismiss", response_model=DismissSuggestionResponse)
def dismiss_suggestion(
    request: DismissSuggestionRequest,
    container: ApiContainer = Depends(get_container),
) -> DismissSuggestionResponse:
    session = container.suggestion_sessions.get(request.session_id)
    session.dismiss(request.graph_id, request.suggestion_id)
    logger.info(
        "suggestion dismissed",
        extra={"graph_id": request.graph_id, "suggestion_id": request.suggestion_id},
    )
    return DismissSuggestionResponse(
        graph_id=request.graph_id,
        dismissed=sorted(session.dismissed_ids(request.graph_id)),
    )


@router.get("/node-types", response_model=NodeTypesResponse)
def list_node_types(container: ApiContainer = Depends(get_container)) -> NodeTypesResponse:
    return NodeTypesResponse(
        node_types=[
            NodeTypeDto.from_definition(d) for d in container.validation_service.list_node_types()
        ]
    )


@router.get("/node-types/{type_id}", response_model=NodeTypeDto)
def get_node_type(type_id: str, container: ApiContainer = Depends(get_container)) -> NodeTypeDto:
    return NodeTypeDto.from_definition(container.validation_service.get_node_type(type_id))


@router.get("/rules", response_model=RulesResponse)
def get_rules(container: ApiContainer = Depends(get_container)) -> RulesResponse:
    settings = container.settings
    return RulesResponse(
        version=container.rule_table.version,
        valid_score_threshold=settings.valid_score_threshold,
        suggest_score_threshold=settings.suggest_score_threshold,
        rules=[CompatibilityRuleDto.from_rule(r) for r in container.rule_table.rules()],
    )

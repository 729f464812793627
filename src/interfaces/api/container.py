"""API Container (composition root state holder).

This module defines the typed container attached to `app.state.container` and
the factory that wires it from `Settings` (called from the lifespan in
`src/interfaces/api/main.py`, or directly by tests).
"""

from __future__ import annotations

from dataclasses import dataclass

from src.application.services.suggestion_session import SuggestionSessionRegistry
from src.application.services.validation_request_coordinator import ValidationRequestCoordinator
from src.application.services.workflow_validation_service import WorkflowValidationService
from src.config import Settings
from src.domain.ports.node_type_registry import NodeTypeRegistry
from src.domain.services.compatibility_rules import CompatibilityRuleTable, get_default_rule_table
from src.domain.services.connection_validator import ConnectionValidator
from src.domain.services.graph_structure_validator import CyclePolicy, GraphStructureValidator
from src.domain.services.node_config_validator import NodeConfigValidator
from src.domain.services.workflow_suggestion_engine import WorkflowSuggestionEngine
from src.infrastructure.definitions.yaml_node_type_registry import YamlNodeTypeRegistry


@dataclass(frozen=True, slots=True)
class ApiContainer:
    """Typed container attached to `app.state.container`."""

    settings: Settings
    rule_table: CompatibilityRuleTable
    registry: NodeTypeRegistry
    validation_service: WorkflowValidationService
    config_validator: NodeConfigValidator
    suggestion_sessions: SuggestionSessionRegistry
    validation_coordinator: ValidationRequestCoordinator


def build_container(
    settings: Settings,
    *,
    registry: NodeTypeRegistry | None = None,
    rule_table: CompatibilityRuleTable | None = None,
) -> ApiContainer:
    rule_table = rule_table or get_default_rule_table()
    registry = registry or YamlNodeTypeRegistry(definitions_dir=settings.node_definitions_dir)

    connection_validator = ConnectionValidator(
        rule_table=rule_table,
        valid_score_threshold=settings.valid_score_threshold,
        enforce_category_score=settings.enforce_category_score,
    )
    config_validator = NodeConfigValidator()
    validation_service = WorkflowValidationService(
        registry=registry,
        connection_validator=connection_validator,
        graph_validator=GraphStructureValidator(
            connection_validator=connection_validator,
            cycle_policy=CyclePolicy(settings.cycle_policy),
        ),
        config_validator=config_validator,
        suggestion_engine=WorkflowSuggestionEngine(
            rule_table=rule_table,
            suggest_score_threshold=settings.suggest_score_threshold,
            max_connection_suggestions=settings.max_connection_suggestions,
        ),
    )

    return ApiContainer(
        settings=settings,
        rule_table=rule_table,
        registry=registry,
        validation_service=validation_service,
        config_validator=config_validator,
        suggestion_sessions=SuggestionSessionRegistry(),
        validation_coordinator=ValidationRequestCoordinator(
            min_display_duration_ms=settings.min_display_duration_ms,
        ),
    )

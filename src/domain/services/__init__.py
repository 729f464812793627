"""Domain Services 模块

领域服务：
- CompatibilityRuleTable: 节点分类兼容性规则表（单一事实来源）
- ConnectionValidator: 单条连接的端口级校验
- GraphStructureValidator: 整图结构校验
- NodeConfigValidator: 节点配置（表单）校验
- WorkflowSuggestionEngine: 启发式工作流建议与连接推荐
"""

from src.domain.services.compatibility_rules import CompatibilityRuleTable
from src.domain.services.connection_validator import ConnectionValidator
from src.domain.services.graph_structure_validator import GraphStructureValidator
from src.domain.services.node_config_validator import NodeConfigValidator
from src.domain.services.workflow_suggestion_engine import WorkflowSuggestionEngine

__all__ = [
    "CompatibilityRuleTable",
    "ConnectionValidator",
    "GraphStructureValidator",
    "NodeConfigValidator",
    "WorkflowSuggestionEngine",
]

"""API DTO（Data Transfer Objects）

DTO 职责：
1. 数据验证：使用 Pydantic 验证请求数据
2. 数据序列化：将领域校验结果转换为 camelCase JSON

DTO vs Domain：
- DTO：用于 API 层，关注数据传输和验证
- Domain：图快照、校验器与建议引擎，关注业务规则
"""

from src.interfaces.api.dto.workflow_validation_dto import (
    ConnectionSuggestionsRequest,
    ConnectionSuggestionsResponse,
    ConnectionValidationRequest,
    ConnectionVerdictResponse,
    DismissSuggestionRequest,
    DismissSuggestionResponse,
    GraphValidationRequest,
    GraphValidationResponse,
    NodeConfigSubmissionRequest,
    NodeConfigSubmissionResponse,
    NodeConfigValidationRequest,
    NodeConfigValidationResponse,
    NodeTypesResponse,
    RulesResponse,
    SuggestionsRequest,
    SuggestionsResponse,
)

__all__ = [
    "ConnectionSuggestionsRequest",
    "ConnectionSuggestionsResponse",
    "ConnectionValidationRequest",
    "ConnectionVerdictResponse",
    "DismissSuggestionRequest",
    "DismissSuggestionResponse",
    "GraphValidationRequest",
    "GraphValidationResponse",
    "NodeConfigSubmissionRequest",
    "NodeConfigSubmissionResponse",
    "NodeConfigValidationRequest",
    "NodeConfigValidationResponse",
    "NodeTypesResponse",
    "RulesResponse",
    "SuggestionsRequest",
    "SuggestionsResponse",
]

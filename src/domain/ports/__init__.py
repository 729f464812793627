"""领域层 Ports - 定义领域层需要的外部依赖接口

设计原则：
- 使用 Protocol 定义接口（结构化子类型）
- 只定义领域层需要的方法（不要过度设计）
- 方法签名使用领域对象（Entity、Value Object）
- 不依赖任何框架（纯 Python）
"""

from src.domain.ports.node_type_registry import NodeTypeDefinition, NodeTypeRegistry

__all__ = [
    "NodeTypeDefinition",
    "NodeTypeRegistry",
]

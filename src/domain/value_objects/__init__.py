"""Domain 值对象

导出所有领域值对象，方便其他模块导入
"""

from src.domain.value_objects.connection_rule import ConnectionRule, ConnectionRuleKind
from src.domain.value_objects.field_descriptor import FieldDescriptor, FieldType
from src.domain.value_objects.node_category import NodeCategory
from src.domain.value_objects.port_schema import PortDataType, PortDirection, PortSchema

__all__ = [
    "ConnectionRule",
    "ConnectionRuleKind",
    "FieldDescriptor",
    "FieldType",
    "NodeCategory",
    "PortDataType",
    "PortDirection",
    "PortSchema",
]

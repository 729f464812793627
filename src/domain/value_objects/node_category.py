"""NodeCategory 枚举 - 节点角色分类

业务定义：
- NodeCategory 是节点在工作流中的角色（触发、动作、条件 ...）
- 兼容性规则表以分类为键
- 未知分类（未来扩展）保留为小写字符串，规则表查找时落到兜底规则
"""

from enum import Enum


class NodeCategory(str, Enum):
    """节点分类枚举

    支持的分类：
    - TRIGGER: 触发器（工作流入口，没有输入端口）
    - ACTION: 动作（发送消息、调用 API 等）
    - CONDITION: 条件分支（出边必须携带分支值）
    - DATA: 数据源 / 数据处理
    - INTEGRATION: 第三方集成
    - AGENT: AI Agent 节点
    - TRANSFORMER: 数据转换
    """

    TRIGGER = "trigger"
    ACTION = "action"
    CONDITION = "condition"
    DATA = "data"
    INTEGRATION = "integration"
    AGENT = "agent"
    TRANSFORMER = "transformer"

    @classmethod
    def normalize(cls, value: "NodeCategory | str | None") -> "NodeCategory | str":
        """把外部输入归一化为枚举成员；未知分类返回小写字符串"""
        if isinstance(value, cls):
            return value
        raw = (value or "").strip().lower() if isinstance(value, str) else ""
        try:
            return cls(raw)
        except ValueError:
            return raw

    @classmethod
    def is_known(cls, value: "NodeCategory | str | None") -> bool:
        return isinstance(cls.normalize(value), cls)


def category_name(value: "NodeCategory | str") -> str:
    """返回分类的字符串形式（枚举取 value）"""
    if isinstance(value, NodeCategory):
        return value.value
    return str(value)

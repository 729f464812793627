"""应用层 - 编辑器边界上的校验编排

Application 层职责：
1. 用例编排：用节点类型注册表补全快照，再调用领域服务
2. 会话状态：建议忽略记录（SuggestionSession）
3. 交互节奏：最新请求优先 + 最短展示时长（ValidationRequestCoordinator）
4. 配置向导：按步骤 / 提交门控（NodeConfigurationFlow）

设计原则：
- 依赖倒置：依赖 NodeTypeRegistry Port，不依赖具体实现
- 无框架依赖：纯 Python 实现，不依赖 FastAPI 等框架
"""

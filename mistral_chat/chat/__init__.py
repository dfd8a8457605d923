"""对话会话层。

- controller: ChatController 状态机与观察者事件。
- history: 历史裁剪策略（trim_history / validate_retention）。
- events: EventHook 事件钩子。
"""

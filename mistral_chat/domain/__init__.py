"""领域层模型与协议。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatResult 模型。
- result: Result 成功/失败返回类型与 ErrorKind。
- exceptions: 业务异常类型定义。
"""

"""业务异常层级，由 HTTP 层映射为对应状态码。"""


class PlannerError(Exception):
    """所有业务错误的基类。"""

    status_code = 400


class ValidationError(PlannerError):
    """缺少必填字段或引用无效，映射为 400。"""

    status_code = 400


class NotFoundError(PlannerError):
    """目标记录不存在，映射为 404。"""

    status_code = 404


class StoreConstraintError(PlannerError):
    """存储层约束冲突（例如科目代码重复），原样透传数据库消息。"""

    status_code = 400

from dataclasses import dataclass


@dataclass
class OrderError(Exception):
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.code}:{self.message}"


class OrderNotFoundError(OrderError):
    def __init__(self, order_id: object) -> None:
        super().__init__(code="NOT_FOUND", message=f"Order {order_id} not found")
        self.order_id = order_id


class OrderValidationError(OrderError):
    def __init__(self, message: str) -> None:
        super().__init__(code="VALIDATION_ERROR", message=message)


class OrderStoreError(OrderError):
    def __init__(self, action: str, message: str) -> None:
        super().__init__(code="STORE_ERROR", message=message)
        self.action = action

"""Domain error kinds raised by the services.

The presentation layer maps the four kinds (validation, not found, conflict,
storage) to its own responses; ``str(exc)`` is always a readable message.
"""

from typing import Optional


class BudgetError(Exception):
    pass


class ValidationError(BudgetError, ValueError):
    pass


class NotFoundError(BudgetError, LookupError):
    pass


class ConflictError(BudgetError, ValueError):
    pass


class StorageUnavailable(BudgetError, RuntimeError):
    def __init__(self, message: str = "Storage unavailable") -> None:
        super().__init__(message)


class MissingUserId(ValidationError):
    def __init__(self) -> None:
        super().__init__("User ID is required")


class MissingDescription(ValidationError):
    def __init__(self) -> None:
        super().__init__("Description is required")


class BlankDescription(ValidationError):
    def __init__(self) -> None:
        super().__init__("Description cannot be blank")


class InvalidAmountType(ValidationError):
    def __init__(self, value: object = None) -> None:
        self.value = value
        super().__init__(f"Amount must be a number, got {value!r}")


class AmountNotPositive(ValidationError):
    def __init__(self, value: float) -> None:
        self.value = value
        super().__init__(f"Amount must be greater than zero, got {value}")


class MissingCategory(ValidationError):
    def __init__(self) -> None:
        super().__init__("Category is required")


class BlankCategory(ValidationError):
    def __init__(self) -> None:
        super().__init__("Category cannot be blank")


class InvalidCategory(ValidationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid category: {value}")


class NoValidFields(ValidationError):
    def __init__(self) -> None:
        super().__init__("No valid fields to update")


class InvalidBudgetFormat(ValidationError):
    def __init__(self, value: object = None) -> None:
        self.value = value
        super().__init__("Invalid budget format")


class NegativeBudget(ValidationError):
    def __init__(self, value: float) -> None:
        self.value = value
        super().__init__("Budget cannot be negative")


class UserNotFound(NotFoundError):
    def __init__(self, user_id: object = None) -> None:
        self.user_id = user_id
        super().__init__("User not found")


class TransactionNotFound(NotFoundError):
    def __init__(self, transaction_id: object = None) -> None:
        self.transaction_id = transaction_id
        super().__init__("Transaction not found")


class DuplicateUsername(ConflictError):
    def __init__(self, username: Optional[str] = None) -> None:
        self.username = username
        super().__init__(f"Username already exists: {username}")


class DuplicateEmail(ConflictError):
    def __init__(self, email: Optional[str] = None) -> None:
        self.email = email
        super().__init__(f"Email already exists: {email}")


class InvalidUserId(ConflictError):
    def __init__(self, user_id: object = None) -> None:
        self.user_id = user_id
        super().__init__(f"Invalid user ID: {user_id}")


class UpdateFailed(ConflictError):
    def __init__(self, transaction_id: object = None) -> None:
        self.transaction_id = transaction_id
        super().__init__("Update failed: no rows affected")

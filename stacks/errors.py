from typing import Any, Iterable


class ConfigurationError(ValueError):
    """
    Raised when a caller-supplied setting violates its constraint.
    Always raised before any resource is added to the construct tree.
    """
    def __init__(self, field: str, constraint: str, value: Any) -> None:
        self.field = field
        self.constraint = constraint
        self.value = value
        super().__init__(f"❌ INVALID CONFIG: '{field}' {constraint} (got {value!r})")


class ProvisioningError(RuntimeError):
    """
    Raised when a create or grant call is rejected after earlier steps succeeded.
    The resources listed in `provisioned` stay in the tree; no rollback is attempted.
    """
    def __init__(self, step: str, provisioned: Iterable[str], cause: Exception) -> None:
        self.step = step
        self.provisioned = tuple(provisioned)
        self.cause = cause
        created = ", ".join(self.provisioned) or "nothing"
        super().__init__(f"❌ PROVISIONING FAILED at step '{step}' (already created: {created}): {cause}")

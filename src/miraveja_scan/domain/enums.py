from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a dependency instance.

    Attributes:
        SINGLETON: Single instance shared across the root container and its scopes.
        TRANSIENT: New instance created on each resolution.
        SCOPED: Single instance per scope (e.g., per HTTP request).
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class RegistrationStrategy(str, Enum):
    """Conflict policy applied when a service type already has mappings.

    Attributes:
        APPEND: Always add the new mapping next to the existing ones.
        SKIP: Add the new mapping only if the service type has none.
        REPLACE: Remove every existing mapping, then add the new one.
    """

    APPEND = "append"
    SKIP = "skip"
    REPLACE = "replace"

    def __str__(self) -> str:
        return self.value


class ScanState(str, Enum):
    """States of a single scan run."""

    IDLE = "idle"
    SCANNING_MODULE = "scanning_module"
    SCANNING_CAPABILITY = "scanning_capability"
    DONE = "done"

    def __str__(self) -> str:
        return self.value

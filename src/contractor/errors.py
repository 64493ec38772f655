"""Framework-specific exceptions.

Every failure raised by the resolver derives from :class:`DependencyError`, so
callers can catch the whole family at once or pick out a single kind.
"""

__all__ = [
    "DependencyError",
    "RegistrationInvalidError",
    "RegistrationFileNotFoundError",
    "ContractNotFoundError",
    "ImplementationNotFoundError",
    "FactoryNotFoundError",
    "UnsupportedFactorySignatureError",
    "ModuleChainExhaustedError",
    "MultiplicityViolationError",
    "AmbiguousResolutionRequestError",
    "MissingConstructorArgumentsError",
    "NoInstancesFoundError",
    "NullRecordError",
]


class DependencyError(Exception):
    """Raised when a contract's dependency cannot be resolved or is misconfigured."""

    pass


class RegistrationInvalidError(DependencyError):
    """Raised when a binding is missing from the registration table or is malformed."""


class RegistrationFileNotFoundError(DependencyError, FileNotFoundError):
    """Raised when no registration file exists in any searched location."""


class ContractNotFoundError(DependencyError):
    """Raised when an identifier does not denote a contract."""


class ImplementationNotFoundError(DependencyError):
    """Raised when a bound implementation identifier is unknown to the type catalog."""


class FactoryNotFoundError(DependencyError):
    """Raised when a declared factory contract or factory method cannot be located."""


class UnsupportedFactorySignatureError(DependencyError):
    """Raised when a factory method takes anything other than nothing or a resolver."""


class ModuleChainExhaustedError(DependencyError):
    """Raised when a module chain was run but no module produced an instance."""


class MultiplicityViolationError(DependencyError):
    """Raised when a second instance is forced for a binding that disallows multiples."""


class AmbiguousResolutionRequestError(DependencyError):
    """Raised when constructor arguments and a module override are supplied together."""


class MissingConstructorArgumentsError(DependencyError):
    """Raised when no constructor can be satisfied by the supplied arguments."""


class NoInstancesFoundError(DependencyError):
    """Raised when no cached instances exist for a contract."""


class NullRecordError(DependencyError, ValueError):
    """Raised when ``None`` is inserted into the object cache."""

"""Domain models used throughout the framework."""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional
from uuid import UUID

from contractor.contracts import ResolverHandle

__all__ = [
    "Binding",
    "ConstructorSignature",
    "ContractDescriptor",
    "ImplementationDescriptor",
    "InstanceRecord",
]


@dataclass(frozen=True)
class Binding:
    """Declarative mapping from a contract to its implementation.

    Attributes:
        contract: The contract identifier this binding answers for.
        implementation: The identifier of the implementation to construct.
        allow_multiple: Whether more than one cached instance of the
            implementation may coexist for the contract.
        factory_contract: Optional contract whose instance builds this one.
        factory_method: Name of the method to call on the factory instance.
    """

    contract: str
    implementation: str
    allow_multiple: bool = False
    factory_contract: Optional[str] = None
    factory_method: Optional[str] = None

    @property
    def uses_factory(self) -> bool:
        return bool(self.factory_contract)


@dataclass(frozen=True)
class ConstructorSignature:
    """One way of calling a constructor: the declared type of each positional parameter.

    Unannotated parameters are recorded as ``None``. A ``variadic`` signature
    also takes any number of further positional arguments (a ``*args``
    parameter).
    """

    parameter_types: tuple[Optional[type], ...]
    variadic: bool = False

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    def accepts(self, count: int) -> bool:
        return count == self.arity or (self.variadic and count > self.arity)

    def takes_only_resolver(self) -> bool:
        if self.arity != 1:
            return False
        declared = self.parameter_types[0]
        return inspect.isclass(declared) and issubclass(declared, ResolverHandle)


@dataclass(frozen=True)
class ImplementationDescriptor:
    """A concrete, constructible type known to the type catalog.

    Attributes:
        name: The implementation identifier used by bindings.
        qualified_name: Module-qualified name of the target, for diagnostics.
        target: The class (or plain factory callable) invoked to build instances.
        constructors: Every positional calling convention the target accepts.
        inspected: False when the target's signature could not be read, in
            which case ``constructors`` is empty and any call is attempted.

    Example:
        >>> class EnglishGreeter(Greeter):
        ...     def __init__(self, greeting: str = "Hello"): ...
        >>> # Registered as ImplementationDescriptor with:
        >>> # - name: "EnglishGreeter"
        >>> # - constructors: (ConstructorSignature(()), ConstructorSignature((str,)))
    """

    name: str
    qualified_name: str
    target: Callable[..., Any]
    constructors: tuple[ConstructorSignature, ...]
    inspected: bool = True

    def accepts_arguments(self, count: int) -> bool:
        if not self.inspected:
            return True
        return any(c.accepts(count) for c in self.constructors)

    def accepts_no_arguments(self) -> bool:
        return self.accepts_arguments(0)

    def accepts_resolver(self) -> bool:
        return any(c.takes_only_resolver() for c in self.constructors)


@dataclass(frozen=True)
class ContractDescriptor:
    """An abstract contract known to the type catalog.

    Attributes:
        name: The contract identifier used by bindings.
        qualified_name: Module-qualified name of the contract type, or the bare
            name when the contract was registered by name only.
        target: The abstract type itself, if one was registered.
    """

    name: str
    qualified_name: str
    target: Optional[type] = None


@dataclass(frozen=True)
class InstanceRecord:
    """
    Represents an instantiated object held in the object cache.

    Attributes:
        id: Unique label distinguishing this record from any other.
        contract: The contract the instance was resolved for.
        implementation: The bound implementation the instance was built from.
        instance: The instantiated object.
        allow_multiple: Copied from the binding at construction time.
    """

    id: UUID
    contract: str
    implementation: ImplementationDescriptor
    instance: Any
    allow_multiple: bool

    def matches(self, contract: str, implementation: ImplementationDescriptor) -> bool:
        return self.contract == contract and self.implementation == implementation

    def describe(self) -> str:
        return (
            f"InstanceRecord {self.id} - Name: {self.implementation.name}\n"
            f"Contract: {self.contract}\n"
            f"Implementation: {self.implementation.qualified_name}"
        )

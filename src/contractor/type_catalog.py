"""Registration and introspection of implementation and contract types.

The type catalog is the explicit table that maps identifiers used in the
registration file to real Python types. It is populated at process start,
either by calling the ``register_*`` methods or with the decorators:

    >>> catalog = TypeCatalog()
    >>>
    >>> @catalog.contract()
    ... class Greeter(ABC):
    ...     @abstractmethod
    ...     def greet(self, name: str) -> str: ...
    >>>
    >>> @catalog.implementation()
    ... class EnglishGreeter(Greeter):
    ...     def greet(self, name: str) -> str:
    ...         return f"Hello {name}"
"""

import inspect
import logging
import threading
from abc import ABC
from typing import Any, Callable, Optional, Union, get_type_hints

from contractor.domain import (
    ConstructorSignature,
    ContractDescriptor,
    ImplementationDescriptor,
)
from contractor.errors import DependencyError

__all__ = ["TypeCatalog", "inferred_name", "qualified_name"]

logger = logging.getLogger(__name__)


def inferred_name(target: Any) -> str:
    """Derive an identifier from a class or function name, removing any 'make_' prefix.

    Example:
        >>> inferred_name(EnglishGreeter)      # Returns "EnglishGreeter"
        >>> inferred_name(make_greeter)        # Returns "greeter"
    """
    if inspect.isclass(target):
        return target.__name__

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    else:
        return target.__name__


def qualified_name(target: Any) -> str:
    return f"{target.__module__}.{target.__qualname__}"


class TypeCatalog:
    """Table of constructible implementations and known contracts.

    Implementations are keyed by the name bindings refer to them by (the
    ``Class`` of a registration entry); contracts by their declared name.
    Registering a second, different target under an existing name is an error.
    """

    def __init__(self):
        self._implementations: dict[str, ImplementationDescriptor] = {}
        self._contracts: dict[str, ContractDescriptor] = {}
        self._lock = threading.Lock()

    def register_implementation(
        self, target: Callable[..., Any], name: Optional[str] = None
    ) -> ImplementationDescriptor:
        """Register a class or factory callable as an implementation.

        Args:
            target: The class (or function) invoked to build instances.
            name: Identifier used by bindings; defaults to the inferred name.

        Returns:
            The descriptor stored for the target.

        Raises:
            DependencyError: If the target is not callable, or the name is
                already taken by a different target.
        """
        if not (inspect.isclass(target) or callable(target)):
            raise DependencyError(f"{target} is not a class or function")
        if inspect.isabstract(target):
            raise DependencyError(
                f"{target.__qualname__} is abstract and cannot be registered as an implementation"
            )

        signatures = _constructor_signatures(target)
        descriptor = ImplementationDescriptor(
            name or inferred_name(target),
            qualified_name(target),
            target,
            signatures or (),
            inspected=signatures is not None,
        )
        with self._lock:
            existing = self._implementations.get(descriptor.name)
            if existing is not None and existing.target is not target:
                raise DependencyError(
                    f"Duplicate implementation name '{descriptor.name}' "
                    f"for {existing.qualified_name} and {descriptor.qualified_name}"
                )
            self._implementations[descriptor.name] = descriptor

        logger.debug("Registered implementation %s as '%s'", descriptor.qualified_name, descriptor.name)
        return descriptor

    def register_contract(
        self, target: Union[str, type], name: Optional[str] = None
    ) -> ContractDescriptor:
        """Register an abstract type, or a bare name, as a contract.

        Raises:
            DependencyError: If the name is already taken by a different contract.
        """
        if isinstance(target, str):
            descriptor = ContractDescriptor(name or target, target, None)
        else:
            descriptor = ContractDescriptor(
                name or target.__name__, qualified_name(target), target
            )
        with self._lock:
            existing = self._contracts.get(descriptor.name)
            if existing is not None and existing != descriptor:
                raise DependencyError(
                    f"Duplicate contract name '{descriptor.name}' "
                    f"for {existing.qualified_name} and {descriptor.qualified_name}"
                )
            self._contracts[descriptor.name] = descriptor

        logger.debug("Registered contract '%s'", descriptor.name)
        return descriptor

    def implementation(self, name: Optional[str] = None) -> Callable:
        """Decorator to register a class or function as an implementation.

        Example:
            @catalog.implementation(name="EnglishGreeter")
            class EnglishGreeter(Greeter):
                ...
        """
        def decorator(obj):
            self.register_implementation(obj, name)
            return obj

        return decorator

    def contract(self, name: Optional[str] = None) -> Callable:
        """Decorator to register an abstract class or protocol as a contract."""
        def decorator(obj):
            self.register_contract(obj, name)
            return obj

        return decorator

    def class_types(self) -> list[ImplementationDescriptor]:
        with self._lock:
            return list(self._implementations.values())

    def interface_types(self) -> list[ContractDescriptor]:
        with self._lock:
            return list(self._contracts.values())

    def find_implementation(self, name: str) -> Optional[ImplementationDescriptor]:
        with self._lock:
            return self._implementations.get(name)

    def find_contract(self, name: str) -> Optional[ContractDescriptor]:
        with self._lock:
            return self._contracts.get(name)

    def is_contract_type(self, target: type) -> bool:
        """Whether ``target`` may stand for a contract identifier.

        Registered contract types qualify, as does any abstract class, direct
        ``ABC`` subclass or ``typing.Protocol``.
        """
        with self._lock:
            if any(c.target is target for c in self._contracts.values()):
                return True
        return (
            inspect.isabstract(target)
            or getattr(target, "_is_protocol", False)
            or ABC in target.__bases__
        )


def _constructor_signatures(
    target: Callable[..., Any],
) -> Optional[tuple[ConstructorSignature, ...]]:
    """Enumerate the positional calling conventions a target accepts.

    One :class:`ConstructorSignature` is produced for each arity between the
    number of required positional parameters and the number of positional
    parameters; with a ``*args`` parameter the longest one is variadic. A
    target with a required keyword-only parameter cannot be built from
    positional arguments and has no signatures. ``None`` means the signature
    could not be read at all.

    Example:
        >>> class Clock:
        ...     def __init__(self, resolver: ResolverHandle, tz: str = "UTC"): ...
        >>> _constructor_signatures(Clock)
        (ConstructorSignature((ResolverHandle,)), ConstructorSignature((ResolverHandle, str)))
    """
    try:
        sig = inspect.signature(target)
    except (TypeError, ValueError):
        logger.debug("Could not read the signature of %r", target)
        return None

    hints = _declared_types(target)
    positional = []
    required = 0
    variadic = False
    for parameter in sig.parameters.values():
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            positional.append(parameter)
            if parameter.default is parameter.empty:
                required = len(positional)
        elif parameter.kind == parameter.VAR_POSITIONAL:
            variadic = True
        elif parameter.kind == parameter.KEYWORD_ONLY and parameter.default is parameter.empty:
            return ()

    types = tuple(hints.get(p.name) for p in positional)
    return tuple(
        ConstructorSignature(types[:arity], variadic and arity == len(positional))
        for arity in range(required, len(positional) + 1)
    )


def _declared_types(target: Callable[..., Any]) -> dict[str, Any]:
    annotated = target.__init__ if inspect.isclass(target) else target
    try:
        return get_type_hints(annotated)
    except (NameError, TypeError) as e:
        logger.warning(
            "Could not evaluate the parameter annotations of %s (%s); a resolver "
            "parameter will not be recognised",
            getattr(target, "__qualname__", target),
            e,
        )
        return {}

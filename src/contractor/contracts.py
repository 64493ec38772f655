"""Capability contracts shared by the resolver and the code it builds."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Sequence, Union

__all__ = ["ContractKey", "Disposable", "ResolverHandle"]


ContractKey = Union[str, type]
"""Type alias for the keys accepted wherever a contract is named.

A contract is identified by its declared name. An abstract class or protocol
may be passed in its place and is converted to its ``__name__``.

Example:
    >>> resolver.resolve("Greeter")   # Lookup by name
    >>> resolver.resolve(Greeter)     # Lookup by abstract type
"""


class Disposable(ABC):
    """Declares that an implementation holds resources released on cache clear.

    Only instances that explicitly subclass :class:`Disposable` are disposed by
    the object cache; everything else is simply dropped.
    """

    @abstractmethod
    def dispose(self) -> None:
        """Release any resources held by this instance."""


class ResolverHandle(ABC):
    """The resolver capability handed to constructors and factory methods.

    A constructor taking a single parameter annotated with this type (or any
    subclass of it) receives the resolver itself when no constructor arguments
    are supplied. Factory methods may request it the same way.
    """

    @abstractmethod
    def resolve(
        self,
        contract: ContractKey,
        args: Optional[Sequence[Any]] = None,
        *,
        module_logic: Optional[Callable] = None,
        module_filter: Optional[Callable] = None,
    ) -> Any:
        """Return the cached instance for a contract, creating it if absent."""

    @abstractmethod
    def resolve_new(
        self,
        contract: ContractKey,
        args: Optional[Sequence[Any]] = None,
        *,
        module_logic: Optional[Callable] = None,
        module_filter: Optional[Callable] = None,
    ) -> Any:
        """Create, cache and return a fresh instance for a contract."""

    @abstractmethod
    def resolve_all(self, contract: ContractKey) -> Iterable[Any]:
        """Return every cached instance bound to a contract."""

    @abstractmethod
    def resolve_without_caching(
        self,
        contract: ContractKey,
        args: Optional[Sequence[Any]] = None,
        *,
        module_logic: Optional[Callable] = None,
        module_filter: Optional[Callable] = None,
    ) -> Any:
        """Create and return an instance without touching the cache."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Dispose and drop every cached instance."""

    @abstractmethod
    def view_cache(self) -> list[str]:
        """Describe every cached instance."""

    @abstractmethod
    def register_module(self, module: Any) -> None:
        """Append a module to the module pipeline."""

    @abstractmethod
    def remove_module(self, module: Any) -> bool:
        """Remove a module from the module pipeline."""

"""
The resolver: public entry point turning contract identifiers into instances.

A :class:`Resolver` owns an :class:`~contractor.object_cache.ObjectCache` and a
:class:`~contractor.modules.ModulePipeline`, and offers four resolution modes:

- :meth:`Resolver.resolve` returns the cached instance, creating it on first use;
- :meth:`Resolver.resolve_new` always creates (and caches) a fresh instance;
- :meth:`Resolver.resolve_without_caching` creates an instance the cache never sees;
- :meth:`Resolver.resolve_all` yields every cached instance of a contract.

When no constructor arguments are supplied and the implementation has no
zero-argument constructor, the resolver passes itself to a constructor whose
single parameter is annotated as a :class:`~contractor.contracts.ResolverHandle`.
"""

import logging
import threading
import uuid
from typing import Any, Iterable, Iterator, Optional, Sequence

from contractor.contracts import ContractKey, ResolverHandle
from contractor.domain import ImplementationDescriptor, InstanceRecord
from contractor.errors import (
    AmbiguousResolutionRequestError,
    MissingConstructorArgumentsError,
    MultiplicityViolationError,
    NoInstancesFoundError,
)
from contractor.modules import (
    FactoryModule,
    ModuleFilter,
    ModuleLogic,
    ModulePipeline,
    ResolverModule,
)
from contractor.object_cache import ObjectCache
from contractor.type_mapper import TypeMapper

__all__ = ["Resolver", "CachedInstances"]

logger = logging.getLogger(__name__)


class CachedInstances:
    """Lazy, restartable view of the cached instances of one contract.

    Every iteration reads the cache afresh, so instances cached after the view
    was created are included and cleared ones are not.
    """

    def __init__(self, cache: ObjectCache, contract: str):
        self._cache = cache
        self._contract = contract

    def __iter__(self) -> Iterator[Any]:
        for record in self._cache.records(self._contract):
            yield record.instance


class Resolver(ResolverHandle):
    """Resolve contracts to instances, caching them per the binding's singleton policy.

    The built-in :class:`~contractor.modules.FactoryModule` is always the first
    module; any ``modules`` supplied follow it in order.

    Creating an instance holds a lock for its (contract, implementation) pair
    only, so slow constructors do not hold up other contracts. A constructor
    must not wait on another thread resolving its own pair.

    Args:
        type_mapper: Maps contracts to implementations and constructs them.
        modules: Additional modules to register at construction.
        cache: The object cache to use; a fresh one by default.

    Example:
        >>> with make_resolver(registration, catalog) as resolver:
        ...     greeter = resolver.resolve("Greeter")
        ...     assert resolver.resolve("Greeter") is greeter
    """

    def __init__(
        self,
        type_mapper: TypeMapper,
        modules: Optional[Iterable[ResolverModule]] = None,
        cache: Optional[ObjectCache] = None,
    ):
        self._mapper = type_mapper
        self._cache = cache if cache is not None else ObjectCache()
        self._pipeline = ModulePipeline([FactoryModule(type_mapper), *(modules or [])])
        self._creation_locks = {}
        self._creation_locks_guard = threading.Lock()

    @property
    def cache(self) -> ObjectCache:
        return self._cache

    @property
    def pipeline(self) -> ModulePipeline:
        return self._pipeline

    def resolve(
        self,
        contract: ContractKey,
        args: Optional[Sequence[Any]] = None,
        *,
        module_logic: Optional[ModuleLogic] = None,
        module_filter: Optional[ModuleFilter] = None,
    ) -> Any:
        """Return the cached instance for ``contract``, creating and caching it if absent.

        Args:
            contract: The contract identifier, or an abstract type standing for it.
            args: Constructor arguments used if a new instance is needed.
            module_logic: Route construction through the module pipeline,
                applying this callable to each module.
            module_filter: Route construction through the module pipeline,
                reordering or subsetting the modules first.

        Raises:
            AmbiguousResolutionRequestError: If constructor arguments and a
                module override are both supplied.
        """
        name, args = self._prepare(contract, args, module_logic, module_filter)
        implementation = self._mapper.resolve_implementation(name)

        record = self._cache.find(name, implementation)
        if record is None:
            with self._creation_lock(name, implementation):
                record = self._cache.find(name, implementation)
                if record is None:
                    logger.debug("No cached %s for contract '%s'", implementation.name, name)
                    record = self._create_record(
                        name, implementation, args, module_logic, module_filter
                    )
                    self._cache.insert(record)
        return record.instance

    def resolve_new(
        self,
        contract: ContractKey,
        args: Optional[Sequence[Any]] = None,
        *,
        module_logic: Optional[ModuleLogic] = None,
        module_filter: Optional[ModuleFilter] = None,
    ) -> Any:
        """Create a fresh instance for ``contract``, cache it and return it.

        Raises:
            MultiplicityViolationError: If the binding disallows multiples and
                an instance for the same implementation is already cached.
        """
        name, args = self._prepare(contract, args, module_logic, module_filter)
        implementation = self._mapper.resolve_implementation(name)

        with self._creation_lock(name, implementation):
            binding = self._mapper.binding(name)
            if not binding.allow_multiple and self._cache.exists_both(name, implementation):
                raise MultiplicityViolationError(
                    f"Contract '{name}' mapped to implementation "
                    f"'{implementation.qualified_name}' does not allow multiple "
                    "instances and one was already resolved"
                )
            record = self._create_record(
                name, implementation, args, module_logic, module_filter
            )
            self._cache.insert(record)
        return record.instance

    def resolve_all(self, contract: ContractKey) -> CachedInstances:
        """Return every cached instance bound to ``contract``.

        Raises:
            NoInstancesFoundError: If the cache holds no instance of the contract.
        """
        name = self._mapper.contract_name(contract)
        if not self._cache.exists(name):
            raise NoInstancesFoundError(
                f"Failed to locate any cached instances of contract '{name}'"
            )
        return CachedInstances(self._cache, name)

    def resolve_without_caching(
        self,
        contract: ContractKey,
        args: Optional[Sequence[Any]] = None,
        *,
        module_logic: Optional[ModuleLogic] = None,
        module_filter: Optional[ModuleFilter] = None,
    ) -> Any:
        """Create and return an instance for ``contract`` that is never cached."""
        name, args = self._prepare(contract, args, module_logic, module_filter)
        implementation = self._mapper.resolve_implementation(name)
        logger.debug("Building uncached %s for contract '%s'", implementation.name, name)
        return self._instantiate(name, implementation, args, module_logic, module_filter)

    def clear_cache(self) -> None:
        self._cache.clear()

    def view_cache(self) -> list[str]:
        return self._cache.snapshot()

    def register_module(self, module: ResolverModule) -> None:
        self._pipeline.register(module)

    def remove_module(self, module: ResolverModule) -> bool:
        return self._pipeline.unregister(module)

    def close(self) -> None:
        self.clear_cache()

    def __enter__(self) -> "Resolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _prepare(self, contract, args, module_logic, module_filter) -> tuple[str, tuple]:
        name = self._mapper.contract_name(contract)
        args = tuple(args or ())
        if args and (module_logic is not None or module_filter is not None):
            raise AmbiguousResolutionRequestError(
                f"Resolving '{name}' should not be given both constructor arguments "
                "and a module override"
            )
        return name, args

    def _creation_lock(self, name: str, implementation: ImplementationDescriptor):
        with self._creation_locks_guard:
            return self._creation_locks.setdefault(
                (name, implementation.name), threading.RLock()
            )

    def _create_record(
        self,
        name: str,
        implementation: ImplementationDescriptor,
        args: tuple,
        module_logic: Optional[ModuleLogic],
        module_filter: Optional[ModuleFilter],
    ) -> InstanceRecord:
        instance = self._instantiate(name, implementation, args, module_logic, module_filter)
        return InstanceRecord(
            uuid.uuid4(),
            name,
            implementation,
            instance,
            self._mapper.binding(name).allow_multiple,
        )

    def _instantiate(
        self,
        name: str,
        implementation: ImplementationDescriptor,
        args: tuple,
        module_logic: Optional[ModuleLogic],
        module_filter: Optional[ModuleFilter],
    ) -> Any:
        if module_logic is not None or module_filter is not None:
            return self._pipeline.run(name, self, None, module_filter, module_logic)

        if TypeMapper.uses_factory(self._mapper.binding(name), args):
            return self._pipeline.run(name, self)

        args = self._with_resolver_if_needed(name, implementation, args)
        return self._mapper.construct(implementation, args)

    def _with_resolver_if_needed(
        self, name: str, implementation: ImplementationDescriptor, args: tuple
    ) -> tuple:
        if args or not implementation.constructors or implementation.accepts_no_arguments():
            return args
        if implementation.accepts_resolver():
            return (self,)
        raise MissingConstructorArgumentsError(
            f"Contract '{name}' mapping to implementation '{implementation.qualified_name}' "
            "requires constructor arguments that were not provided"
        )

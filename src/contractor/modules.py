"""Pluggable overrides of the default construction path.

A :class:`ResolverModule` receives the contract being resolved, the resolver,
and the candidate produced by the modules before it. It returns a candidate:
either its own, or the untouched input when the contract is not its concern.

The :class:`ModulePipeline` folds a snapshot of its modules left to right.
Each module's return value replaces the running candidate, so the last module
to return something wins; a module that returns ``None`` after an earlier one
produced an instance discards it. At least one module in an invoked chain must
produce an instance.
"""

import inspect
import logging
import threading
from abc import ABC, abstractmethod
from functools import reduce
from typing import Any, Callable, Iterable, Optional, TYPE_CHECKING, get_type_hints

from contractor.contracts import ResolverHandle
from contractor.errors import (
    FactoryNotFoundError,
    ModuleChainExhaustedError,
    UnsupportedFactorySignatureError,
)

if TYPE_CHECKING:
    from contractor.type_mapper import TypeMapper

__all__ = [
    "ResolverModule",
    "FactoryModule",
    "ModulePipeline",
    "ModuleLogic",
    "ModuleFilter",
    "execute_module",
]

logger = logging.getLogger(__name__)


class ResolverModule(ABC):
    """A handler that may supply or replace the instance produced for a contract."""

    @abstractmethod
    def execute(self, contract: str, resolver: ResolverHandle, existing: Any) -> Any:
        """Return an instance for ``contract``, or ``existing`` unchanged.

        Args:
            contract: The contract identifier being resolved.
            resolver: The resolver performing the resolution.
            existing: The candidate produced by earlier modules, if any.
        """


ModuleLogic = Callable[[Any, ResolverModule, str, ResolverHandle], Any]
"""Callable applied to each module in turn: ``(candidate, module, contract, resolver) -> candidate``."""

ModuleFilter = Callable[[list[ResolverModule]], list[ResolverModule]]
"""Callable that reorders or subsets the modules before a single fold."""


def execute_module(
    candidate: Any, module: ResolverModule, contract: str, resolver: ResolverHandle
) -> Any:
    return module.execute(contract, resolver, candidate)


class ModulePipeline:
    """Ordered, mutable sequence of :class:`ResolverModule` handlers."""

    def __init__(self, modules: Optional[Iterable[ResolverModule]] = None):
        self._modules: list[ResolverModule] = []
        self._lock = threading.Lock()
        for module in modules or []:
            self.register(module)

    def register(self, module: ResolverModule) -> None:
        if not isinstance(module, ResolverModule):
            raise TypeError(f"Module {module!r} must extend ResolverModule")
        with self._lock:
            self._modules.append(module)
        logger.debug("Registered module %s", type(module).__name__)

    def unregister(self, module: ResolverModule) -> bool:
        with self._lock:
            try:
                self._modules.remove(module)
            except ValueError:
                return False
        logger.debug("Removed module %s", type(module).__name__)
        return True

    def modules(self) -> tuple[ResolverModule, ...]:
        with self._lock:
            return tuple(self._modules)

    def run(
        self,
        contract: str,
        resolver: ResolverHandle,
        candidate: Any = None,
        module_filter: Optional[ModuleFilter] = None,
        module_logic: Optional[ModuleLogic] = None,
    ) -> Any:
        """Fold the modules over ``candidate`` and return the final candidate.

        Args:
            contract: The contract identifier being resolved.
            resolver: The resolver handed to every module.
            candidate: Initial candidate, usually ``None``.
            module_filter: Optional reordering/subsetting of the modules.
            module_logic: How each module is applied; defaults to
                :func:`execute_module`.

        Raises:
            ModuleChainExhaustedError: If no instance remains after the fold.
        """
        modules = list(self.modules())
        if module_filter is not None:
            modules = list(module_filter(modules))
        logic = module_logic or execute_module

        result = reduce(
            lambda current, module: logic(current, module, contract, resolver),
            modules,
            candidate,
        )
        if result is None:
            raise ModuleChainExhaustedError(
                f"Modules {[type(m).__name__ for m in modules]} were run for contract "
                f"'{contract}' but none returned an instance. At least one module must "
                "return the finished instance and no later module may replace it with None."
            )
        return result


class FactoryModule(ResolverModule):
    """Builds instances by calling a method on another resolved contract.

    A binding opts in by declaring ``Factory`` and ``FactoryMethod``. The
    factory contract is resolved through the resolver (so the factory itself is
    cached) and the named method is called with no arguments, or with the
    resolver if its single parameter is annotated as a
    :class:`~contractor.contracts.ResolverHandle`.

    Contracts without a factory, and candidates already produced by earlier
    modules, are passed through untouched.
    """

    def __init__(self, type_mapper: "TypeMapper"):
        self._type_mapper = type_mapper

    def execute(self, contract: str, resolver: ResolverHandle, existing: Any) -> Any:
        if existing is not None:
            return existing
        if resolver is None:
            raise ValueError("FactoryModule requires a resolver")

        binding = self._type_mapper.binding(contract)
        if not binding.uses_factory:
            return existing

        if self._type_mapper.type_catalog.find_contract(binding.factory_contract) is None:
            raise FactoryNotFoundError(
                f"Contract '{contract}' was marked to use factory '{binding.factory_contract}' "
                "but no such contract is registered in the type catalog"
            )

        factory = resolver.resolve(binding.factory_contract)
        method = getattr(factory, binding.factory_method, None)
        if method is None or not callable(method):
            raise FactoryNotFoundError(
                f"Factory '{binding.factory_contract}' for contract '{contract}' has no "
                f"method '{binding.factory_method}'"
            )

        logger.debug(
            "Building '%s' via %s.%s",
            contract,
            binding.factory_contract,
            binding.factory_method,
        )
        return _invoke_factory_method(method, resolver, contract)


def _invoke_factory_method(method: Callable[..., Any], resolver: ResolverHandle, contract: str) -> Any:
    parameters = list(inspect.signature(method).parameters.values())
    if not parameters:
        return method()

    if len(parameters) == 1:
        try:
            declared = get_type_hints(method).get(parameters[0].name)
        except (NameError, TypeError):
            declared = None
        if inspect.isclass(declared) and issubclass(declared, ResolverHandle):
            return method(resolver)

    raise UnsupportedFactorySignatureError(
        f"Factory method {getattr(method, '__qualname__', method)} for contract '{contract}' "
        "must take no parameters or a single ResolverHandle parameter"
    )

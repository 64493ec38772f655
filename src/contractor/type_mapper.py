"""Mapping of contracts to their implementations and construction of instances."""

import inspect
import logging
from typing import Any, Sequence

from contractor.binding_catalog import BindingCatalog
from contractor.contracts import ContractKey
from contractor.domain import Binding, ImplementationDescriptor
from contractor.errors import (
    ContractNotFoundError,
    DependencyError,
    ImplementationNotFoundError,
    MissingConstructorArgumentsError,
)
from contractor.type_catalog import TypeCatalog

__all__ = ["TypeMapper"]

logger = logging.getLogger(__name__)


class TypeMapper:
    """Resolve contracts to implementation descriptors and build instances from them.

    Args:
        binding_catalog: Source of the binding declared for each contract.
        type_catalog: Table of the implementation and contract types known
            to the process.
    """

    def __init__(self, binding_catalog: BindingCatalog, type_catalog: TypeCatalog):
        self._bindings = binding_catalog
        self._types = type_catalog

    @property
    def binding_catalog(self) -> BindingCatalog:
        return self._bindings

    @property
    def type_catalog(self) -> TypeCatalog:
        return self._types

    def contract_name(self, contract: ContractKey) -> str:
        """Normalise a contract key to its identifier.

        Raises:
            ContractNotFoundError: If the key is missing or blank, or is a
                type that is not abstract, a protocol, or a registered contract.
        """
        if isinstance(contract, str):
            if contract.strip():
                return contract
        elif inspect.isclass(contract) and self._types.is_contract_type(contract):
            return contract.__name__
        raise ContractNotFoundError(
            f"{contract!r} does not denote a contract; resolve only operates on contracts"
        )

    def binding(self, contract: ContractKey) -> Binding:
        return self._bindings.lookup(self.contract_name(contract))

    def resolve_implementation(self, contract: ContractKey) -> ImplementationDescriptor:
        """Return the descriptor of the implementation bound to ``contract``.

        Raises:
            ContractNotFoundError: If ``contract`` does not denote a contract.
            RegistrationInvalidError: If the binding is missing or malformed.
            ImplementationNotFoundError: If the type catalog does not know the
                bound implementation.
        """
        binding = self.binding(contract)
        descriptor = self._types.find_implementation(binding.implementation)
        if descriptor is None:
            raise ImplementationNotFoundError(
                f"Failed to map contract '{binding.contract}' to implementation "
                f"'{binding.implementation}': no such implementation in the type catalog"
            )
        return descriptor

    @staticmethod
    def uses_factory(binding: Binding, args: Sequence[Any]) -> bool:
        """Whether construction should go through the binding's factory.

        Two or more explicit constructor arguments bypass the factory.
        """
        return binding.uses_factory and len(args) <= 1

    def construct(self, descriptor: ImplementationDescriptor, args: Sequence[Any]) -> Any:
        """Invoke the implementation's constructor with ``args``.

        Targets whose signature could not be read are called regardless.

        Raises:
            MissingConstructorArgumentsError: If no constructor takes that
                many positional arguments.
            DependencyError: If the constructor produced ``None``.
        """
        if not descriptor.accepts_arguments(len(args)):
            if descriptor.constructors:
                reason = f"has no constructor taking {len(args)} argument(s)"
            else:
                reason = "cannot be constructed from positional arguments"
            raise MissingConstructorArgumentsError(
                f"Implementation '{descriptor.qualified_name}' {reason}"
            )

        instance = descriptor.target(*args)
        if instance is None:
            raise DependencyError(
                f"Implementation '{descriptor.qualified_name}' produced no instance"
            )
        logger.debug("Constructed %s with %d argument(s)", descriptor.name, len(args))
        return instance

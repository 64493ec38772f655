"""High level entry points for constructing resolvers."""

import os
from typing import Iterable, Optional, Union

from contractor.binding_catalog import BindingCatalog
from contractor.modules import ResolverModule
from contractor.registration import (
    DEFAULT_REGISTRATION_FILE,
    RegistrationDocument,
    RegistrationEntry,
    RegistrationLoader,
)
from contractor.resolver import Resolver
from contractor.type_catalog import TypeCatalog
from contractor.type_mapper import TypeMapper

__all__ = ["make_resolver", "make_resolver_from_file"]


def make_resolver(
    registration: Union[RegistrationDocument, Iterable[RegistrationEntry]],
    catalog: TypeCatalog,
    modules: Optional[Iterable[ResolverModule]] = None,
) -> Resolver:
    """Create a :class:`Resolver` for the given registration table.

    Args:
        registration: A parsed registration document, or its entries.
        catalog: The type catalog holding every implementation and contract
            the registration refers to.
        modules: Optional modules registered after the built-in factory module.

    Returns:
        A resolver with an empty cache.

    Example:
        >>> resolver = make_resolver(
        ...     [RegistrationEntry(contract="Greeter", implementation="EnglishGreeter")],
        ...     catalog,
        ... )
        >>> resolver.resolve("Greeter").greet("Dominic")
    """
    return Resolver(TypeMapper(BindingCatalog(registration), catalog), modules)


def make_resolver_from_file(
    catalog: TypeCatalog,
    file_name: str = DEFAULT_REGISTRATION_FILE,
    search_dirs: Optional[Iterable[Union[str, os.PathLike]]] = None,
    modules: Optional[Iterable[ResolverModule]] = None,
) -> Resolver:
    """Locate a registration file, load it and create a :class:`Resolver` for it.

    The file is searched for in ``search_dirs`` and then in the current
    working directory.

    Raises:
        RegistrationFileNotFoundError: If the file cannot be located.
        RegistrationInvalidError: If the file does not match the registration schema.
    """
    document = RegistrationLoader(file_name, search_dirs).load()
    return make_resolver(document, catalog, modules)

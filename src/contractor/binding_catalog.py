"""Lookup of binding metadata by contract identifier."""

import logging
from typing import Iterable, Union

from contractor.domain import Binding
from contractor.errors import RegistrationInvalidError
from contractor.registration import RegistrationDocument, RegistrationEntry

__all__ = ["BindingCatalog"]

logger = logging.getLogger(__name__)


class BindingCatalog:
    """Exposes the bindings declared in a registration table.

    Lookup is an exact match on the contract identifier. If the table contains
    duplicate entries for one contract, the first in table order wins.

    Args:
        registration: A parsed registration document, or the entries of one.

    Example:
        >>> catalog = BindingCatalog([
        ...     RegistrationEntry(contract="Greeter", implementation="EnglishGreeter"),
        ... ])
        >>> catalog.lookup("Greeter")
        Binding(contract='Greeter', implementation='EnglishGreeter', ...)
    """

    def __init__(
        self, registration: Union[RegistrationDocument, Iterable[RegistrationEntry]]
    ):
        if isinstance(registration, RegistrationDocument):
            registration = registration.registration
        self._entries: tuple[RegistrationEntry, ...] = tuple(registration)
        logger.debug("Binding catalog holds %d entries", len(self._entries))

    def lookup(self, contract: str) -> Binding:
        """Return the binding declared for ``contract``.

        Raises:
            RegistrationInvalidError: If no entry is declared for the contract,
                the entry has no implementation, or it names a factory without
                a factory method.
        """
        entry = next((e for e in self._entries if e.contract == contract), None)
        _validate_entry(entry, contract)
        return Binding(
            contract=entry.contract,
            implementation=entry.implementation.strip(),
            allow_multiple=entry.multiple,
            factory_contract=entry.factory or None,
            factory_method=entry.factory_method or None,
        )

    def contracts(self) -> list[str]:
        return [e.contract for e in self._entries if e.contract]

    def __contains__(self, contract: str) -> bool:
        return any(e.contract == contract for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _validate_entry(entry, contract: str) -> None:
    if entry is None:
        raise RegistrationInvalidError(
            f"Registration for '{contract}' is not setup correctly: no entry declares it"
        )
    if entry.contract != contract:
        raise RegistrationInvalidError(
            f"Registration for '{contract}' is not setup correctly: "
            f"entry declares contract '{entry.contract}'"
        )
    if not entry.implementation or not entry.implementation.strip():
        raise RegistrationInvalidError(
            f"Registration for '{contract}' is not setup correctly: no implementation class"
        )
    if entry.factory and not entry.factory_method:
        raise RegistrationInvalidError(
            f"Registration for '{contract}' is not setup correctly: "
            f"factory '{entry.factory}' declared without a factory method"
        )

"""Registration data models and the loader that reads them from disk.

A registration document declares, for each contract, which implementation
satisfies it and how instances are created::

    {
      "Assemblies": {"Interfaces": ["app.contracts"], "Entities": ["app.services"]},
      "Registration": [
        {"Interface": "Greeter", "Class": "EnglishGreeter", "Multiple": false},
        {"Interface": "Clock", "Class": "SystemClock",
         "Factory": "ClockFactory", "FactoryMethod": "make"}
      ]
    }
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_pascal

from contractor.errors import RegistrationFileNotFoundError, RegistrationInvalidError

__all__ = [
    "AssemblyReferences",
    "RegistrationEntry",
    "RegistrationDocument",
    "RegistrationLoader",
    "load_registration",
    "DEFAULT_REGISTRATION_FILE",
]

logger = logging.getLogger(__name__)

DEFAULT_REGISTRATION_FILE = "registration.json"


class _RegistrationSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
    )


class AssemblyReferences(_RegistrationSchema):
    """Modules declaring contracts (``Interfaces``) and implementations (``Entities``)."""

    interfaces: list[str] = Field(default_factory=list)
    entities: list[str] = Field(default_factory=list)


class RegistrationEntry(_RegistrationSchema):
    """A single row of the registration table."""

    contract: Optional[str] = Field(default=None, alias="Interface")
    implementation: Optional[str] = Field(default=None, alias="Class")
    multiple: bool = False
    factory: Optional[str] = None
    factory_method: Optional[str] = None


class RegistrationDocument(_RegistrationSchema):
    """The parsed contents of a registration file."""

    assemblies: AssemblyReferences = Field(default_factory=AssemblyReferences)
    registration: list[RegistrationEntry] = Field(default_factory=list)


def load_registration(path: Union[str, os.PathLike]) -> RegistrationDocument:
    """Parse the registration file at ``path``.

    Raises:
        RegistrationInvalidError: If the file content does not match the
            registration schema.
    """
    with open(path) as f:
        content = f.read()
    try:
        document = RegistrationDocument.model_validate_json(content)
    except ValidationError as e:
        raise RegistrationInvalidError(
            f"Registration file '{path}' is not setup correctly: {e}"
        ) from e
    logger.debug(
        "Loaded %d registration entries from %s (interfaces: %s, entities: %s)",
        len(document.registration),
        path,
        document.assemblies.interfaces,
        document.assemblies.entities,
    )
    return document


class RegistrationLoader:
    """Locate and load a registration file.

    The file is searched for in each of ``search_dirs`` in order and then in
    the current working directory; the first existing candidate wins.

    Args:
        file_name: Name of the registration file.
        search_dirs: Directories to search before the working directory.

    Raises:
        ValueError: If ``file_name`` is blank.
    """

    def __init__(
        self,
        file_name: str = DEFAULT_REGISTRATION_FILE,
        search_dirs: Optional[Iterable[Union[str, os.PathLike]]] = None,
    ):
        if not file_name or not file_name.strip():
            raise ValueError("Registration file name cannot be blank")
        self._file_name = file_name.strip()
        self._search_dirs = [Path(d) for d in (search_dirs or [])]

    def candidates(self) -> list[Path]:
        return [d / self._file_name for d in self._search_dirs] + [
            Path.cwd() / self._file_name
        ]

    def locate(self) -> Path:
        """Return the path of the first registration file found.

        Raises:
            RegistrationFileNotFoundError: If none of the candidates exist.
        """
        candidates = self.candidates()
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise RegistrationFileNotFoundError(
            f"Failed to locate registration file '{self._file_name}' "
            f"at any of {[str(c) for c in candidates]}"
        )

    def load(self) -> RegistrationDocument:
        return load_registration(self.locate())

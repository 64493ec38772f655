"""Contractor: a runtime resolver from contracts to implementations.

Callers depend only on contract identifiers. Which implementation satisfies
each contract, whether it is cached as a singleton, and whether it is built by
a factory are declared in a registration table, typically a JSON file.

Key Features:
    - Declarative registration loaded from JSON and validated with pydantic
    - Explicit type catalog populated by decorators, no runtime scanning
    - Cached, forced-new, uncached and resolve-all resolution modes
    - Factory indirection through another resolved contract
    - Pluggable modules that intercept construction
    - Thread-safe object cache with disposal on clear

Basic Usage:
    >>> from contractor.type_catalog import TypeCatalog
    >>> from contractor.builders import make_resolver
    >>> from contractor.registration import RegistrationEntry
    >>>
    >>> catalog = TypeCatalog()
    >>>
    >>> @catalog.implementation()
    ... class EnglishGreeter(Greeter):
    ...     def greet(self, name: str) -> str:
    ...         return f"Hello {name}"
    >>>
    >>> resolver = make_resolver(
    ...     [RegistrationEntry(contract="Greeter", implementation="EnglishGreeter")],
    ...     catalog,
    ... )
    >>> resolver.resolve("Greeter").greet("Dominic")

The package consists of several core modules:
    - registration: Registration data models and file loader
    - binding_catalog: Binding lookup by contract identifier
    - type_catalog: Implementation and contract type table
    - type_mapper: Contract-to-implementation mapping and construction
    - object_cache: Thread-safe instance cache
    - modules: Module pipeline and the built-in factory module
    - resolver: The public resolver
    - builders: High-level resolver construction functions
    - errors: Framework-specific exceptions
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

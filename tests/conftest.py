import time
from abc import ABC, abstractmethod
from typing import Any

import pytest

from contractor.builders import make_resolver
from contractor.contracts import Disposable, ResolverHandle
from contractor.modules import ResolverModule
from contractor.registration import RegistrationDocument
from contractor.resolver import Resolver
from contractor.type_catalog import TypeCatalog


class Greeter(ABC):
    @abstractmethod
    def greet(self, name: str) -> str:
        ...


class EnglishGreeter(Greeter):
    def greet(self, name: str) -> str:
        return "Hello %s" % name


class Worker(ABC):
    @abstractmethod
    def work(self) -> str:
        ...


class PooledWorker(Worker):
    def work(self) -> str:
        return "working"


class Connection(ABC):
    pass


class TrackedConnection(Connection, Disposable):
    def __init__(self):
        self.dispose_count = 0

    def dispose(self) -> None:
        self.dispose_count += 1


class Clock(ABC):
    @abstractmethod
    def now(self) -> str:
        ...


class FixedClock(Clock):
    def __init__(self, label: str = "direct", zone: str = "UTC"):
        self.label = label
        self.zone = zone

    def now(self) -> str:
        return f"{self.label}@{self.zone}"


class ClockFactory(ABC):
    @abstractmethod
    def make(self) -> Clock:
        ...


class DefaultClockFactory(ClockFactory):
    def __init__(self):
        self.calls = 0

    def make(self) -> Clock:
        self.calls += 1
        return FixedClock("factory")


class Auditor(ABC):
    pass


class ResolverAwareAuditor(Auditor):
    def __init__(self, resolver: ResolverHandle):
        self.resolver = resolver


class Pair(ABC):
    pass


class NumberPair(Pair):
    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right


class SlowService(ABC):
    pass


class SlowServiceImpl(SlowService):
    def __init__(self):
        time.sleep(0.01)


class PassThroughModule(ResolverModule):
    def __init__(self):
        self.seen = []

    def execute(self, contract: str, resolver: ResolverHandle, existing: Any) -> Any:
        self.seen.append(contract)
        return existing


class SupplyingModule(ResolverModule):
    def __init__(self, value: Any):
        self.value = value

    def execute(self, contract: str, resolver: ResolverHandle, existing: Any) -> Any:
        return existing if existing is not None else self.value


REGISTRATION = {
    "Assemblies": {"Interfaces": ["tests.contracts"], "Entities": ["tests.entities"]},
    "Registration": [
        {"Interface": "Greeter", "Class": "EnglishGreeter", "Multiple": False},
        {"Interface": "Worker", "Class": "PooledWorker", "Multiple": True},
        {"Interface": "Connection", "Class": "TrackedConnection"},
        {
            "Interface": "Clock",
            "Class": "FixedClock",
            "Factory": "ClockFactory",
            "FactoryMethod": "make",
        },
        {"Interface": "ClockFactory", "Class": "DefaultClockFactory"},
        {"Interface": "Auditor", "Class": "ResolverAwareAuditor"},
        {"Interface": "Pair", "Class": "NumberPair"},
        {"Interface": "SlowService", "Class": "SlowServiceImpl"},
    ],
}


@pytest.fixture
def registration() -> RegistrationDocument:
    return RegistrationDocument.model_validate(REGISTRATION)


@pytest.fixture
def catalog() -> TypeCatalog:
    catalog = TypeCatalog()
    for contract in (Greeter, Worker, Connection, Clock, ClockFactory, Auditor, Pair, SlowService):
        catalog.register_contract(contract)
    for implementation in (
        EnglishGreeter,
        PooledWorker,
        TrackedConnection,
        FixedClock,
        DefaultClockFactory,
        ResolverAwareAuditor,
        NumberPair,
        SlowServiceImpl,
    ):
        catalog.register_implementation(implementation)
    return catalog


@pytest.fixture
def resolver(registration, catalog) -> Resolver:
    return make_resolver(registration, catalog)

import logging
import uuid

import pytest

from conftest import EnglishGreeter, PooledWorker, TrackedConnection
from contractor.contracts import Disposable
from contractor.domain import InstanceRecord
from contractor.errors import NullRecordError
from contractor.object_cache import ObjectCache
from contractor.type_catalog import TypeCatalog


class FailingConnection(Disposable):
    def dispose(self) -> None:
        raise RuntimeError("socket already closed")


@pytest.fixture
def cache() -> ObjectCache:
    return ObjectCache()


@pytest.fixture
def descriptors():
    types = TypeCatalog()
    return {
        target.__name__: types.register_implementation(target)
        for target in (EnglishGreeter, PooledWorker, TrackedConnection, FailingConnection)
    }


def make_record(contract, descriptor, instance=None, allow_multiple=False):
    if instance is None:
        instance = descriptor.target()
    return InstanceRecord(uuid.uuid4(), contract, descriptor, instance, allow_multiple)


def test_insert_and_find(cache, descriptors):
    record = make_record("Greeter", descriptors["EnglishGreeter"])

    cache.insert(record)

    assert cache.find("Greeter", descriptors["EnglishGreeter"]) is record
    assert cache.find("Greeter", descriptors["PooledWorker"]) is None
    assert cache.find("Other", descriptors["EnglishGreeter"]) is None


def test_insert_replaces_single_instance_record_and_disposes_it(cache, descriptors):
    first = make_record("Connection", descriptors["TrackedConnection"])
    second = make_record("Connection", descriptors["TrackedConnection"])

    cache.insert(first)
    cache.insert(second)

    assert len(cache) == 1
    assert cache.find("Connection", descriptors["TrackedConnection"]) is second
    assert first.instance.dispose_count == 1
    assert second.instance.dispose_count == 0


def test_failing_dispose_on_replace_keeps_new_record(cache, descriptors):
    failing = make_record("Connection", descriptors["FailingConnection"])
    replacement = make_record("Connection", descriptors["FailingConnection"])
    cache.insert(failing)

    with pytest.raises(RuntimeError, match="socket already closed"):
        cache.insert(replacement)

    assert len(cache) == 1
    assert cache.find("Connection", descriptors["FailingConnection"]) is replacement
    assert not cache.exists_instance(failing.instance)


def test_multiple_records_coexist(cache, descriptors):
    first = make_record("Worker", descriptors["PooledWorker"], allow_multiple=True)
    second = make_record("Worker", descriptors["PooledWorker"], allow_multiple=True)

    cache.insert(first)
    cache.insert(second)

    assert cache.records("Worker") == [first, second]


def test_records_keep_insertion_order(cache, descriptors):
    records = [
        make_record("Worker", descriptors["PooledWorker"], allow_multiple=True),
        make_record("Greeter", descriptors["EnglishGreeter"]),
        make_record("Worker", descriptors["PooledWorker"], allow_multiple=True),
    ]
    for record in records:
        cache.insert(record)

    assert cache.records() == records
    assert [r.id for r in cache.records("Worker")] == [records[0].id, records[2].id]


def test_existence_checks(cache, descriptors):
    record = make_record("Greeter", descriptors["EnglishGreeter"])
    cache.insert(record)

    assert cache.exists("Greeter")
    assert not cache.exists("Worker")
    assert cache.exists_implementation(descriptors["EnglishGreeter"])
    assert not cache.exists_implementation(descriptors["PooledWorker"])
    assert cache.exists_both("Greeter", descriptors["EnglishGreeter"])
    assert not cache.exists_both("Worker", descriptors["EnglishGreeter"])
    assert cache.exists_instance(record.instance)
    assert not cache.exists_instance(EnglishGreeter())


def test_inserting_none_raises(cache):
    with pytest.raises(NullRecordError):
        cache.insert(None)


@pytest.mark.parametrize("contract, has_descriptor", [(None, True), ("Greeter", False)])
def test_exists_both_requires_both_arguments(cache, descriptors, contract, has_descriptor):
    descriptor = descriptors["EnglishGreeter"] if has_descriptor else None

    with pytest.raises(ValueError, match="Both a contract and an implementation"):
        cache.exists_both(contract, descriptor)


def test_clear_disposes_each_record_once(cache, descriptors):
    first = make_record("Connection", descriptors["TrackedConnection"], allow_multiple=True)
    second = make_record("Connection", descriptors["TrackedConnection"], allow_multiple=True)
    cache.insert(first)
    cache.insert(second)
    cache.insert(make_record("Greeter", descriptors["EnglishGreeter"]))

    cache.clear()
    cache.clear()

    assert len(cache) == 0
    assert first.instance.dispose_count == 1
    assert second.instance.dispose_count == 1


def test_failing_dispose_is_logged_and_cache_still_cleared(cache, descriptors, caplog):
    failing = make_record("Connection", descriptors["FailingConnection"])
    tracked = make_record("Tracked", descriptors["TrackedConnection"])
    cache.insert(failing)
    cache.insert(tracked)

    with caplog.at_level(logging.ERROR, logger="contractor.object_cache"):
        cache.clear()

    assert len(cache) == 0
    assert tracked.instance.dispose_count == 1
    assert "Failed to dispose FailingConnection" in caplog.text
    assert "socket already closed" in caplog.text


def test_snapshot_describes_records_in_order(cache, descriptors):
    greeter = make_record("Greeter", descriptors["EnglishGreeter"])
    worker = make_record("Worker", descriptors["PooledWorker"], allow_multiple=True)
    cache.insert(greeter)
    cache.insert(worker)

    snapshot = cache.snapshot()

    assert snapshot == [greeter.describe(), worker.describe()]
    assert snapshot[0] == (
        f"InstanceRecord {greeter.id} - Name: EnglishGreeter\n"
        "Contract: Greeter\n"
        "Implementation: conftest.EnglishGreeter"
    )


def test_snapshot_is_detached_from_cache(cache, descriptors):
    cache.insert(make_record("Greeter", descriptors["EnglishGreeter"]))
    snapshot = cache.snapshot()

    cache.clear()

    assert len(snapshot) == 1
    assert cache.snapshot() == []


def test_locked_yields_cache_and_is_reentrant(cache, descriptors):
    record = make_record("Greeter", descriptors["EnglishGreeter"])

    with cache.locked() as locked:
        if not locked.exists("Greeter"):
            locked.insert(record)

    assert locked is cache
    assert cache.records() == [record]

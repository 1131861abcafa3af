from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from datacontext.domain import PersistenceContext, StoreWriteError, ValidationError
from datacontext.domain.model import Entity, EntityState
from datacontext.domain.ports import ChangesSaved
from tests.helpers.entities import Invoice, InvoiceLine

if TYPE_CHECKING:
    from datacontext.adapters.memory import InMemoryStoreDriver
    from tests.helpers.fakes import ManualClock, RecordingCommandExecutor

NOW_1 = datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)
NOW_2 = datetime(2024, 1, 1, 0, 0, 1, tzinfo=UTC)


@dataclass(eq=False, kw_only=True)
class CountingEntity(Entity):
    label: str = ""
    validations: int = field(default=0, compare=False)

    def validate(self) -> None:
        self.validations += 1


@dataclass(eq=False, kw_only=True)
class SpawningEntity(Entity):
    """Registers a child with the context the first time it is validated."""

    context: PersistenceContext | None = field(default=None, compare=False, repr=False)
    child: Invoice = field(default_factory=Invoice, compare=False, repr=False)

    def validate(self) -> None:
        if self.context is not None:
            self.context.add(self.child)
            self.context = None


def test_add_update_save_scenario(
    context: PersistenceContext,
    memory_store: InMemoryStoreDriver,
) -> None:
    invoice = context.create_entity(Invoice)
    assert invoice.created_on is None

    context.add(invoice, "alice")
    assert context.save() == 1

    assert invoice.created_on == NOW_1
    assert invoice.modified_on == NOW_1
    assert invoice.created_by == "alice"

    invoice.amount = 42
    context.update(invoice, "bob")
    assert context.save() == 1

    assert invoice.created_on == NOW_1
    assert invoice.modified_on == NOW_2
    assert invoice.modified_on >= invoice.created_on
    assert invoice.created_by == "alice"
    assert invoice.modified_by == "bob"

    stored = memory_store.stored(Invoice, invoice.id)
    assert isinstance(stored, Invoice)
    assert stored.amount == 42
    assert stored.modified_by == "bob"


def test_validation_failure_aborts_before_any_write(
    context: PersistenceContext,
    memory_store: InMemoryStoreDriver,
) -> None:
    valid = context.add(Invoice(amount=1))
    invalid = context.add(Invoice(amount=-1))
    assert valid is not None
    assert invalid is not None

    with pytest.raises(ValidationError) as exc:
        context.save()

    assert exc.value.entity is invalid
    assert exc.value.messages == ("amount must not be negative",)
    assert memory_store.flush_count == 0
    assert not memory_store.in_transaction
    assert memory_store.row_count() == 0
    # stamps applied before the failure stay in memory
    assert valid.created_on == NOW_1
    assert invalid.created_on is None


def test_save_can_be_retried_after_fixing_entity(
    context: PersistenceContext,
    memory_store: InMemoryStoreDriver,
) -> None:
    invoice = context.add(Invoice(customer=" "))
    assert invoice is not None

    with pytest.raises(ValidationError):
        context.save()

    invoice.customer = "Initech"
    assert context.save() == 1
    assert memory_store.row_count(Invoice) == 1


def test_each_dirty_entity_is_validated_once_per_save(context: PersistenceContext) -> None:
    entity = CountingEntity()
    context.add(entity)

    context.save()
    assert entity.validations == 1

    context.save()  # unchanged: not validated again
    assert entity.validations == 1

    entity.label = "changed"
    context.save()
    assert entity.validations == 2


def test_ignore_flag_suppresses_all_audit_stamps(context: PersistenceContext) -> None:
    invoice = Invoice(ignore_audit_on_commit=True)

    context.add(invoice, "alice")
    context.save()
    context.update(invoice, "bob")
    context.save()

    assert invoice.created_on is None
    assert invoice.modified_on is None
    assert invoice.created_by is None
    assert invoice.modified_by is None


def test_unchanged_entries_are_not_stamped(context: PersistenceContext) -> None:
    invoice = context.add(Invoice())
    assert invoice is not None
    context.save()

    assert context.save() == 0
    assert invoice.modified_on == NOW_1


def test_entities_added_during_validation_are_not_validated_in_that_save(
    context: PersistenceContext,
) -> None:
    spawner = SpawningEntity(context=context)
    context.add(spawner)

    affected = context.save()

    assert affected == 2  # both are written
    assert spawner.child.created_on is None
    assert context.store.state_of(spawner.child) is EntityState.UNCHANGED


def test_deleted_entries_are_written_without_validation(
    context: PersistenceContext,
    memory_store: InMemoryStoreDriver,
) -> None:
    invoice = context.add(Invoice())
    assert invoice is not None
    context.save()

    invoice.amount = -5
    context.remove(invoice)

    assert context.save() == 1
    assert memory_store.row_count(Invoice) == 0
    assert invoice.modified_on == NOW_1


def test_mixed_batch_reports_every_written_entity(context: PersistenceContext) -> None:
    first = context.add(Invoice())
    second = context.add(Invoice())
    assert first is not None
    assert second is not None
    context.save()

    first.amount = 10
    context.remove(second)
    context.add(InvoiceLine(invoice_no=1, line_no=1))

    assert context.save() == 3


def test_store_failure_propagates_and_rolls_back(
    context: PersistenceContext,
    memory_store: InMemoryStoreDriver,
) -> None:
    original = context.add(Invoice())
    assert original is not None
    context.save()

    context.add(Invoice(id=original.id))

    with pytest.raises(StoreWriteError, match="Duplicate key"):
        context.save()

    assert not memory_store.in_transaction
    assert memory_store.row_count(Invoice) == 1


def test_clock_is_read_once_per_save(context: PersistenceContext, clock: ManualClock) -> None:
    context.add(Invoice())
    context.add(Invoice())

    context.save()

    assert clock.reads == [NOW_1]
    assert {entry.entity.modified_on for entry in context.entries()} == {NOW_1}  # type: ignore[attr-defined]


def test_command_executor_is_resolved_once_and_notified(
    memory_store: InMemoryStoreDriver,
    executor: RecordingCommandExecutor,
) -> None:
    resolutions: list[int] = []

    def resolve() -> RecordingCommandExecutor:
        resolutions.append(1)
        return executor

    context = PersistenceContext(memory_store, command_executor_resolver=resolve)
    invoice = context.add(Invoice())

    context.save()

    assert resolutions == [1]
    [command] = executor.commands
    assert isinstance(command, ChangesSaved)
    assert command.affected == 1
    assert command.committed
    assert [entry.entity for entry in command.entries] == [invoice]
    assert [entry.state for entry in command.entries] == [EntityState.ADDED]


def test_command_executor_is_not_notified_when_validation_fails(
    context: PersistenceContext,
    executor: RecordingCommandExecutor,
) -> None:
    context.add(Invoice(amount=-1))

    with pytest.raises(ValidationError):
        context.save()

    assert executor.commands == []

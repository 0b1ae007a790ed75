import pytest
from bson import ObjectId

from app.core.errors import InvalidArgumentError, NotFoundError
from app.schemas.group import ParticipantCreate, ParticipantUpdate
from app.services.balance import aggregate_balances
from app.services.participant_service import ParticipantService
from app.services.recompute_service import RecomputeService


@pytest.fixture
def participant_service(mock_db, store, locks):
    recompute = RecomputeService(mock_db, ledger_repo=store, mode="ledger", locks=locks)
    return ParticipantService(
        mock_db,
        group_repo=store,
        expense_repo=store,
        ledger_repo=store,
        recompute_service=recompute,
        locks=locks
    )


@pytest.mark.asyncio
async def test_delete_participant_with_outstanding_debts(participant_service, store, trio):
    group, alice, bob, charlie = trio
    paid_by_charlie = store.add_expense(group, charlie, 30.0, [(alice, 10.0), (bob, 10.0), (charlie, 10.0)])
    dinner = store.add_expense(group, alice, 90.0, [(alice, 30.0), (bob, 30.0), (charlie, 30.0)])
    store.add_payment(group, charlie, alice, 5.0)
    store.add_debt(group, alice, charlie, 40.0)

    debts = await participant_service.delete_participant(str(charlie.id))

    assert charlie.id not in store.participants
    assert paid_by_charlie.id not in store.expenses
    assert store.payments == {}
    assert all(not d.involves(charlie.id) for d in store.debts.values())

    # Charlie's share is removed from the dinner and its cost shrinks with it
    remaining = store.expenses[dinner.id]
    assert remaining.cost == pytest.approx(60.0)
    assert [s.participant_id for s in remaining.splits] == [alice.id, bob.id]

    balances = aggregate_balances(await store.load_group_ledger(group.id))
    assert set(balances) == {alice.id, bob.id}
    assert abs(sum(balances.values())) <= 0.01
    assert [(d.lender_id, d.debtor_id, d.amount) for d in debts] == [(alice.id, bob.id, 30.0)]


@pytest.mark.asyncio
async def test_expense_left_without_splits_is_deleted(participant_service, store, trio):
    group, alice, bob, charlie = trio
    only_bob = store.add_expense(group, alice, 25.0, [(bob, 25.0)])

    debts = await participant_service.delete_participant(str(bob.id))

    assert only_bob.id not in store.expenses
    assert debts == []


@pytest.mark.asyncio
async def test_unrelated_groups_are_untouched(participant_service, store, trio):
    group, alice, bob, charlie = trio
    other, (dan, eve) = store.add_group("Dan", "Eve")
    store.add_expense(other, dan, 20.0, [(dan, 10.0), (eve, 10.0)])
    store.add_debt(other, dan, eve, 10.0)

    await participant_service.delete_participant(str(alice.id))

    other_debts = [d for d in store.debts.values() if d.group_id == other.id]
    assert [(d.lender_id, d.debtor_id) for d in other_debts] == [(dan.id, eve.id)]


@pytest.mark.asyncio
@pytest.mark.parametrize("participant_id", ["bogus", str(ObjectId())])
async def test_delete_unknown_participant(participant_service, participant_id):
    with pytest.raises(NotFoundError):
        await participant_service.delete_participant(participant_id)


# ===== ADD / RENAME =====

@pytest.mark.asyncio
async def test_add_participant_keeps_debts(participant_service, store, mock_db, trio):
    group, alice, bob, charlie = trio
    debt = store.add_debt(group, alice, bob, 30.0)

    dave = await participant_service.add_participant(ParticipantCreate(group_id=str(group.id), name=" Dave "))

    assert dave.name == "Dave"
    assert store.participants[dave.id].group_id == group.id
    assert list(store.debts) == [debt.id]


@pytest.mark.asyncio
async def test_added_participant_can_join_expenses(participant_service, store, trio):
    group, alice, bob, charlie = trio
    dave = await participant_service.add_participant(ParticipantCreate(group_id=str(group.id), name="Dave"))
    store.add_expense(group, alice, 20.0, [(alice, 10.0), (dave, 10.0)])

    balances = aggregate_balances(await store.load_group_ledger(group.id))

    assert balances[dave.id] == -10.0


@pytest.mark.asyncio
async def test_add_participant_duplicate_name(participant_service, store, trio):
    group = trio[0]
    before = dict(store.participants)

    with pytest.raises(InvalidArgumentError):
        await participant_service.add_participant(ParticipantCreate(group_id=str(group.id), name="Bob"))

    assert store.participants == before


@pytest.mark.asyncio
async def test_add_participant_unknown_group(participant_service):
    with pytest.raises(NotFoundError):
        await participant_service.add_participant(ParticipantCreate(group_id=str(ObjectId()), name="Dave"))


@pytest.mark.asyncio
async def test_rename_participant(participant_service, store, trio):
    group, alice, bob, charlie = trio
    debt = store.add_debt(group, alice, bob, 30.0)

    renamed = await participant_service.rename_participant(str(bob.id), ParticipantUpdate(name="Robert"))

    assert renamed.id == bob.id
    assert store.participants[bob.id].name == "Robert"
    assert list(store.debts) == [debt.id]


@pytest.mark.asyncio
async def test_rename_to_own_name_is_allowed(participant_service, trio):
    bob = trio[2]

    renamed = await participant_service.rename_participant(str(bob.id), ParticipantUpdate(name="Bob"))

    assert renamed.name == "Bob"


@pytest.mark.asyncio
async def test_rename_to_taken_name(participant_service, store, trio):
    group, alice, bob, charlie = trio

    with pytest.raises(InvalidArgumentError):
        await participant_service.rename_participant(str(bob.id), ParticipantUpdate(name="Alice"))

    assert store.participants[bob.id].name == "Bob"


@pytest.mark.asyncio
async def test_rename_unknown_participant(participant_service):
    with pytest.raises(NotFoundError):
        await participant_service.rename_participant(str(ObjectId()), ParticipantUpdate(name="Ghost"))

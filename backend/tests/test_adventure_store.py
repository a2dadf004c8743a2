"""Store contract tests, run against the in-memory and the SQLAlchemy store."""
from datetime import datetime

import pytest

from adventure_api.domain.adventure.models import (
    Adventure,
    AdventurePhoto,
    AdventureReaction,
    AdventureStatus,
    Participant,
)
from adventure_api.domain.common.errors import ConflictError
from adventure_api.domain.common.types import generate_id
from adventure_api.infra.db.models import FriendModel
from adventure_api.infra.db.repositories.adventure_repo import SqlAdventureStore
from adventure_api.infra.db.repositories.friend_repo import FriendRepositoryImpl
from adventure_api.infra.db.repositories.user_repo import UserRepositoryImpl

ALICE = Participant(id="alice", username="alice", avatar_url="https://cdn.example/alice.png")
BOB = Participant(id="bob", username="bob")
CAROL = Participant(id="carol", username="carol")


@pytest.fixture
def adventure_store(store):
    return store


def _adventure(share_token: str = "ADV-0123456789ab", title: str = "Night run") -> Adventure:
    now = datetime(2026, 1, 1, 12, 0, 0)
    return Adventure(
        id=generate_id(),
        creator_id=ALICE.id,
        title=title,
        description="Idea: run.",
        share_token=share_token,
        participants=[ALICE],
        starts_at=now,
        created_at=now,
        updated_at=now,
    )


def _photo(adventure_id: str, url: str = "https://cdn.example/p.jpg") -> AdventurePhoto:
    return AdventurePhoto(
        id=generate_id(),
        adventure_id=adventure_id,
        url=url,
        uploader=ALICE,
        caption="start",
        created_at=datetime(2026, 1, 1, 12, 5, 0),
    )


def _reaction(adventure_id: str, user_id: str, emoji: str) -> AdventureReaction:
    return AdventureReaction(
        id=generate_id(),
        adventure_id=adventure_id,
        user_id=user_id,
        emoji=emoji,
        created_at=datetime(2026, 1, 1, 12, 10, 0),
    )


async def test_create_and_find(adventure_store):
    created = await adventure_store.create_adventure(_adventure(), [ALICE, BOB])

    assert created.participants == [ALICE, BOB]
    assert created.status is AdventureStatus.UPCOMING

    by_id = await adventure_store.find_by_id(created.id)
    by_token = await adventure_store.find_by_share_token("ADV-0123456789ab")
    assert by_id == created
    assert by_token.id == created.id
    assert await adventure_store.find_by_id("missing") is None
    assert await adventure_store.find_by_share_token("ADV-ffffffffffff") is None


async def test_duplicate_share_token_conflicts(adventure_store):
    await adventure_store.create_adventure(_adventure(), [ALICE])

    with pytest.raises(ConflictError):
        await adventure_store.create_adventure(_adventure(title="Other"), [BOB])

    assert await adventure_store.list_by_status(BOB.id, AdventureStatus.UPCOMING) == []


async def test_update_is_full_row(adventure_store):
    created = await adventure_store.create_adventure(_adventure(), [ALICE])
    changed = created.model_copy(
        update={
            "title": "Dawn run",
            "status": AdventureStatus.COMPLETED,
            "summary": "Done.",
            "updated_at": datetime(2026, 1, 2, 8, 0, 0),
        }
    )

    updated = await adventure_store.update_adventure(changed)

    assert updated.title == "Dawn run"
    assert updated.status is AdventureStatus.COMPLETED
    assert updated.summary == "Done."
    assert updated.updated_at == datetime(2026, 1, 2, 8, 0, 0)
    assert updated.participants == [ALICE]
    assert await adventure_store.update_adventure(_adventure(share_token="ADV-aaaaaaaaaaaa")) is None


async def test_list_by_status_filters_membership_and_status(adventure_store):
    first = await adventure_store.create_adventure(_adventure(), [ALICE, BOB])
    second = await adventure_store.create_adventure(_adventure(share_token="ADV-bbbbbbbbbbbb"), [ALICE])
    await adventure_store.update_adventure(second.model_copy(update={"status": AdventureStatus.COMPLETED}))

    assert {a.id for a in await adventure_store.list_by_status(ALICE.id, AdventureStatus.UPCOMING)} == {first.id}
    assert {a.id for a in await adventure_store.list_by_status(ALICE.id, AdventureStatus.COMPLETED)} == {second.id}
    assert [a.id for a in await adventure_store.list_by_status(BOB.id, AdventureStatus.UPCOMING)] == [first.id]
    assert await adventure_store.list_by_status(CAROL.id, AdventureStatus.UPCOMING) == []


async def test_add_participant_is_idempotent(adventure_store):
    created = await adventure_store.create_adventure(_adventure(), [ALICE])

    joined = await adventure_store.add_participant(created.id, BOB)
    again = await adventure_store.add_participant(created.id, BOB)

    assert joined.participants == [ALICE, BOB]
    assert again.participants == [ALICE, BOB]
    assert joined.updated_at > created.updated_at
    assert await adventure_store.list_participants(created.id) == [ALICE, BOB]
    assert await adventure_store.add_participant("missing", BOB) is None
    assert await adventure_store.list_participants("missing") is None


async def test_photos(adventure_store):
    created = await adventure_store.create_adventure(_adventure(), [ALICE])
    assert await adventure_store.list_photos(created.id) == []
    assert await adventure_store.list_photos("missing") is None
    assert await adventure_store.create_photo(_photo("missing")) is None

    photo = await adventure_store.create_photo(_photo(created.id))

    assert await adventure_store.list_photos(created.id) == [photo]
    assert await adventure_store.delete_photo(created.id, "missing") is False
    assert await adventure_store.delete_photo("missing", photo.id) is False
    assert await adventure_store.delete_photo(created.id, photo.id) is True
    assert await adventure_store.list_photos(created.id) == []


async def test_reaction_replaces_previous(adventure_store):
    created = await adventure_store.create_adventure(_adventure(), [ALICE, BOB])

    await adventure_store.add_reaction(_reaction(created.id, ALICE.id, "🔥"))
    await adventure_store.add_reaction(_reaction(created.id, BOB.id, "🎉"))
    latest = await adventure_store.add_reaction(_reaction(created.id, ALICE.id, "❤️"))

    reactions = await adventure_store.list_reactions(created.id)
    assert sorted((r.user_id, r.emoji) for r in reactions) == [("alice", "❤️"), ("bob", "🎉")]
    assert latest.emoji == "❤️"
    assert await adventure_store.add_reaction(_reaction("missing", ALICE.id, "🔥")) is None
    assert await adventure_store.list_reactions("missing") is None


async def test_remove_reaction_matches_emoji(adventure_store):
    created = await adventure_store.create_adventure(_adventure(), [ALICE])
    await adventure_store.add_reaction(_reaction(created.id, ALICE.id, "🔥"))

    assert await adventure_store.remove_reaction(created.id, ALICE.id, "🎉") is False
    assert await adventure_store.remove_reaction(created.id, ALICE.id, "🔥") is True
    assert await adventure_store.remove_reaction(created.id, ALICE.id, "🔥") is False


async def test_sql_participant_names_come_from_users(db_session):
    store = SqlAdventureStore(db_session)
    stale = Participant(id="alice", username="old-name")
    ghost = Participant(id="ghost-0001", username="ghost")

    created = await store.create_adventure(_adventure(), [stale, ghost])

    assert created.participants == [ALICE, Participant(id="ghost-0001", username="user-ghost-")]


async def test_sql_friend_repository(db_session):
    db_session.add_all([
        FriendModel(
            id=generate_id(), user_id="alice", friend_user_id="carol", name="Carol C",
            connected_at=datetime(2026, 1, 2),
        ),
        FriendModel(
            id=generate_id(), user_id="alice", friend_user_id="bob", name="Bob B",
            connected_at=datetime(2026, 1, 1),
        ),
    ])
    await db_session.commit()

    friends = await FriendRepositoryImpl(db_session).list_by_user("alice")

    assert [(f.id, f.name) for f in friends] == [("bob", "Bob B"), ("carol", "Carol C")]
    assert await FriendRepositoryImpl(db_session).list_by_user("bob") == []


async def test_sql_user_repository(db_session):
    users = UserRepositoryImpl(db_session)
    assert (await users.get_by_id("bob")).username == "bob"
    assert await users.get_by_id("nobody") is None

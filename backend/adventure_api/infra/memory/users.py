"""In-process user and friend directories."""
from typing import Optional

from adventure_api.domain.adventure.models import Friend, User
from adventure_api.domain.adventure.repositories import FriendRepository, UserDirectory


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users: Optional[list[User]] = None):
        self._users: dict[str, User] = {u.id: u for u in users or []}

    def add(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)


class InMemoryFriendRepository(FriendRepository):
    """Friend lists keyed by owner id, in insertion order."""

    def __init__(self):
        self._friends: dict[str, list[Friend]] = {}

    def add(self, owner_id: str, friend: User) -> Friend:
        entry = Friend(id=friend.id, user_id=owner_id, name=friend.username, avatar_url=friend.avatar_url)
        self._friends.setdefault(owner_id, []).append(entry)
        return entry

    async def list_by_user(self, user_id: str) -> list[Friend]:
        return list(self._friends.get(user_id, []))

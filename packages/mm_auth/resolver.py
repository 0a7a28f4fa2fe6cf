from abc import ABC, abstractmethod
from typing import Optional

from packages.mm_core.dto import DocumentModel
from packages.mm_core.errors import AuthenticationError
from packages.mm_store.base import DocumentStore

USERS_COLLECTION = "users"


class User(DocumentModel):
    id: str
    name: str = ""
    email: Optional[str] = None


class ICurrentUserResolver(ABC):
    @abstractmethod
    def get_current_user(self) -> Optional[User]:
        """The authenticated user, or None. How the identity is established is not our concern."""
        pass

    def require_user(self) -> User:
        user = self.get_current_user()
        if user is None:
            raise AuthenticationError()
        return user


class StaticUserResolver(ICurrentUserResolver):
    """Always resolves to the given user (CLI runs, tests)."""
    def __init__(self, user: Optional[User]):
        self.user = user

    def get_current_user(self) -> Optional[User]:
        return self.user


class StoreUserResolver(ICurrentUserResolver):
    """
    Resolves an already-verified user id against the `users` collection.
    Unknown ids resolve to None.
    """
    def __init__(self, store: DocumentStore, user_id: Optional[str]):
        self.store = store
        self.user_id = user_id

    def get_current_user(self) -> Optional[User]:
        if not self.user_id:
            return None
        doc = self.store.get(USERS_COLLECTION, self.user_id)
        if doc is None:
            return None
        return User.model_validate(doc)

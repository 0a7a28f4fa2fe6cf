from .resolver import ICurrentUserResolver, StaticUserResolver, StoreUserResolver, User

__all__ = ["ICurrentUserResolver", "StaticUserResolver", "StoreUserResolver", "User"]

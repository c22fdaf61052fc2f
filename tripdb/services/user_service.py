"""
User Service - accounts, credentials and wishlists
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from tripdb.config.settings import AuthSettings
from tripdb.core.security import decode_token, hash_password, issue_token, verify_password
from tripdb.models.base import CreateResult
from tripdb.models.user import User, WishlistItem
from tripdb.services.base import EntityService
from tripdb.store.document_store import DocumentStore

logger = logging.getLogger(__name__)


class UserService(EntityService[User]):
    """Manages user accounts stored in the ``users`` collection"""

    collection = "users"
    model = User
    search_fields = ["firstName", "lastName", "email"]

    def __init__(
        self,
        store: DocumentStore,
        auth: Optional[AuthSettings] = None,
        conflict_retries: int = 3,
    ):
        super().__init__(store, conflict_retries)
        self.auth = auth or AuthSettings()

    async def create(self, data: Union[User, Mapping[str, Any]]) -> User:
        """
        Create a user, hashing the password first

        Args:
            data: User fields; ``password`` is the raw password

        Returns:
            Persisted user (storage form still holds the hash)
        """
        user = self.build(data)
        if user.password:
            user.password = hash_password(user.password, rounds=self.auth.bcrypt_rounds)
        user = await super().create(user)
        logger.info("User created", extra={"collection": self.collection, "document_id": user.id})
        return user

    async def create_checked(self, data: Union[User, Mapping[str, Any]]) -> CreateResult[User]:
        # Validation runs on the raw password, before hashing
        user = self.build(data)
        result = user.validate_fields()
        if not result.is_valid:
            return CreateResult(errors=result.errors)
        return CreateResult(model=await self.create(user))

    async def find_by_email(self, email: str) -> Optional[User]:
        """First user with this email. Uniqueness is a convention the store does not enforce."""
        return await self.find_one_by("email", email)

    def compare_password(self, user: User, candidate: str) -> bool:
        return verify_password(candidate, user.password)

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        user = await self.find_by_email(email)
        if user is None or not self.compare_password(user, password):
            return None
        return user

    async def change_password(self, user: User, new_password: str) -> User:
        return await self.update(
            user, {"password": hash_password(new_password, rounds=self.auth.bcrypt_rounds)}
        )

    def generate_auth_token(self, user: User) -> str:
        claims = {"id": user.id, "email": user.email, "role": user.role}
        return issue_token(
            claims,
            self.auth.jwt_secret,
            expires_in=self.auth.jwt_expires_in,
            algorithm=self.auth.jwt_algorithm,
        )

    def decode_auth_token(self, token: str) -> Optional[Dict[str, Any]]:
        return decode_token(token, self.auth.jwt_secret, algorithm=self.auth.jwt_algorithm)

    async def add_to_wishlist(self, user: User, item_id: str, item_type: str = "trip") -> List[WishlistItem]:
        if user.add_to_wishlist(item_id, item_type):
            await self.save(user)
        return user.wishlist

    async def remove_from_wishlist(self, user: User, item_id: str) -> List[WishlistItem]:
        user.remove_from_wishlist(item_id)
        await self.save(user)
        return user.wishlist

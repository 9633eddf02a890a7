"""User aggregate: a shopper or administrator and their wishlist.

Accounts are keyed by ``user_id``, the subject of the bearer tokens issued
elsewhere. Deactivating a user keeps the record; the user's tokens stop
working until an admin reactivates the account.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String

from storefront.domain import storefront

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserRole(Enum):
    USER = "user"
    ADMIN = "admin"


@storefront.entity(part_of="User")
class WishlistItem:
    product_id: Identifier(required=True)
    added_at: DateTime()


@storefront.aggregate
class User:
    """A person who can sign in to the storefront.

    The wishlist holds product references only. Product details are read from
    the catalogue when the wishlist is displayed, so a deleted or deactivated
    product simply drops out of the listing.
    """

    user_id: String(required=True, max_length=255, unique=True)
    email: String(required=True, max_length=254)
    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    role: String(choices=UserRole, default=UserRole.USER.value)
    is_active: Boolean(default=True)
    wishlist: HasMany(WishlistItem)
    created_at: DateTime()
    updated_at: DateTime()
    deactivated_at: DateTime()

    @invariant.post
    def email_must_be_well_formed(self):
        if self.email and not EMAIL_PATTERN.match(self.email):
            raise ValidationError({"email": ["Please provide a valid email"]})

    @classmethod
    def register(cls, user_id, email, first_name, last_name, role=None):
        from storefront.identity.user.events import UserRegistered

        now = datetime.now(UTC)
        user = cls(
            user_id=str(user_id),
            email=email.strip().lower(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role or UserRole.USER.value,
            created_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=user.user_id,
                email=user.email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def wishlist_product_ids(self) -> list[str]:
        return [str(item.product_id) for item in self.wishlist]

    def update_details(self, email=None, first_name=None, last_name=None, role=None, is_active=None):
        """Overwrite the given attributes; ``None`` leaves a value unchanged."""
        from storefront.identity.user.events import UserDetailsUpdated

        if email is not None:
            self.email = email.strip().lower()
        if first_name is not None:
            self.first_name = first_name.strip()
        if last_name is not None:
            self.last_name = last_name.strip()
        if role is not None:
            self.role = role
        self.updated_at = datetime.now(UTC)

        self.raise_(
            UserDetailsUpdated(
                user_id=self.user_id,
                email=self.email,
                first_name=self.first_name,
                last_name=self.last_name,
                role=self.role,
            )
        )

        if is_active is True:
            self.reactivate()
        elif is_active is False:
            self.deactivate()

    def deactivate(self):
        from storefront.identity.user.events import UserDeactivated

        if not self.is_active:
            return
        now = datetime.now(UTC)
        self.is_active = False
        self.deactivated_at = now
        self.updated_at = now
        self.raise_(UserDeactivated(user_id=self.user_id, deactivated_at=now))

    def reactivate(self):
        from storefront.identity.user.events import UserReactivated

        if self.is_active:
            return
        self.is_active = True
        self.deactivated_at = None
        self.updated_at = datetime.now(UTC)
        self.raise_(UserReactivated(user_id=self.user_id))

    # -------------------------------------------------------------------
    # Wishlist
    # -------------------------------------------------------------------
    def has_in_wishlist(self, product_id) -> bool:
        return str(product_id) in self.wishlist_product_ids

    def add_to_wishlist(self, product_id):
        from storefront.identity.user.events import WishlistItemAdded

        if self.has_in_wishlist(product_id):
            raise ValidationError({"product_id": ["Product already in wishlist"]})

        self.add_wishlist(WishlistItem(product_id=str(product_id), added_at=datetime.now(UTC)))
        self.updated_at = datetime.now(UTC)
        self.raise_(WishlistItemAdded(user_id=self.user_id, product_id=str(product_id)))

    def remove_from_wishlist(self, product_id) -> bool:
        """Drop ``product_id`` from the wishlist; returns False when it was not there."""
        from storefront.identity.user.events import WishlistItemRemoved

        item = next((i for i in self.wishlist if str(i.product_id) == str(product_id)), None)
        if item is None:
            return False

        self.remove_wishlist(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(WishlistItemRemoved(user_id=self.user_id, product_id=str(product_id)))
        return True

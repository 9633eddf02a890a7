"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="User")
class UserRegistered:
    """A user profile was created for a token subject."""

    user_id: String(required=True)
    email: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@storefront.event(part_of="User")
class UserDetailsUpdated:
    user_id: String(required=True)
    email: String(required=True)
    first_name: String(required=True)
    last_name: String(required=True)
    role: String(required=True)


@storefront.event(part_of="User")
class UserDeactivated:
    """The account was switched off; its tokens are refused from now on."""

    user_id: String(required=True)
    deactivated_at: DateTime(required=True)


@storefront.event(part_of="User")
class UserReactivated:
    user_id: String(required=True)


@storefront.event(part_of="User")
class WishlistItemAdded:
    user_id: String(required=True)
    product_id: Identifier(required=True)


@storefront.event(part_of="User")
class WishlistItemRemoved:
    user_id: String(required=True)
    product_id: Identifier(required=True)

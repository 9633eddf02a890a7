"""User account management: profile updates and deactivation."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.user.user import User
from storefront.shared.errors import AccessDenied, DuplicateEntry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="User")
class UpdateUser:
    """Change profile fields. Only admins may change ``role`` or ``is_active``."""

    user_id: String(required=True, max_length=255)
    requested_by: String(required=True, max_length=255)
    is_admin: Boolean(default=False)
    email: String(max_length=254)
    first_name: String(max_length=50)
    last_name: String(max_length=50)
    role: String(max_length=20)
    is_active: Boolean()


@storefront.command(part_of="User")
class DeactivateUser:
    user_id: String(required=True, max_length=255)
    requested_by: String(required=True, max_length=255)


def load_user(user_id) -> User:
    user = current_domain.repository_for(User).for_user(user_id)
    if user is None:
        raise ObjectNotFoundError({"user": ["User not found"]})
    return user


def load_visible_user(user_id, requested_by, is_admin=False) -> User:
    """Load a user the caller may read: their own record, or any record for an admin."""
    if not is_admin and str(user_id) != str(requested_by):
        raise AccessDenied()
    return load_user(user_id)


def _ensure_not_self(user_id, requested_by):
    if str(user_id) == str(requested_by):
        raise ValidationError({"user": ["Cannot delete your own account"]})


@storefront.command_handler(part_of=User)
class UserAccountHandler:
    @handle(UpdateUser)
    def update_user(self, command):
        repo = current_domain.repository_for(User)
        user = load_visible_user(command.user_id, command.requested_by, command.is_admin)

        if command.email is not None:
            existing = repo.find_by_email(command.email)
            if existing is not None and existing.user_id != user.user_id:
                raise DuplicateEntry({"email": ["User already exists with this email"]})

        role, is_active = command.role, command.is_active
        if not command.is_admin and (role is not None or is_active is not None):
            logger.warning("Ignored privileged user fields", user_id=user.user_id, requested_by=command.requested_by)
            role, is_active = None, None
        if is_active is False:
            _ensure_not_self(user.user_id, command.requested_by)

        user.update_details(
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
            role=role,
            is_active=is_active,
        )
        repo.add(user)

    @handle(DeactivateUser)
    def deactivate_user(self, command):
        _ensure_not_self(command.user_id, command.requested_by)

        repo = current_domain.repository_for(User)
        user = load_user(command.user_id)
        user.deactivate()
        repo.add(user)

        logger.info("User deactivated", user_id=user.user_id, deactivated_by=command.requested_by)

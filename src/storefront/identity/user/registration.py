"""User registration: command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.user.user import User
from storefront.shared.errors import DuplicateEntry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    """Create the profile for a token subject; the role comes from the token."""

    user_id: String(required=True, max_length=255)
    email: String(required=True, max_length=254)
    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    role: String(max_length=20)


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        if repo.for_user(command.user_id) is not None:
            raise DuplicateEntry({"user_id": ["User is already registered"]})
        if repo.find_by_email(command.email) is not None:
            raise DuplicateEntry({"email": ["User already exists with this email"]})

        user = User.register(
            user_id=command.user_id,
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
            role=command.role,
        )
        repo.add(user)

        logger.info("User registered", user_id=user.user_id, role=user.role)
        return user.user_id

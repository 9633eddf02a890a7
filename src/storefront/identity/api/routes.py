"""FastAPI endpoints for users and their wishlists.

``me`` may stand in for the caller's own user id in every path.
"""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.auth import AdminUser, CurrentUser
from storefront.identity.api.schemas import RegisterUserRequest, StatusResponse, UpdateUserRequest, UserIdResponse
from storefront.identity.api.serializers import user_detail, user_summary, wishlist_products
from storefront.identity.user.account import DeactivateUser, UpdateUser, load_visible_user
from storefront.identity.user.analytics import summarize_users
from storefront.identity.user.registration import RegisterUser
from storefront.identity.user.user import User
from storefront.identity.user.wishlist import AddToWishlist, RemoveFromWishlist

ME = "me"

user_router = APIRouter(prefix="/users", tags=["users"])


def _resolve(user_id: str, caller) -> str:
    return caller.user_id if user_id == ME else user_id


@user_router.get("")
async def list_users(
    admin: AdminUser,
    search: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> dict:
    result = current_domain.repository_for(User).listing(
        search=search,
        role=role,
        is_active=is_active,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {
        "users": [user_summary(user) for user in result.items],
        "pagination": result.metadata("users"),
    }


@user_router.get("/analytics/summary")
async def analytics_summary(admin: AdminUser) -> dict:
    return summarize_users().to_dict()


@user_router.post("", status_code=201, response_model=UserIdResponse)
async def register_user(body: RegisterUserRequest, user: CurrentUser) -> UserIdResponse:
    """Create the caller's profile. The role is taken from the token."""
    command = RegisterUser(
        user_id=user.user_id,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        role=user.role,
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@user_router.get("/{user_id}")
async def get_user(user_id: str, user: CurrentUser) -> dict:
    record = load_visible_user(_resolve(user_id, user), user.user_id, user.is_admin)
    return {"user": user_detail(record)}


@user_router.put("/{user_id}")
async def update_user(user_id: str, body: UpdateUserRequest, user: CurrentUser) -> dict:
    target = _resolve(user_id, user)
    command = UpdateUser(
        user_id=target,
        requested_by=user.user_id,
        is_admin=user.is_admin,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    record = current_domain.repository_for(User).for_user(target)
    return {"message": "User updated successfully", "user": user_detail(record)}


@user_router.delete("/{user_id}", response_model=StatusResponse)
async def deactivate_user(user_id: str, admin: AdminUser) -> StatusResponse:
    command = DeactivateUser(user_id=_resolve(user_id, admin), requested_by=admin.user_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deactivated")


@user_router.get("/{user_id}/wishlist")
async def get_wishlist(user_id: str, user: CurrentUser) -> dict:
    """Wishlisted products that are still on sale."""
    record = load_visible_user(_resolve(user_id, user), user.user_id, user.is_admin)
    return {"wishlist": wishlist_products(record.wishlist_product_ids, active_only=True)}


@user_router.post("/{user_id}/wishlist/{product_id}")
async def add_to_wishlist(user_id: str, product_id: str, user: CurrentUser) -> dict:
    command = AddToWishlist(user_id=_resolve(user_id, user), requested_by=user.user_id, product_id=product_id)
    product_ids = current_domain.process(command, asynchronous=False)
    return {"message": "Product added to wishlist", "wishlist": wishlist_products(product_ids)}


@user_router.delete("/{user_id}/wishlist/{product_id}")
async def remove_from_wishlist(user_id: str, product_id: str, user: CurrentUser) -> dict:
    command = RemoveFromWishlist(user_id=_resolve(user_id, user), requested_by=user.user_id, product_id=product_id)
    product_ids = current_domain.process(command, asynchronous=False)
    return {"message": "Product removed from wishlist", "wishlist": wishlist_products(product_ids)}

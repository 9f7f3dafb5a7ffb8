# This project was developed with assistance from AI tools.
"""Admin proxy routes: identity operations that need the service-role key.

Both endpoints answer with ``{success: true, ...}`` or HTTP 400 with
``{error, details}``. Callers must be signed in with an admin profile.
"""

import logging
from typing import Annotated

from db.enums import UserRole
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..middleware.auth import require_roles
from ..schemas.admin import (
    DeleteUserRequest,
    DeleteUserResponse,
    SetUserRoleRequest,
    SetUserRoleResponse,
)
from ..schemas.auth import UserContext
from ..schemas.error import ProxyErrorResponse
from ..services.users import InvalidRoleError, UserAdminService, get_user_admin_service
from ..supabase import SupabaseError

logger = logging.getLogger(__name__)

router = APIRouter()

AdminUser = Annotated[UserContext, Depends(require_roles(UserRole.ADMIN))]
UserAdmin = Annotated[UserAdminService, Depends(get_user_admin_service)]

_ERROR_RESPONSES = {400: {"model": ProxyErrorResponse}}


def _error(message: str, details: object = None) -> JSONResponse:
    body = ProxyErrorResponse(error=message, details=details)
    return JSONResponse(status_code=400, content=body.model_dump())


@router.post("/delete-user", response_model=DeleteUserResponse, responses=_ERROR_RESPONSES)
async def delete_user(
    admin: AdminUser,
    service: UserAdmin,
    body: DeleteUserRequest | None = None,
):
    """Delete a user's profile (cascading to role data) and their auth identity."""
    user_id = body.userId if body else None
    if not user_id:
        return _error("User ID required")
    if user_id == admin.user_id:
        return _error("Admins cannot delete their own account")

    try:
        await service.delete_user(user_id)
    except SupabaseError as exc:
        logger.warning("delete-user %s by %s failed: %s", user_id, admin.user_id, exc.message)
        return _error(exc.message, exc.to_dict())

    logger.info("Admin %s deleted user %s", admin.user_id, user_id)
    return DeleteUserResponse()


@router.post("/set-user-role", response_model=SetUserRoleResponse, responses=_ERROR_RESPONSES)
async def set_user_role(
    admin: AdminUser,
    service: UserAdmin,
    body: SetUserRoleRequest | None = None,
):
    """Write the role into the identity's user metadata."""
    if body is None or not body.userId or not body.role:
        return _error("Missing userId or role")

    try:
        data = await service.set_user_role(body.userId, body.role)
    except InvalidRoleError as exc:
        return _error(str(exc))
    except SupabaseError as exc:
        logger.warning("set-user-role %s by %s failed: %s", body.userId, admin.user_id, exc.message)
        return _error(exc.message, exc.to_dict())

    return SetUserRoleResponse(data=data)

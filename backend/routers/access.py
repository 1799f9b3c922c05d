from fastapi import APIRouter, Depends

from schemas.access import RolePermissions, RouteAccess
from utils.auth_utils import get_current_user
from utils.rbac import PermissionMatrix, get_permission_matrix

router = APIRouter(prefix="/access", tags=["Access Control"])

@router.get("/permissions", response_model=RolePermissions)
def read_my_permissions(
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix)
):
    """Role and permission list of the calling user, for the frontend to gate its UI."""
    return RolePermissions(
        role=user["role"],
        permissions=sorted(matrix.get_user_permissions(user["role"])),
    )

@router.get("/routes", response_model=RouteAccess)
def check_route_access(
    route: str,
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix)
):
    return RouteAccess(
        role=user["role"],
        route=route,
        declared=matrix.find_route(route) is not None,
        allowed=matrix.can_access_route(user["role"], route),
    )

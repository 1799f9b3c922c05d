from pydantic import BaseModel
from typing import List

class RolePermissions(BaseModel):
    role: str
    permissions: List[str]

class RouteAccess(BaseModel):
    role: str
    route: str
    declared: bool
    allowed: bool

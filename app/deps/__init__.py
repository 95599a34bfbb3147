"""FastAPI dependencies shared by the routers.

``require_user`` turns a bearer token into a ``User``; routers declare it either
per endpoint or on the whole ``APIRouter``.
"""

from .auth import require_user

__all__ = ["require_user"]

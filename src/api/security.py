"""Bearer-token authentication dependency."""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.dependencies import get_token_service, get_user_repo
from domain.model.errors import AuthenticationError
from domain.model.user import User
from port.user_repository import UserRepository
from services import auth_service
from services.token_service import TokenService

security = HTTPBearer(auto_error=False)


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_repo: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Get current authenticated user (required). Raises 401 if not authenticated."""
    if not credentials:
        raise AuthenticationError("Not authenticated")
    return auth_service.resolve_user(user_repo, tokens, credentials.credentials)

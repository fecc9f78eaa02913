"""
Security utilities and authentication
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings
from app.utils.exceptions import AppException, ErrorCode

security = HTTPBearer(auto_error=False)

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Verify admin authentication token"""
    if credentials is None or credentials.credentials != settings.ADMIN_TOKEN:
        raise AppException(
            status_code=401,
            message="Invalid admin token",
            error_code=ErrorCode.UNAUTHORIZED,
        )
    return credentials.credentials

# Security module
from app.security.auth import (
    get_password_hash, verify_password, create_access_token,
    get_current_user, require_admin, require_approved_owner, require_approved_owner_or_admin,
    ensure_owner_or_admin
)

__all__ = [
    'get_password_hash', 'verify_password', 'create_access_token',
    'get_current_user', 'require_admin', 'require_approved_owner', 'require_approved_owner_or_admin',
    'ensure_owner_or_admin'
]

"""
Authentication & Authorization

Session handling for the reports API. The login flow issues an HTTP-only
cookie carrying an HS256-signed JWT; this module verifies that cookie,
exposes the caller as a SessionUser, and provides FastAPI dependencies that
enforce authentication (401) and role membership (403).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Iterable
from dataclasses import dataclass

import jwt
from fastapi import Request, Depends

from .config import config
from .errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """Caller identity decoded from the session token"""
    username: str
    name: str
    employee_number: Optional[int]
    role: str
    shift: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionUser":
        """Build a user from a decoded token payload"""
        raw_number = payload.get('employeeNumber', payload.get('employee_number'))
        try:
            employee_number = int(raw_number) if raw_number is not None else None
        except (TypeError, ValueError):
            employee_number = None

        return cls(
            username=str(payload.get('username') or ''),
            name=str(payload.get('name') or payload.get('displayName') or ''),
            employee_number=employee_number,
            role=str(payload.get('role') or '').strip().upper(),
            shift=payload.get('shift'),
            department=payload.get('department'),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Token claims for this user"""
        return {
            'username': self.username,
            'name': self.name,
            'employeeNumber': self.employee_number,
            'role': self.role,
            'shift': self.shift,
            'department': self.department,
        }

    def has_role(self, roles: Iterable[str]) -> bool:
        """Check membership in a role set (case-insensitive)"""
        return self.role in {str(r).upper() for r in roles}

    def is_admin(self) -> bool:
        """Admins may read entries belonging to other employees"""
        return self.has_role(config.auth.admin_roles)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            'username': self.username,
            'displayName': self.name,
            'employeeNumber': self.employee_number,
            'role': self.role,
        }


# ============================================================================
# Token handling
# ============================================================================

def issue_session_token(user: SessionUser, ttl_hours: Optional[int] = None) -> str:
    """Sign a session token for the given user"""
    ttl = ttl_hours if ttl_hours is not None else config.auth.token_ttl_hours
    payload = user.to_payload()
    payload['exp'] = datetime.now(timezone.utc) + timedelta(hours=ttl)
    return jwt.encode(payload, config.auth.jwt_secret, algorithm=config.auth.jwt_algorithm)


def verify_session_token(token: str) -> Optional[SessionUser]:
    """Decode and verify a session token; None when missing, expired or tampered"""
    if not token:
        return None
    try:
        payload = jwt.decode(token, config.auth.jwt_secret, algorithms=[config.auth.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Session token rejected: {e}")
        return None
    return SessionUser.from_payload(payload)


# ============================================================================
# FastAPI Dependencies for Route Protection
# ============================================================================

def get_current_user(request: Request) -> Optional[SessionUser]:
    """Get current user without requiring authentication"""
    token = request.cookies.get(config.auth.cookie_name)
    return verify_session_token(token) if token else None


def require_auth(request: Request) -> SessionUser:
    """
    FastAPI dependency to require a valid session cookie

    Usage:
        @router.get("/api/me")
        def me(user: SessionUser = Depends(require_auth)):
            return user.to_dict()
    """
    user = get_current_user(request)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user


def require_roles(roles: Optional[Iterable[str]] = None):
    """
    FastAPI dependency to require membership in a role set

    When roles is None the configured report roles are used, read at request
    time so configuration reloads apply.

    Usage:
        @router.get("/api/admin/laser-production-all")
        def report(user: SessionUser = Depends(require_roles())):
            ...
    """
    fixed_roles = list(roles) if roles is not None else None

    def dependency(user: SessionUser = Depends(require_auth)) -> SessionUser:
        allowed = fixed_roles if fixed_roles is not None else config.auth.report_roles
        if not user.has_role(allowed):
            logger.warning(f"Role '{user.role}' denied for user '{user.username}'")
            raise AuthorizationError("Forbidden")
        return user

    return dependency

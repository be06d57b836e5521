"""
Authentication Audit Logging

Records logins, logouts and token refreshes in the audit_logs table.
"""
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from ..database.models import AuditLog
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class AuditEventType:
    """Standard audit event types"""
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILURE = "login_failure"
    LOGOUT = "logout"
    TOKEN_REFRESH_SUCCESS = "token_refresh_success"
    TOKEN_REFRESH_FAILURE = "token_refresh_failure"


def log_auth_event(
    db: Session,
    event_type: str,
    user_id: Optional[str] = None,
    success: bool = True,
    error_message: Optional[str] = None,
    request: Optional[Request] = None,
    **extra_data
) -> Optional[AuditLog]:
    """
    Log an authentication event

    Audit failures are logged and swallowed; they never break the request
    that triggered them.

    Example:
        log_auth_event(db, AuditEventType.LOGIN_SUCCESS, user_id="1089...", request=request)
    """
    ip_address = None
    user_agent = None

    if request is not None:
        ip_address = request.client.host if request.client else None
        user_agent = request.headers.get('user-agent')

    audit_log = AuditLog(
        user_id=user_id,
        event_type=event_type,
        event_data=extra_data or None,
        ip_address=ip_address,
        user_agent=user_agent[:500] if user_agent else None,
        success=success,
        error_message=error_message
    )

    try:
        db.add(audit_log)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to write audit log {event_type}: {e}")
        return None

    log = logger.info if success else logger.warning
    log(f"[AUDIT] {event_type}", user_id=user_id, success=success)
    return audit_log

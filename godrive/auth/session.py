"""
Web Sessions

Browser sessions keyed by a random token kept in a cookie. Only the SHA-256
hash of the token is stored; the session carries the logged-in Google
user id (the servlet session attribute "user_id").
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..database.models import WebSession
from ..utils import generate_session_token, hash_token
from ..utils.config import ConfigDefaults
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


def create_session(
    db: Session,
    days: int = ConfigDefaults.SESSION_TTL_DAYS,
    user_id: Optional[str] = None
) -> Tuple[str, WebSession]:
    """
    Create a session, anonymous unless user_id is given

    Expired sessions are purged first.

    Returns:
        (raw_token, session) tuple; raw_token is the only copy of the token
    """
    cleanup_expired_sessions(db)
    raw_token, hashed_token = generate_session_token()

    web_session = WebSession(
        session_token=hashed_token,
        user_id=user_id,
        expires_at=datetime.utcnow() + timedelta(days=days)
    )
    db.add(web_session)
    db.commit()
    db.refresh(web_session)

    logger.debug(f"Session created: {raw_token[:8]}...")
    return raw_token, web_session


def get_session(db: Session, raw_token: Optional[str]) -> Optional[WebSession]:
    """
    Look up a session by its raw token

    Expired sessions are deleted and reported as missing.
    """
    if not raw_token:
        return None

    web_session = db.query(WebSession).filter(
        WebSession.session_token == hash_token(raw_token)
    ).first()
    if web_session is None:
        return None

    if web_session.is_expired():
        db.delete(web_session)
        db.commit()
        return None

    return web_session


def set_session_user(db: Session, web_session: WebSession, user_id: Optional[str]) -> WebSession:
    """
    Set (or clear, with None) the logged-in user of a session

    web_session may come from another database session (the middleware's);
    the returned instance belongs to db.
    """
    web_session = db.merge(web_session)
    web_session.user_id = user_id
    db.commit()
    return web_session


def delete_session(db: Session, raw_token: str) -> bool:
    """Delete a session by its raw token"""
    deleted = db.query(WebSession).filter(
        WebSession.session_token == hash_token(raw_token)
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions, returning how many were removed"""
    deleted = db.query(WebSession).filter(
        WebSession.expires_at < datetime.utcnow()
    ).delete(synchronize_session=False)
    db.commit()
    if deleted:
        logger.info(f"Cleaned up {deleted} expired sessions")
    return deleted

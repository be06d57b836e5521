"""
SQLAlchemy models for users, stored OAuth credentials and web sessions
"""
from datetime import datetime, timedelta
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class User(Base):
    """Google account that has authorized the application"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    google_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), index=True)
    name = Column(String(255))
    picture_url = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login_at = Column(DateTime)

    credential = relationship(
        "StoredCredential",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User(id={self.id}, google_id='{self.google_id}')>"


class StoredCredential(Base):
    """
    OAuth2 credential of one Google user

    access_token and refresh_token hold Fernet ciphertext, never raw tokens.
    """
    __tablename__ = 'stored_credentials'

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey('users.google_id'), unique=True, nullable=False, index=True)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text)
    token_expiry = Column(DateTime)  # naive UTC, as google-auth expects
    scopes = Column(Text)  # space separated
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="credential")

    def scope_list(self):
        return self.scopes.split() if self.scopes else []

    def __repr__(self):
        return f"<StoredCredential(id={self.id}, user_id='{self.user_id}')>"


class OAuthState(Base):
    """
    OAuth state tracking for CSRF protection

    A state is bound to the browser session that started the login;
    session_token holds the hash of that session's token. The state also
    remembers the Drive file the user was trying to open so the callback can
    send them back to it.
    """
    __tablename__ = 'oauth_states'

    id = Column(Integer, primary_key=True, index=True)
    state = Column(String(64), unique=True, index=True, nullable=False)
    session_token = Column(String(64), nullable=False)
    file_id = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    used = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index('idx_oauth_state_lookup', 'state', 'used', 'expires_at'),
    )

    def __repr__(self):
        return f"<OAuthState(id={self.id}, used={self.used})>"


class WebSession(Base):
    """
    Browser session

    session_token is stored as a SHA-256 hash (64 chars); the raw token
    only ever lives in the client's cookie.
    """
    __tablename__ = 'web_sessions'

    id = Column(Integer, primary_key=True, index=True)
    session_token = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(String(255))  # Google user id once logged in
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, default=lambda: datetime.utcnow() + timedelta(days=7), index=True)

    def is_expired(self) -> bool:
        """Check if session is expired"""
        return datetime.utcnow() > self.expires_at

    def __repr__(self):
        return f"<WebSession(id={self.id}, user_id={self.user_id})>"


class AuditLog(Base):
    """Authentication and credential events"""
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=True, index=True)
    event_type = Column(String(50), nullable=False, index=True)
    event_data = Column(JSON)
    ip_address = Column(String(45))  # IPv4/IPv6
    user_agent = Column(String(500))
    success = Column(Boolean, default=True)
    error_message = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_audit_user_event_time', 'user_id', 'event_type', 'created_at'),
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, event_type='{self.event_type}', user_id={self.user_id})>"

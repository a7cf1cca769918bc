from datetime import datetime, timezone

from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from pickem import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile information
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    avatar_url = db.Column(db.String(500))

    # Account status
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_admin = db.Column(db.Boolean, default=False)  # Site-wide admin privileges

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_login = db.Column(db.DateTime)

    # Relationships
    picks = db.relationship(
        "Pick", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    league_memberships = db.relationship(
        "LeagueMember", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    commissioned_leagues = db.relationship(
        "League", backref="commissioner", lazy="dynamic"
    )

    __table_args__ = (db.Index("idx_user_active_status", "is_active"),)

    def __repr__(self):
        return f"<User {self.username}>"

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    @staticmethod
    def _token_serializer():
        return URLSafeTimedSerializer(
            current_app.config["SECRET_KEY"],
            salt=current_app.config.get("AUTH_TOKEN_SALT", "league-pickem-auth"),
        )

    def generate_auth_token(self):
        """Issue a signed bearer token for API access"""
        return self._token_serializer().dumps(
            {"user_id": self.id, "email": self.email}
        )

    @staticmethod
    def verify_auth_token(token):
        """Return the active user a token was issued to, or None"""
        try:
            payload = User._token_serializer().loads(
                token, max_age=current_app.config.get("AUTH_TOKEN_MAX_AGE")
            )
        except (SignatureExpired, BadSignature):
            return None

        user = db.session.get(User, payload.get("user_id"))
        if user is None or not user.is_active:
            return None
        return user

    @property
    def full_name(self):
        """Return first and last name, falling back to username"""
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.username

    def update_last_login(self):
        self.last_login = datetime.now(timezone.utc)

    def deactivate(self):
        """Soft-delete the account; users are never physically removed"""
        self.is_active = False

    def get_leagues(self):
        """Get all leagues this user participates in"""
        from .league import League
        from .league_member import LeagueMember

        return (
            League.query.join(LeagueMember, LeagueMember.league_id == League.id)
            .filter(LeagueMember.user_id == self.id)
            .order_by(League.created_at.desc())
            .all()
        )

    def to_summary_dict(self):
        """Display info embedded in standings rows and league payloads"""
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "avatar_url": self.avatar_url,
        }

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        data = self.to_summary_dict()
        data.update(
            {
                "email": self.email,
                "display_name": self.full_name,
                "is_active": self.is_active,
                "created_at": self.created_at.isoformat() if self.created_at else None,
            }
        )
        return data

# Overview: Service-layer operations for auth; password hashing, login and user creation.

"""
Authentication Service

Uses bcrypt for password hashing and validates password strength.

SCOPE ON CREATE:
- owner, backoffice: no retailer or location
- retailer: retailer_id required, no location
- location_user: location_id required; retailer_id is taken from the location

SECURITY NOTES:
- Passwords hashed with bcrypt (rounds from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, with uppercase, lowercase, digit and special char
- Session tokens managed separately (see session_service.py)
"""

import logging
import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User, Retailer, Location
from ..permissions import Role
from ..time_utils import utcnow

logger = logging.getLogger(__name__)


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class UserError(Exception):
    """Raised when a user cannot be created with the given role and scope."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def _bcrypt_rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _resolve_scope(role: Role, retailer_id: str | None, location_id: str | None) -> tuple[str | None, str | None]:
    if role in (Role.OWNER, Role.BACKOFFICE):
        if retailer_id or location_id:
            raise UserError(f"Role {role.value} cannot be bound to a retailer or location")
        return None, None

    if role is Role.RETAILER:
        if not retailer_id:
            raise UserError("retailer_id is required for retailer users")
        if location_id:
            raise UserError("Retailer users cannot be bound to a single location")
        if not db.session.get(Retailer, retailer_id):
            raise UserError("Retailer not found")
        return retailer_id, None

    # location_user
    if not location_id:
        raise UserError("location_id is required for location users")
    location = db.session.get(Location, location_id)
    if not location:
        raise UserError("Location not found")
    if retailer_id and retailer_id != location.retailer_id:
        raise UserError("Location does not belong to this retailer")
    return location.retailer_id, location.id


def create_user(
    email: str,
    password: str,
    role: str,
    *,
    name: str | None = None,
    retailer_id: str | None = None,
    location_id: str | None = None,
) -> User:
    """
    Create a user with a bcrypt password hash.

    Raises:
        UserError: unknown role, bad scope for the role, or duplicate email
        PasswordValidationError: password doesn't meet requirements
    """
    try:
        resolved_role = Role(role)
    except ValueError:
        raise UserError(f"Unknown role: {role}")

    email = (email or "").strip().lower()
    if not email:
        raise UserError("Email is required")

    if db.session.query(User).filter_by(email=email).first():
        raise UserError("Email already exists")

    retailer_id, location_id = _resolve_scope(resolved_role, retailer_id, location_id)

    user = User(
        email=email,
        name=name,
        role=resolved_role.value,
        retailer_id=retailer_id,
        location_id=location_id,
        password_hash=hash_password(password),
    )

    db.session.add(user)
    db.session.commit()
    logger.info("Created %s user %s", user.role, user.email)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate by email and password.

    Returns the User and stamps last_login_at on success, None otherwise.
    """
    user = db.session.query(User).filter(
        User.email == (email or "").strip().lower(),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None

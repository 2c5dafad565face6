# deepreview/service/auth_service.py

"""
Auth Service - sign-up / sign-in / sign-out and account management

Passwords are stored as salted PBKDF2-SHA256; sign-in issues an opaque
bearer token kept in the auth_tokens table.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import secrets
from typing import Optional, Tuple

from deepreview.config import Config
from deepreview.database.user_repository import UserRepository
from deepreview.model.user import User
from deepreview.service.captcha_service import verify_captcha

logger = logging.getLogger(__name__)

_PBKDF2_DIGEST = "sha256"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_FULL_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")

INSTRUCTOR_HOME = "/dashboard/instructor"
STUDENT_HOME = "/dashboard/student/mylibrary"


class AuthError(Exception):
    """User-facing auth failure (message is safe to return)."""


# =========================================================
# Password hashing
# =========================================================

def _pbkdf2_hash(password: str, salt_hex: str, iterations: Optional[int] = None) -> str:
    try:
        salt_bytes = bytes.fromhex(salt_hex)
    except ValueError:
        raise ValueError("Invalid salt for password hashing") from None
    return hashlib.pbkdf2_hmac(
        _PBKDF2_DIGEST,
        password.encode("utf-8"),
        salt_bytes,
        iterations or Config.auth.pbkdf2_iterations,
    ).hex()


def hash_password(password: str) -> Tuple[str, str]:
    salt_hex = secrets.token_bytes(16).hex()
    return _pbkdf2_hash(password, salt_hex), salt_hex


def verify_password(password: str, stored_hash: str, stored_salt: str) -> bool:
    try:
        derived = _pbkdf2_hash(password, stored_salt)
    except ValueError:
        return False
    return hmac.compare_digest(stored_hash or "", derived)


# =========================================================
# Validation (first failing rule wins)
# =========================================================

def validate_email(email: Optional[str]) -> str:
    email = (email or "").strip().lower()
    if not email:
        raise AuthError("Email is required")
    if not _EMAIL_RE.match(email):
        raise AuthError("Invalid email format")
    return email


def validate_password(password: Optional[str]) -> str:
    password = password or ""
    if len(password) < 8:
        raise AuthError("Password must be at least 8 characters")
    if not re.search(r"[a-z]", password):
        raise AuthError("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise AuthError("Password must contain at least one uppercase letter")
    if not re.search(r"[0-9]", password):
        raise AuthError("Password must contain at least one number")
    if not re.search(r"[^A-Za-z0-9]", password):
        raise AuthError("Password must contain at least one special character")
    return password


def validate_full_name(full_name: Optional[str]) -> str:
    full_name = (full_name or "").strip()
    if len(full_name) < 2:
        raise AuthError("Name must be at least 2 characters")
    if len(full_name) > 100:
        raise AuthError("Name is too long")
    if not _FULL_NAME_RE.match(full_name):
        raise AuthError("Name can only contain letters and spaces")
    return full_name


def home_for(user: User) -> str:
    return INSTRUCTOR_HOME if user.is_instructor else STUDENT_HOME


# =========================================================
# Service
# =========================================================

class AuthService:

    def __init__(self, repo: Optional[UserRepository] = None):
        self.repo = repo or UserRepository()

    def sign_up(
        self,
        email: str,
        password: str,
        confirm_password: str,
        full_name: str,
        captcha_token: str = "",
        captcha_answer: str = "",
    ) -> User:
        """Register a student account."""
        if Config.captcha.enabled and not verify_captcha(captcha_token, captcha_answer):
            raise AuthError("CAPTCHA verification failed. Please try again.")

        email = validate_email(email)
        password = validate_password(password)
        if not confirm_password:
            raise AuthError("Please confirm your password")
        full_name = validate_full_name(full_name)
        if password != confirm_password:
            raise AuthError("Passwords don't match")

        if self.repo.email_exists(email):
            raise AuthError("User already registered")

        pw_hash, pw_salt = hash_password(password)
        user = self.repo.create_user(email, full_name, "student", pw_hash, pw_salt)
        logger.info(f"👤 New student registered: {user.id}")
        return user

    def create_instructor(self, email: str, password: str, full_name: str) -> User:
        email = validate_email(email)
        password = validate_password(password)
        full_name = validate_full_name(full_name)
        if self.repo.email_exists(email):
            raise AuthError("User already registered")
        pw_hash, pw_salt = hash_password(password)
        return self.repo.create_user(email, full_name, "instructor", pw_hash, pw_salt)

    def sign_in(self, email: str, password: str) -> Tuple[str, User, str]:
        """
        Returns:
            (token, user, redirect path for the user's role)
        """
        email = validate_email(email)
        if not password:
            raise AuthError("Password is required")

        creds = self.repo.get_credentials(email)
        if not creds or not verify_password(password, creds[1], creds[2]):
            raise AuthError("Invalid login credentials")

        user = creds[0]
        token = self.repo.create_token(user.id, Config.auth.token_ttl_hours)
        return token, user, home_for(user)

    def sign_out(self, token: str) -> bool:
        return self.repo.revoke_token(token)

    def get_current_user(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        return self.repo.get_user_by_token(token)

    # =====================================================
    # Account management
    # =====================================================

    def update_profile(self, user: User, full_name: str) -> User:
        full_name = validate_full_name(full_name)
        updated = self.repo.update_full_name(user.id, full_name)
        if not updated:
            raise AuthError("User not found")
        return updated

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        creds = self.repo.get_credentials_by_id(user.id)
        if not creds or not verify_password(current_password or "", creds[0], creds[1]):
            raise AuthError("Current password is incorrect")
        new_password = validate_password(new_password)
        pw_hash, pw_salt = hash_password(new_password)
        self.repo.update_password(user.id, pw_hash, pw_salt)

    def delete_account(self, user: User) -> bool:
        return self.repo.delete_user(user.id)

# deepreview/database/user_repository.py

"""
User Repository - users and bearer tokens

- create / look up / update / delete users
- issue, resolve and revoke sign-in tokens
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select, desc

from deepreview.model.user import User
from deepreview.database.db.session import SessionLocal
from deepreview.database.db.models import UserRow, AuthTokenRow


class UserRepository:

    # =====================================================
    # Users
    # =====================================================

    def create_user(
        self,
        email: str,
        full_name: str,
        role: str,
        password_hash: str,
        password_salt: str,
    ) -> User:
        with SessionLocal() as db:
            row = UserRow(
                id=str(uuid.uuid4()),
                email=email.lower(),
                full_name=full_name,
                role=role,
                password_hash=password_hash,
                password_salt=password_salt,
                created_at=datetime.utcnow(),
            )
            db.add(row)
            db.commit()
            return self._row_to_user(row)

    def get_user(self, user_id: str) -> Optional[User]:
        with SessionLocal() as db:
            row = db.get(UserRow, user_id)
            return self._row_to_user(row) if row else None

    def email_exists(self, email: str) -> bool:
        with SessionLocal() as db:
            found = db.execute(
                select(UserRow.id).where(UserRow.email == email.lower())
            ).first()
            return found is not None

    def get_credentials(self, email: str) -> Optional[Tuple[User, str, str]]:
        """Return (user, password_hash, password_salt) for sign-in checks."""
        with SessionLocal() as db:
            row = db.execute(
                select(UserRow).where(UserRow.email == email.lower())
            ).scalar_one_or_none()
            if not row:
                return None
            return self._row_to_user(row), row.password_hash, row.password_salt

    def get_credentials_by_id(self, user_id: str) -> Optional[Tuple[str, str]]:
        with SessionLocal() as db:
            row = db.get(UserRow, user_id)
            if not row:
                return None
            return row.password_hash, row.password_salt

    def list_by_role(self, role: str) -> List[User]:
        with SessionLocal() as db:
            rows = db.execute(
                select(UserRow)
                .where(UserRow.role == role)
                .order_by(desc(UserRow.created_at))
            ).scalars().all()
            return [self._row_to_user(r) for r in rows]

    def update_full_name(self, user_id: str, full_name: str) -> Optional[User]:
        with SessionLocal() as db:
            row = db.get(UserRow, user_id)
            if not row:
                return None
            row.full_name = full_name
            db.commit()
            return self._row_to_user(row)

    def update_password(self, user_id: str, password_hash: str, password_salt: str) -> bool:
        with SessionLocal() as db:
            row = db.get(UserRow, user_id)
            if not row:
                return False
            row.password_hash = password_hash
            row.password_salt = password_salt
            db.commit()
            return True

    def delete_user(self, user_id: str) -> bool:
        """Delete a user (cascades to articles, chats, sessions, progress, tokens)."""
        with SessionLocal() as db:
            row = db.get(UserRow, user_id)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True

    # =====================================================
    # Tokens
    # =====================================================

    def create_token(self, user_id: str, ttl_hours: int) -> str:
        token = secrets.token_urlsafe(32)
        now = datetime.utcnow()
        with SessionLocal() as db:
            db.add(
                AuthTokenRow(
                    token=token,
                    user_id=user_id,
                    created_at=now,
                    expires_at=now + timedelta(hours=ttl_hours),
                )
            )
            db.commit()
        return token

    def get_user_by_token(self, token: str) -> Optional[User]:
        with SessionLocal() as db:
            row = db.get(AuthTokenRow, token)
            if not row:
                return None
            if row.expires_at < datetime.utcnow():
                db.delete(row)
                db.commit()
                return None
            user_row = db.get(UserRow, row.user_id)
            return self._row_to_user(user_row) if user_row else None

    def revoke_token(self, token: str) -> bool:
        with SessionLocal() as db:
            row = db.get(AuthTokenRow, token)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True

    # =====================================================
    # Helper Methods
    # =====================================================

    def _row_to_user(self, row: UserRow) -> User:
        return User(
            id=row.id,
            email=row.email,
            full_name=row.full_name,
            role=row.role,
            created_at=row.created_at,
        )

# commission_hub/auth.py
"""
Authentication Manager for Streamlit Apps

Version: 1.0.0
Features:
- SHA256 password hashing with per-user salt
- Role-based access control (admin / consultor)
- Session management with timeout
- Bootstrap admin account on first run
"""

import streamlit as st
import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple, List
import logging

from .config import config
from .sales_commission.constants import ROLE_ADMIN
from .sales_commission.repository import SalesRepository

logger = logging.getLogger(__name__)

SESSION_KEYS = [
    'authenticated', 'user_id', 'username', 'user_role',
    'user_fullname', 'login_time', 'debug_mode',
]


class AuthManager:
    """Authentication manager for Streamlit apps"""

    def __init__(self, repository: SalesRepository = None):
        self.repository = repository or SalesRepository()
        self.session_timeout = timedelta(
            hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 12)
        )

    # ==================== PASSWORD HASHING ====================

    def hash_password(self, password: str, salt: str = None) -> Tuple[str, str]:
        """
        Hash password with SHA256 + salt

        Args:
            password: Plain text password
            salt: Optional salt (generated if not provided)

        Returns:
            Tuple of (hash, salt)
        """
        if not salt:
            salt = secrets.token_hex(32)

        pwd_hash = hashlib.sha256((password + salt).encode()).hexdigest()
        return pwd_hash, salt

    def verify_password(self, password: str, stored_hash: str, salt: str) -> bool:
        pwd_hash, _ = self.hash_password(password, salt)
        return secrets.compare_digest(pwd_hash, stored_hash)

    # ==================== USERS ====================

    def create_user(self, username: str, password: str, display_name: str, role: str) -> Dict:
        """Create a login account; returns the stored user (without password)."""
        pwd_hash, salt = self.hash_password(password)
        user = {
            'id': uuid.uuid4().hex,
            'username': username.strip(),
            'password_hash': pwd_hash,
            'password_salt': salt,
            'display_name': display_name.strip() or username.strip(),
            'role': role,
            'is_active': 1,
            'created_at': datetime.now(timezone.utc).isoformat(),
        }
        self.repository.create_user(user)
        return {k: v for k, v in user.items() if k not in ('password_hash', 'password_salt')}

    def seed_users_if_needed(self, admin_password: str = None) -> Optional[str]:
        """
        Create the `admin` account when no user exists yet.

        Returns:
            The admin password used when an account was created, else None
        """
        if self.repository.count_users() > 0:
            return None

        password = admin_password or config.get_app_setting("ADMIN_PASSWORD") or secrets.token_urlsafe(12)
        self.create_user("admin", password, "Administrador", ROLE_ADMIN)

        if not admin_password and not config.get_app_setting("ADMIN_PASSWORD"):
            logger.warning(f"⚠️ Seeded 'admin' with generated password: {password}")
        else:
            logger.info("Seeded 'admin' account")
        return password

    # ==================== AUTHENTICATION ====================

    def authenticate(self, username: str, password: str) -> Tuple[bool, Optional[Dict]]:
        """
        Authenticate user against database

        Returns:
            Tuple of (success: bool, user_info: dict or error: dict)
        """
        try:
            user = self.repository.find_user_by_username(username.strip())

            if not user:
                logger.warning(f"Login attempt for non-existent user: {username}")
                return False, {"error": "Usuário ou senha inválidos"}

            if not user['is_active']:
                logger.warning(f"Login attempt for inactive user: {username}")
                return False, {"error": "Conta inativa. Fale com o administrador."}

            if not self.verify_password(password, user['password_hash'], user['password_salt']):
                logger.warning(f"Invalid password for user: {username}")
                return False, {"error": "Usuário ou senha inválidos"}

            self._update_last_login(user['id'])

            logger.info(f"User {username} authenticated successfully")

            return True, {
                'id': user['id'],
                'username': user['username'],
                'role': user['role'],
                'full_name': user['display_name'] or user['username'],
                'login_time': datetime.now()
            }

        except Exception as e:
            logger.error(f"Authentication error: {e}")
            return False, {"error": "Falha na autenticação. Tente novamente."}

    def _update_last_login(self, user_id: str):
        """Update user's last login timestamp"""
        try:
            self.repository.update_last_login(user_id, datetime.now(timezone.utc).isoformat())
        except Exception as e:
            logger.warning(f"Could not update last_login: {e}")

    # ==================== SESSION MANAGEMENT ====================

    def check_session(self) -> bool:
        """Check if user session is valid and not expired"""
        if not st.session_state.get('authenticated'):
            return False

        login_time = st.session_state.get('login_time')
        if login_time:
            elapsed = datetime.now() - login_time
            if elapsed > self.session_timeout:
                logger.info(f"Session expired for user: {st.session_state.get('username')}")
                self.logout()
                return False

        return True

    def login(self, user_info: Dict):
        """Initialize user session after successful authentication"""
        st.session_state.authenticated = True
        st.session_state.user_id = user_info['id']
        st.session_state.username = user_info['username']
        st.session_state.user_role = user_info['role']
        st.session_state.user_fullname = user_info['full_name']
        st.session_state.login_time = user_info['login_time']

        st.session_state.debug_mode = False

        logger.info(f"User {user_info['username']} logged in successfully")

    def logout(self):
        """Clear user session and cache"""
        username = st.session_state.get('username', 'Unknown')

        for key in SESSION_KEYS:
            if key in st.session_state:
                del st.session_state[key]

        # Page state (filters, edit sessions) belongs to the old user
        for key in list(st.session_state.keys()):
            if str(key).startswith('sc_'):
                del st.session_state[key]

        st.cache_data.clear()

        logger.info(f"User {username} logged out")

    # ==================== ACCESS CONTROL ====================

    def require_auth(self) -> bool:
        """
        Require authentication to access a page
        Use at the beginning of each protected page
        """
        if not self.check_session():
            st.warning("⚠️ Faça login para acessar esta página")
            st.stop()
            return False
        return True

    def require_role(self, allowed_roles: List[str]) -> bool:
        """
        Require specific role(s) to access a page

        Usage:
            auth.require_role(['admin'])
        """
        if not self.require_auth():
            return False

        current_role = st.session_state.get('user_role', '')

        if current_role not in allowed_roles:
            st.error(f"🚫 Acesso negado. Perfil necessário: {', '.join(allowed_roles)}")
            st.stop()
            return False

        return True

    def has_role(self, role: str) -> bool:
        return st.session_state.get('user_role', '') == role

    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)

    # ==================== USER INFO HELPERS ====================

    def get_user_display_name(self) -> str:
        """Get user's display name for UI"""
        if st.session_state.get('user_fullname'):
            return st.session_state.user_fullname
        return st.session_state.get('username', 'Usuário')

    def get_current_user(self) -> Dict:
        """Get all current user info as dictionary"""
        return {
            'id': st.session_state.get('user_id'),
            'username': st.session_state.get('username'),
            'role': st.session_state.get('user_role'),
            'fullname': st.session_state.get('user_fullname'),
        }


# ==================== MODULE EXPORTS ====================

__all__ = [
    'AuthManager',
]

"""
Auth gateway.

Sign-up, sign-in, sign-out and session lookup against the Supabase identity
service, or against an in-memory account registry when Supabase is not
configured (demo mode).
"""

import uuid
from typing import Any, Optional, Protocol

from supabase import Client, create_client

from ..auth import AuthContext, hash_password, verify_password
from ..config import Settings
from ..logging_config import get_logger, log_auth_event
from ..models import AuthUser, SignInRequest, SignUpRequest
from ..storage import MarketplaceStore, default_role_record, utc_now_iso
from .errors import AuthenticationError, ProfileNotFoundError, RegistrationError

logger = get_logger("agriconnect.auth")

# Shared identity for demo sign-ins with an unregistered email
DEMO_USER_ID = "demo-user"
DEMO_USER_NAME = "Demo User"


class IdentityProvider(Protocol):
    """Identity backend. Users are ``{id, email, full_name, role}`` dicts."""

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any]
    ) -> tuple[dict[str, Any], Optional[str]]:
        """Register a user. Returns (user, provider session token or None)."""
        ...

    async def sign_in(self, email: str, password: str) -> tuple[dict[str, Any], Optional[str]]:
        ...

    async def sign_out(self, provider_token: Optional[str]) -> None:
        ...

    async def get_user(self, provider_token: str) -> Optional[dict[str, Any]]:
        ...


def _user_from_supabase(user) -> dict[str, Any]:
    metadata = user.user_metadata or {}
    return {
        "id": user.id,
        "email": user.email,
        "full_name": metadata.get("full_name"),
        "role": metadata.get("role", "farmer"),
    }


class SupabaseIdentityProvider:
    """Supabase Auth (GoTrue) identity backend."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _public_client(self) -> Client:
        # Fresh client per call: GoTrue keeps the session on the client object.
        return create_client(self.settings.supabase_url, self.settings.supabase_anon_key)

    def _admin_client(self) -> Client:
        return create_client(self.settings.supabase_url, self.settings.supabase_table_key)

    async def sign_up(self, email, password, metadata):
        response = self._public_client().auth.sign_up(
            {"email": email, "password": password, "options": {"data": metadata}}
        )
        if response.user is None:
            raise RegistrationError("Sign up did not return a user")
        token = response.session.access_token if response.session else None
        return _user_from_supabase(response.user), token

    async def sign_in(self, email, password):
        response = self._public_client().auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        if response.user is None:
            raise AuthenticationError("Invalid email or password")
        token = response.session.access_token if response.session else None
        return _user_from_supabase(response.user), token

    async def sign_out(self, provider_token):
        if provider_token:
            self._admin_client().auth.admin.sign_out(provider_token)

    async def get_user(self, provider_token):
        response = self._public_client().auth.get_user(provider_token)
        if response is None or response.user is None:
            return None
        return _user_from_supabase(response.user)


class DemoIdentityProvider:
    """In-memory accounts for demo mode. Passwords are stored as bcrypt hashes."""

    def __init__(self):
        self._accounts: dict[str, dict[str, Any]] = {}

    async def sign_up(self, email, password, metadata):
        if email in self._accounts:
            raise RegistrationError("User already registered")
        user = {
            "id": f"demo-{uuid.uuid4().hex[:12]}",
            "email": email,
            "full_name": metadata.get("full_name"),
            "role": metadata.get("role", "farmer"),
        }
        self._accounts[email] = {**user, "password_hash": hash_password(password)}
        return user, None

    async def sign_in(self, email, password):
        account = self._accounts.get(email)
        if account is None:
            return {
                "id": DEMO_USER_ID,
                "email": email,
                "full_name": DEMO_USER_NAME,
                "role": "farmer",
            }, None
        if not verify_password(password, account["password_hash"]):
            raise AuthenticationError("Invalid email or password")
        return {k: v for k, v in account.items() if k != "password_hash"}, None

    async def sign_out(self, provider_token):
        return None

    async def get_user(self, provider_token):
        return None


class AuthService:
    """Account operations over an identity provider and the marketplace store."""

    def __init__(self, identity: IdentityProvider, store: MarketplaceStore):
        self.identity = identity
        self.store = store

    async def sign_up(self, data: SignUpRequest) -> tuple[AuthUser, Optional[str]]:
        metadata = {"full_name": data.full_name, "role": data.role}
        try:
            user, provider_token = await self.identity.sign_up(data.email, data.password, metadata)
        except (AuthenticationError, RegistrationError) as e:
            log_auth_event("sign_up", data.email, False, e.message)
            raise
        except Exception as e:
            logger.error(f"Sign up error: {e}")
            log_auth_event("sign_up", data.email, False, "identity provider error")
            raise RegistrationError(str(e) or "Signup failed. Please try again.") from e

        await self._create_profile(user["id"], data)
        log_auth_event("sign_up", user["id"], True, f"role={data.role}")
        return AuthUser(**user), provider_token

    async def _create_profile(self, user_id: str, data: SignUpRequest) -> None:
        """Write the profile and role rows. Failures are logged; the account stands."""
        profile = {
            "id": user_id,
            "email": data.email,
            "full_name": data.full_name,
            "role": data.role,
            "phone": data.phone,
            "location": data.location,
            "created_at": utc_now_iso(),
        }
        try:
            await self.store.upsert_profile(profile)
        except Exception as e:
            logger.error(f"Profile creation error: {e}")
        try:
            await self.store.upsert_role_record(data.role, default_role_record(data.role, user_id))
        except Exception as e:
            logger.error(f"Role record creation error for {data.role} {user_id}: {e}")

    async def sign_in(self, data: SignInRequest) -> tuple[AuthUser, Optional[str]]:
        try:
            user, provider_token = await self.identity.sign_in(data.email, data.password)
        except AuthenticationError as e:
            log_auth_event("sign_in", data.email, False, e.message)
            raise
        except Exception as e:
            logger.error(f"Sign in error: {e}")
            log_auth_event("sign_in", data.email, False, "identity provider error")
            raise AuthenticationError(str(e) or "Login failed. Please try again.") from e

        log_auth_event("sign_in", user["id"], True)
        return AuthUser(**user), provider_token

    async def sign_out(self, auth: AuthContext) -> None:
        try:
            await self.identity.sign_out(auth.provider_token)
        except Exception as e:
            logger.error(f"Sign out error: {e}")
            raise
        log_auth_event("sign_out", auth.user_id, True)

    async def get_current_user(self, auth: AuthContext) -> Optional[AuthUser]:
        """Re-validate the provider session when there is one; otherwise trust the token."""
        if not auth.provider_token:
            return AuthUser(
                id=auth.user_id, email=auth.email, full_name=auth.full_name, role=auth.role
            )
        try:
            user = await self.identity.get_user(auth.provider_token)
        except Exception as e:
            logger.error(f"Get current user error: {e}")
            return None
        return AuthUser(**user) if user else None

    async def get_user_profile(self, user_id: str) -> Optional[dict[str, Any]]:
        try:
            return await self.store.get_profile(user_id)
        except Exception as e:
            logger.error(f"Get user profile error: {e}")
            return None

    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        try:
            profile = await self.store.update_profile(
                user_id, {**updates, "updated_at": utc_now_iso()}
            )
        except Exception as e:
            logger.error(f"Update profile error: {e}")
            raise
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

"""Identity service: sessions and the current faculty profile."""

import logging
import secrets
from typing import Dict, Optional

from companion.errors import AuthenticationError, NotFoundError, ValidationError
from companion.models import FacultyProfile, SessionContext, SessionResponse, SignUpRequest
from companion.storage import TableStore

log = logging.getLogger(__name__)


class IdentityService:
    """
    Local stand-in for the hosted identity provider.

    Tokens are opaque and live in process memory. The supplied email is
    trusted; credential checks belong to the hosted provider.
    """

    def __init__(self, store: TableStore):
        self.store = store
        self._sessions: Dict[str, str] = {}

    def sign_up(self, request: SignUpRequest) -> SessionResponse:
        email = request.email.strip().lower()
        if not email or not request.full_name.strip():
            raise ValidationError("Email and full name are required")
        if self.store.select("profiles", filters={"email": email}, limit=1):
            raise ValidationError(f"An account already exists for {email}")

        row = self.store.insert("profiles", {
            "email": email,
            "full_name": request.full_name.strip(),
            "college_name": request.college_name.strip(),
            "years_experience": request.years_experience,
            "research_publications": [],
        })
        log.info("Created profile %s for %s", row["id"], email)
        return self._open_session(FacultyProfile(**row))

    def sign_in(self, email: str) -> SessionResponse:
        rows = self.store.select("profiles", filters={"email": email.strip().lower()}, limit=1)
        if not rows:
            raise AuthenticationError("Invalid login credentials")
        return self._open_session(FacultyProfile(**rows[0]))

    def sign_out(self, token: str) -> None:
        self._sessions.pop(token, None)

    def has_session(self, token: Optional[str]) -> bool:
        return bool(token) and token in self._sessions

    def fetch_profile(self, user_id: str) -> FacultyProfile:
        row = self.store.get("profiles", user_id)
        if row is None:
            raise NotFoundError("Profile not found")
        return FacultyProfile(**row)

    def get_session(self, token: Optional[str]) -> SessionContext:
        """Resolve a bearer token into the explicit session context."""
        if not self.has_session(token):
            raise AuthenticationError("Not signed in")
        user_id = self._sessions[token]
        return SessionContext(user_id=user_id, profile=self.fetch_profile(user_id))

    def _open_session(self, profile: FacultyProfile) -> SessionResponse:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = profile.id
        return SessionResponse(access_token=token, profile=profile)

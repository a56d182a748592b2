"""
JWT issuing and verification for the task tracker.

Tokens are signed with HS256 using a single shared secret injected from
configuration. Nothing about a token is stored server-side: a token stays
valid until its ``exp`` claim passes, and logging out only clears the
client's cookie.

Token structure (claims):
    - ``sub``      -- person id as a decimal string.
    - ``fullName`` -- display name of the person.
    - ``username`` -- login name of the person.
    - ``role``     -- ``ADMIN`` or ``USER``.
    - ``iat``      -- issued-at, integer epoch seconds.
    - ``exp``      -- expiry, integer epoch seconds (``iat + lifetime``).

Key Concepts Demonstrated:
- Symmetric HS256 signing with PyJWT
- Fail-closed validation (``validate`` never raises)
- Typed claim decoding into an immutable ``Principal``
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .models import Role

DEFAULT_ALGORITHM = "HS256"
DEFAULT_LIFETIME_SECONDS = 3600
REQUIRED_TOKEN_CLAIMS = ["sub", "iat", "exp"]


class TokenError(Exception):
    """Raised when a token cannot be decoded into trusted claims."""


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request."""

    person_id: int
    username: str
    full_name: str
    role: Role

    @property
    def authorities(self) -> tuple[str, ...]:
        return (self.role.value,)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_view(cls, view: dict[str, Any]) -> "Principal":
        """Build a principal from a person view (``Person.to_dict()``)."""
        return cls(
            person_id=int(view["personId"]),
            username=view["username"],
            full_name=view["fullName"],
            role=Role.parse(view["role"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "personId": self.person_id,
            "username": self.username,
            "fullName": self.full_name,
            "role": self.role.value,
        }


class TokenService:
    """
    Issue and verify bearer tokens.

    The service holds only immutable configuration, so one instance is
    shared by every request.

    Args:
        secret_key: HMAC secret. Never logged.
        lifetime_seconds: Seconds between ``iat`` and ``exp``.
        algorithm: Signing algorithm; the only one accepted on decode.
        leeway_seconds: Clock-skew tolerance applied to ``exp``.
    """

    def __init__(
        self,
        secret_key: str,
        lifetime_seconds: int = DEFAULT_LIFETIME_SECONDS,
        algorithm: str = DEFAULT_ALGORITHM,
        leeway_seconds: int = 0,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must be a non-empty string")
        self._secret_key = secret_key
        self.lifetime_seconds = int(lifetime_seconds)
        self.algorithm = algorithm
        self.leeway_seconds = int(leeway_seconds)

    def __repr__(self) -> str:
        return f"<TokenService {self.algorithm} lifetime={self.lifetime_seconds}s>"

    def issue(self, principal: Principal, *, now: datetime | None = None) -> str:
        """
        Create a signed token for *principal*.

        Args:
            principal: Identity to encode.
            now: Issue time; defaults to the current UTC time.

        Returns:
            A compact JWS string.
        """
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(seconds=self.lifetime_seconds)

        payload: dict[str, Any] = {
            "sub": str(principal.person_id),
            "fullName": principal.full_name,
            "username": principal.username,
            "role": Role.parse(principal.role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_TOKEN_CLAIMS},
                leeway=self.leeway_seconds,
            )
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenError(f"Invalid token: {exc}") from exc

    def validate(self, token: str) -> bool:
        """Return ``True`` only for a well-formed, correctly signed, unexpired token."""
        try:
            self._decode(token)
        except TokenError:
            return False
        return True

    def extract_subject_id(self, token: str) -> int:
        """
        Return the person id carried in ``sub``.

        Raises:
            TokenError: If the token does not verify or ``sub`` is not an integer.
        """
        return self._subject_id(self._decode(token))

    def extract_principal(self, token: str) -> Principal:
        """
        Decode *token* into a :class:`Principal`.

        Raises:
            TokenError: If the token does not verify or any identity claim
                is missing, mistyped, or (for ``role``) not a known role.
        """
        claims = self._decode(token)
        person_id = self._subject_id(claims)

        values = {}
        for claim in ("fullName", "username", "role"):
            value = claims.get(claim)
            if not isinstance(value, str) or not value.strip():
                raise TokenError(f"Invalid {claim} claim")
            values[claim] = value

        try:
            role = Role.parse(values["role"])
        except ValueError as exc:
            raise TokenError(f"Invalid role claim: {values['role']!r}") from exc

        return Principal(
            person_id=person_id,
            username=values["username"],
            full_name=values["fullName"],
            role=role,
        )

    @staticmethod
    def _subject_id(claims: dict[str, Any]) -> int:
        subject = claims.get("sub")
        if not isinstance(subject, str) or not (subject.isascii() and subject.isdigit()):
            raise TokenError("Invalid sub claim")
        return int(subject)

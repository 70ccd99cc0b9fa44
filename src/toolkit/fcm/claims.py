"""Firebase ID token handling.

Clients authenticate with the ID token their Firebase SDK issued::

    firebase-auth: Bearer eyJhbGciOiJSUzI1NiIs...

``extract_claims`` parses that header value and returns the caller's
uid (``user_id`` claim, falling back to ``sub``) and Firebase project
(``aud`` claim).  With ``verify=True`` the signature, expiry and
audience format are checked against Google's published certificates
through google-auth; ``verify=False`` only decodes, for local
development and tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import google.auth.exceptions
import google.auth.transport.requests
from google.auth import jwt as google_jwt
from google.oauth2 import id_token

from toolkit.core.errors import AuthenticationError, AuthorizationError

BEARER_PREFIX = "Bearer "
FIREBASE_ISSUER = "https://securetoken.google.com/"

TokenDecoder = Callable[[str], dict[str, Any]]


@dataclass(frozen=True)
class FirebaseClaims:
    """The subset of ID token claims toolkit relies on."""

    user_id: str
    aud: str
    email: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


def verify_firebase_token(token: str) -> dict[str, Any]:
    """Verify *token* against Google's securetoken certificates."""
    request = google.auth.transport.requests.Request()
    claims = id_token.verify_firebase_token(token, request)
    aud = claims.get("aud")
    if claims.get("iss") != f"{FIREBASE_ISSUER}{aud}":
        raise ValueError("Token issuer does not match its audience")
    return claims


def decode_unverified(token: str) -> dict[str, Any]:
    """Decode *token* without checking its signature."""
    return google_jwt.decode(token, verify=False)


def bearer_token(header: str | None) -> str:
    """Return the token part of a ``Bearer <token>`` header value."""
    if header is None or not header.strip():
        raise AuthenticationError("Missing firebase-auth header")
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationError("Invalid authorization header")
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Invalid authorization header")
    return token


def extract_claims(
    header: str | None,
    *,
    verify: bool = True,
    decoder: TokenDecoder | None = None,
) -> FirebaseClaims:
    """Parse a ``firebase-auth`` header value into :class:`FirebaseClaims`.

    Args:
        header: Raw header value (``"Bearer <token>"``).
        verify: Verify the token signature (default) or only decode it.
        decoder: Override the decoding function (mostly for tests).

    Raises:
        AuthenticationError: Header missing or malformed, token invalid,
            or uid / audience claims absent.
    """
    token = bearer_token(header)
    decode = decoder or (verify_firebase_token if verify else decode_unverified)

    try:
        payload = decode(token)
    except (ValueError, google.auth.exceptions.GoogleAuthError) as exc:
        raise AuthenticationError("Invalid token", cause=exc) from exc

    user_id = payload.get("user_id") or payload.get("sub")
    aud = payload.get("aud")
    if not user_id or not aud or not isinstance(aud, str):
        raise AuthenticationError("Invalid token")

    return FirebaseClaims(
        user_id=str(user_id),
        aud=aud,
        email=payload.get("email"),
        raw=payload,
    )


def require_project(claims: FirebaseClaims, projects: Iterable[str]) -> FirebaseClaims:
    """Reject claims whose project is not in *projects*."""
    if claims.aud not in set(projects):
        raise AuthorizationError("Invalid project id", context={"project": claims.aud})
    return claims

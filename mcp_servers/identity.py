"""Verification of signed identity assertions (Pomerium JWTs).

The assertion header is verified against the JSON Web Key Set published by
the trust anchor. Key sets are fetched once per URL and kept for the
process lifetime.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from .config import HTTP_TIMEOUT, IDENTITY_HEADER
from .errors import BackendError, IdentityError
from .http import request_json
from .logger import get_logger

log = get_logger("identity")

DEFAULT_ALGORITHMS = ["ES256"]
# JWK key type for each JWS algorithm family
KEY_TYPES = {"ES": "EC", "RS": "RSA", "PS": "RSA", "HS": "oct"}
JWKS_PATH = "/.well-known/pomerium/jwks.json"


@dataclass(frozen=True)
class Identity:
    """A verified user identity decoded from an assertion."""
    subject: str = ""
    user: str = ""
    email: str = ""
    name: str = ""
    groups: tuple[str, ...] = ()
    issuer: str = ""
    audience: tuple[str, ...] = ()
    claims: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Identity":
        aud = claims.get("aud") or ()
        if isinstance(aud, str):
            aud = (aud,)
        return cls(
            subject=claims.get("sub", ""),
            user=claims.get("user", ""),
            email=claims.get("email", ""),
            name=claims.get("name", ""),
            groups=tuple(claims.get("groups") or ()),
            issuer=claims.get("iss", ""),
            audience=tuple(aud),
            claims=dict(claims),
        )


def jwks_url_for_issuer(issuer: str) -> str:
    """Derive the key set location from an assertion issuer."""
    if not issuer:
        raise IdentityError("assertion has no issuer and no JWKS URL is configured")
    base = issuer if issuer.startswith(("http://", "https://")) else f"https://{issuer}"
    return base.rstrip("/") + JWKS_PATH


def matching_keys(key_set: dict, header: dict) -> list[dict]:
    """Select the keys that could have signed an assertion with this header.

    Keys of another type are dropped, so a set carrying RSA and EC keys side
    by side still verifies an ES256 assertion. When the header names a kid,
    keys with a different kid are dropped too.
    """
    kty = KEY_TYPES.get(str(header.get("alg", ""))[:2])
    kid = header.get("kid")
    return [
        key for key in key_set["keys"]
        if isinstance(key, dict)
        and (kty is None or key.get("kty") == kty)
        and (not kid or not key.get("kid") or key.get("kid") == kid)
    ]


class IdentityVerifier:
    """Verifies assertions and extracts identities into a request context."""

    def __init__(
        self,
        jwks_url: str = "",
        audience: str = "",
        algorithms: list[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.jwks_url = jwks_url
        self.audience = audience
        self.algorithms = algorithms or DEFAULT_ALGORITHMS
        self._transport = transport
        self._key_sets: dict[str, dict] = {}

    async def verify(self, assertion: str) -> Identity:
        """Verify an assertion and decode its identity.

        Raises:
            IdentityError: malformed token, bad signature, expired, wrong audience
            BackendError: the key set could not be fetched
        """
        try:
            header = jwt.get_unverified_header(assertion)
            unverified = jwt.get_unverified_claims(assertion)
        except JOSEError as e:
            raise IdentityError(f"malformed assertion: {e}") from e

        url = self.jwks_url or jwks_url_for_issuer(unverified.get("iss", ""))
        keys = matching_keys(await self._get_key_set(url), header)
        if not keys:
            raise IdentityError(f"no key in {url} matches the assertion")

        try:
            claims = jwt.decode(
                assertion,
                {"keys": keys},
                algorithms=self.algorithms,
                audience=self.audience or None,
                options={"verify_aud": bool(self.audience)},
            )
        except (JOSEError, ValueError) as e:
            # an unusable key surfaces as ValueError while it is constructed
            raise IdentityError(str(e)) from e

        return Identity.from_claims(claims)

    async def identity_from_request(self, ctx, request):
        """Context extractor: store the verified identity, if any."""
        assertion = request.headers.get(IDENTITY_HEADER)
        if not assertion:
            log.warning("no JWT assertion header found in request")
            return ctx

        try:
            identity = await self.verify(assertion)
        except (IdentityError, BackendError) as e:
            log.warning(f"failed to get identity from JWT assertion: {e}")
            return ctx

        return ctx.with_identity(identity)

    async def _get_key_set(self, url: str) -> dict:
        key_set = self._key_sets.get(url)
        if key_set is not None:
            return key_set

        log.debug(f"Fetching key set: {url}")
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self._transport) as client:
            key_set = await request_json(client, "GET", url)

        if not isinstance(key_set, dict):
            raise IdentityError(f"key set at {url} is not a JSON object")
        if not key_set.get("keys") or not isinstance(key_set["keys"], list):
            raise IdentityError(f"key set at {url} has no keys")

        self._key_sets[url] = key_set
        return key_set

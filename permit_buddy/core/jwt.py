"""JWT verification for Supabase access tokens.

Supports HS256 tokens signed with the project's shared secret and
RS256/ES256 tokens signed with a key published in the project's JWKS.
"""

import base64
from typing import List, Optional, Union

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from permit_buddy.core.jwks import JWKKey, JWKSService
from permit_buddy.schemas.auth import JWTClaims
from permit_buddy.utils.logging import get_logger

LOGGER = get_logger(__name__)

EXPECTED_AUDIENCE = "authenticated"
REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss"]

_EC_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


def _base64url_decode(value: Optional[str]) -> bytes:
    if not value:
        return b""
    padding = -len(value) % 4
    return base64.urlsafe_b64decode(value + "=" * padding)


def jwk_to_pem(jwk_key: JWKKey) -> str:
    """Convert an RSA or EC JWK into a PEM public key.

    Raises:
        ValueError: If the key type or curve is unsupported
    """
    if jwk_key.kty == "RSA":
        public_key = rsa.RSAPublicNumbers(
            e=int.from_bytes(_base64url_decode(jwk_key.e), byteorder="big"),
            n=int.from_bytes(_base64url_decode(jwk_key.n), byteorder="big"),
        ).public_key()
    elif jwk_key.kty == "EC":
        curve = _EC_CURVES.get(jwk_key.crv or "")
        if curve is None:
            raise ValueError(f"Unsupported curve: {jwk_key.crv}")
        public_key = ec.EllipticCurvePublicNumbers(
            x=int.from_bytes(_base64url_decode(jwk_key.x), byteorder="big"),
            y=int.from_bytes(_base64url_decode(jwk_key.y), byteorder="big"),
            curve=curve(),
        ).public_key()
    else:
        raise ValueError(f"Unsupported key type: {jwk_key.kty}")

    pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.decode("utf-8")


class JWTVerifier:
    """Verifies Supabase access tokens and returns their claims."""

    def __init__(self, supabase_url: str, jwt_secret: str = "", jwks_service: Optional[JWKSService] = None):
        """Initialize JWT verifier.

        Args:
            supabase_url: Supabase project URL, used to derive the expected issuer
            jwt_secret: Shared secret for HS256 tokens
            jwks_service: Key source for RS256/ES256 tokens
        """
        self.supabase_url = supabase_url.rstrip("/")
        self.expected_issuer = f"{self.supabase_url}/auth/v1"
        self.jwt_secret = jwt_secret
        self.jwks_service = jwks_service

    async def verify_token(self, token: str) -> JWTClaims:
        """Verify and decode a Supabase JWT.

        Args:
            token: JWT access token from the Authorization header

        Returns:
            Decoded and validated claims

        Raises:
            jwt.InvalidTokenError: If the token is malformed, expired, badly
                signed or issued by another project
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg")
            key, algorithms = await self._resolve_key(alg, header.get("kid"))

            payload = jwt.decode(
                token,
                key,
                algorithms=algorithms,
                audience=EXPECTED_AUDIENCE,
                issuer=self.expected_issuer,
                options={"require": REQUIRED_CLAIMS},
            )
            aud = payload.get("aud")
            if isinstance(aud, list):
                payload["aud"] = aud[0] if aud else None
            return JWTClaims(**payload)

        except jwt.ExpiredSignatureError as e:
            LOGGER.warning(f"Token expired: {e}")
            raise jwt.InvalidTokenError("Token has expired") from e
        except jwt.InvalidIssuerError as e:
            LOGGER.warning(f"Invalid issuer: {e}")
            raise jwt.InvalidTokenError("Invalid token issuer") from e
        except jwt.InvalidTokenError:
            raise
        except (ValueError, RuntimeError) as e:
            LOGGER.error(f"Token verification failed: {e}")
            raise jwt.InvalidTokenError("Token verification failed") from e

    async def _resolve_key(self, alg: Optional[str], kid: Optional[str]) -> tuple[Union[str, bytes], List[str]]:
        if alg == "HS256":
            if not self.jwt_secret:
                raise ValueError("HS256 token received but SUPABASE_JWT_SECRET is not configured")
            return self.jwt_secret, ["HS256"]

        if alg in ("RS256", "ES256"):
            if not kid:
                raise jwt.InvalidTokenError("JWT header missing 'kid' (key ID)")
            if self.jwks_service is None:
                raise ValueError("Asymmetric token received but no JWKS source is configured")
            jwk_key = await self.jwks_service.get_key(kid)
            if jwk_key is None:
                raise jwt.InvalidTokenError(f"No matching key found for kid: {kid}")
            return jwk_to_pem(jwk_key), [alg]

        raise jwt.InvalidTokenError(f"Unsupported algorithm: {alg}")

"""Session tokens, request authentication and passwords."""

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from loguru import logger

from app.errors import ConfigError, DatabaseError
from app.models.auth import ROLES, SECRET_FIELDS, AuthFailure, AuthResult, User
from app.models.common import is_valid_id
from app.repositories.base import utcnow
from settings import AUTH_COOKIE, JWT_ALGORITHM, JWT_EXPIRES_HOURS

if TYPE_CHECKING:
    from app.repositories.db import ConnectionManager

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=10)).decode()


def verify_password(password: str, hashed: str | None) -> bool:
    """Check a password against a stored bcrypt hash."""
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


def check_role(user: Mapping[str, Any] | None, allowed_roles: Iterable[str]) -> bool:
    """Check that user has one of the allowed roles."""
    if not user:
        return False
    return user.get("role") in set(allowed_roles)


def sanitize_user(doc: Mapping[str, Any]) -> dict[str, Any]:
    """Serialize a user document through the public schema (fresh copy, no secrets)."""
    return User.model_validate(dict(doc)).model_dump(mode="json")


def _normalize_id(value: Any) -> str | None:
    """Flatten an id, an object with an id, or {"_id": ...} to a string."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return _normalize_id(value.get("_id", value.get("id")))
    text = value if isinstance(value, str) else str(value)
    return text or None


def _cookie(request: Any, name: str) -> str | None:
    cookies = getattr(request, "cookies", None) or {}
    return cookies.get(name)


class AuthService:
    """Issues and verifies session tokens and gates requests on them.

    There is no server-side session: every request re-verifies the token
    and re-loads the user. Failures are reported as AuthResult objects with
    one generic message; the specific reason is only logged.
    """

    def __init__(
        self,
        db: "ConnectionManager",
        secret: str | None,
        *,
        algorithm: str = JWT_ALGORITHM,
        expires_in: timedelta = timedelta(hours=JWT_EXPIRES_HOURS),
        cookie_name: str = AUTH_COOKIE,
    ):
        if not secret:
            raise ConfigError("A JWT signing secret is required")
        self._db = db
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in
        self.cookie_name = cookie_name

    @property
    def expires_in(self) -> timedelta:
        return self._expires_in

    async def sign_jwt(self, payload: Mapping[str, Any]) -> str:
        """Sign a token whose subject is a single string `id` claim."""
        claims = dict(payload)
        raw_id = claims.pop("_id", None)
        subject = _normalize_id(claims.get("id")) or _normalize_id(raw_id)
        if not subject:
            raise ValueError("Token payload needs an id or _id")

        now = datetime.now(timezone.utc)
        claims.update(
            id=subject,
            iat=int(now.timestamp()),
            exp=int((now + self._expires_in).timestamp()),
        )
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        logger.debug("Signed token for user {}", subject)
        return token

    async def verify_jwt(self, token: str | None) -> dict[str, Any] | None:
        """Decoded claims for a valid token, None for anything else."""
        if not token or not isinstance(token, str):
            logger.debug("No token provided to verify_jwt")
            return None

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            logger.info("Token rejected: expired")
        except JWTClaimsError as e:
            logger.info("Token rejected: bad claims ({})", e)
        except JWTError as e:
            logger.info("Token rejected: invalid ({})", e)
        except Exception as e:
            logger.error("Unexpected error during token verification: {}", e)
        return None

    async def authenticate(self, request: Any) -> AuthResult:
        """Resolve the request's session cookie to a sanitized user."""
        try:
            return await self._authenticate(request)
        except Exception as e:
            logger.exception("Unexpected authentication error")
            return AuthResult.failed(AuthFailure.UNEXPECTED, str(e))

    async def _authenticate(self, request: Any) -> AuthResult:
        token = _cookie(request, self.cookie_name)
        if not token:
            logger.info("Authentication failed: token missing")
            return AuthResult.failed(AuthFailure.TOKEN_MISSING)

        claims = await self.verify_jwt(token)
        if claims is None:
            logger.info("Authentication failed: invalid token")
            return AuthResult.failed(AuthFailure.TOKEN_INVALID)

        # Checked before any lookup so untrusted input never reaches a query
        user_id = claims.get("id")
        if not is_valid_id(user_id):
            logger.warning("Authentication failed: malformed user id {!r}", user_id)
            return AuthResult.failed(AuthFailure.IDENTITY_MALFORMED)

        try:
            await self._db.connect()
        except DatabaseError as e:
            logger.error("Authentication failed: database connection error: {}", e)
            return AuthResult.failed(AuthFailure.CONNECTION_ERROR, str(e))

        user = await self._db.repository("user").find_by_id(user_id, exclude=SECRET_FIELDS)
        if user is None:
            logger.info("Authentication failed: user {} not found", user_id)
            return AuthResult.failed(AuthFailure.USER_NOT_FOUND)

        return AuthResult.ok(sanitize_user(user))

    async def login(self, email: str, password: str) -> tuple[str, dict[str, Any]] | None:
        """Check credentials. Returns (token, user) or None when they do not match."""
        await self._db.connect()
        users = self._db.repository("user")

        user = await users.find_one({"email": email.strip().lower()})
        if user is None or not verify_password(password, user.get("password")):
            logger.info("Login failed for {}", email)
            return None

        user = await users.update_one(user["id"], {"last_login": utcnow().isoformat()})
        token = await self.sign_jwt({"id": user["id"], "email": user["email"], "role": user.get("role")})
        logger.info("Login successful for {} with ID {}", user["email"], user["id"])
        return token, sanitize_user(user)

    async def register_user(
        self,
        email: str,
        name: str,
        password: str,
        role: str = "developer",
        **fields: Any,
    ) -> dict[str, Any]:
        """Create a user with a hashed password."""
        email = email.strip().lower()
        if "@" not in email:
            raise ValueError(f"Invalid email address: {email}")
        if role not in ROLES:
            raise ValueError(f"Invalid role: {role}. Must be one of {', '.join(ROLES)}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters long")
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must not exceed {MAX_PASSWORD_BYTES} bytes")

        await self._db.connect()
        users = self._db.repository("user")
        if await users.find_one({"email": email}) is not None:
            raise ValueError(f"User already exists: {email}")

        doc = {**fields, "email": email, "name": name.strip(), "role": role, "password": hash_password(password)}
        doc.setdefault("status", "active")
        user = await users.create(doc)
        logger.info("Registered user {} ({})", user["id"], role)
        return sanitize_user(user)

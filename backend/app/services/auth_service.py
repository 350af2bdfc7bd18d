import logging

from ..access.where import equals
from ..domain.ports.documents import DocumentStore
from ..errors import AuthError
from ..security.passwords import verify_password
from ..security.token_inspection import create_access_token

logger = logging.getLogger("tenantcms.auth")


async def login_user(store: DocumentStore, email: str, password: str) -> str:
    """Check credentials and issue an access token.

    Authentication reads the store directly: access policies apply to the
    authenticated user, which does not exist yet.

    Raises:
        AuthError: If the email is unknown or the password does not match
    """
    normalized = email.strip().lower()
    result = await store.find("users", equals("email", normalized), limit=1)
    user = result.docs[0] if result.docs else None

    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed email=%s", normalized)
        raise AuthError("Invalid email or password")

    logger.info("login_succeeded user_id=%s", user.id)
    return create_access_token(str(user.id))

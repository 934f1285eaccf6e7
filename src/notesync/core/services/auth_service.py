"""Authentication service implementation."""

from typing import Optional

from pydantic import ValidationError

from ...config import Settings, get_settings
from ..exceptions import AuthenticationError, ProfileNotFoundError
from ..logging import get_logger
from ..schemas.auth import Identity, Profile, RegisterRequest, SignInRequest, SignInResult
from .interfaces import IAuthService, IIdentityProvider, IProfileStore

logger = get_logger("auth")


class AuthService(IAuthService):
    """Sign-in and registration on top of the identity provider.

    The profile store is touched exactly once per flow: read at sign-in to
    resolve the display name, written at registration.
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        profiles: IProfileStore,
        settings: Optional[Settings] = None,
    ):
        self.identity_provider = identity_provider
        self.profiles = profiles
        self.settings = settings or get_settings()

    async def sign_in(self, request: SignInRequest) -> SignInResult:
        """Sign in and resolve the user's nickname."""
        try:
            identity = await self.identity_provider.sign_in(request.email, request.password)
        except AuthenticationError:
            logger.info("Sign-in rejected", extra={"email": request.email})
            raise
        except Exception as e:
            logger.warning(f"Identity provider failed during sign-in: {e}")
            raise AuthenticationError(f"Authentication failed: {e}") from e

        try:
            data = await self.profiles.get(identity.uid)
        except Exception as e:
            logger.error("Failed to load profile", extra={"uid": identity.uid}, exc_info=e)
            raise AuthenticationError(f"Failed to load profile: {e}") from e

        if data is None:
            logger.warning("Signed-in user has no profile", extra={"uid": identity.uid})
            raise ProfileNotFoundError("User not found in database", details={"uid": identity.uid})

        try:
            profile = Profile.model_validate(data)
        except ValidationError as e:
            logger.error("Stored profile is malformed", extra={"uid": identity.uid})
            raise AuthenticationError(
                f"Failed to load profile: {e}",
                details={"uid": identity.uid, "errors": e.errors(include_url=False, include_context=False)},
            ) from e

        # An empty nickname is treated like a missing one
        display_name = profile.nickname or request.email

        logger.info("User signed in", extra={"uid": identity.uid})
        return SignInResult(identity=identity, display_name=display_name)

    async def register(self, request: RegisterRequest) -> Identity:
        """Create the account, then store its profile under the new uid."""
        if len(request.password) < self.settings.min_password_length:
            raise AuthenticationError(
                f"Password must be at least {self.settings.min_password_length} characters"
            )

        try:
            identity = await self.identity_provider.sign_up(request.email, request.password)
        except AuthenticationError:
            raise
        except Exception as e:
            logger.warning(f"Identity provider failed during sign-up: {e}")
            raise AuthenticationError(f"Registration failed: {e}") from e

        try:
            await self.profiles.put(identity.uid, request.to_profile().to_record())
        except Exception as e:
            logger.error("Failed to save profile", extra={"uid": identity.uid}, exc_info=e)
            raise AuthenticationError(f"Failed to save profile: {e}") from e

        logger.info("User registered", extra={"uid": identity.uid})
        return identity

    def sign_out(self) -> None:
        self.identity_provider.sign_out()
        logger.info("User signed out")

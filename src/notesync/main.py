# Application composition root
from typing import Optional

from .backends.memory import InMemoryDocumentStore, InMemoryIdentityProvider, InMemoryProfileStore
from .config import Settings, get_settings
from .core.logging import get_logger, setup_logging
from .core.services.auth_service import AuthService
from .core.services.interfaces import IDocumentStore, IIdentityProvider, IProfileStore
from .core.services.note_synchronizer import NoteSynchronizer
from .core.services.session_gate import SessionGate

logger = get_logger("main")


class NoteSyncApp:
    """Wired services for one client session."""

    def __init__(
        self,
        settings: Settings,
        identity_provider: IIdentityProvider,
        documents: IDocumentStore,
        profiles: IProfileStore,
    ):
        self.settings = settings
        self.identity_provider = identity_provider
        self.documents = documents
        self.profiles = profiles

        self.synchronizer = NoteSynchronizer(documents, settings)
        self.session = SessionGate(identity_provider, self.synchronizer)
        self.auth = AuthService(identity_provider, profiles, settings)

    def open(self) -> None:
        """Start following the identity provider."""
        logger.info(
            f"Starting {self.settings.app_name} client",
            extra={"version": self.settings.app_version, "environment": self.settings.environment},
        )
        self.session.open()

    def close(self) -> None:
        """Tear down the session gate and the live query."""
        self.session.close()
        logger.info(f"{self.settings.app_name} client stopped")


def create_app(
    settings: Optional[Settings] = None,
    *,
    identity_provider: Optional[IIdentityProvider] = None,
    documents: Optional[IDocumentStore] = None,
    profiles: Optional[IProfileStore] = None,
    configure_logging: bool = True,
) -> NoteSyncApp:
    """Build a NoteSyncApp; backends not supplied default to the in-memory ones."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    return NoteSyncApp(
        settings,
        identity_provider or InMemoryIdentityProvider(settings),
        documents or InMemoryDocumentStore(),
        profiles or InMemoryProfileStore(),
    )

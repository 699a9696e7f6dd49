"""RebookEngine — central engine client owning the datastore and all services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rebook.config.settings import AppConfig
    from rebook.datastore.client import Datastore
    from rebook.engine.services.contact_service import ContactService
    from rebook.engine.services.credential_service import CredentialService
    from rebook.engine.services.session_service import SessionService
    from rebook.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)

# Error messages
_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


class RebookEngine:
    """Central engine that owns all services and infrastructure.

    The datastore handle is constructed here and handed to each service;
    nothing reaches for a module-level connection.
    """

    def __init__(self, config: AppConfig, *, metrics: EngineMetrics | None = None) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            metrics: Optional metrics sink shared with the HTTP layer.
        """
        self._config = config
        self._metrics = metrics
        self._initialized = False

        self._datastore: Datastore | None = None

        self._credential_service: CredentialService | None = None
        self._session_service: SessionService | None = None
        self._contact_service: ContactService | None = None

    async def initialize(self) -> None:
        """Open the datastore, create tables and build the services.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        from rebook.datastore.client import Datastore
        from rebook.datastore.migrations import run_auto_migrate
        from rebook.engine.services.contact_service import ContactService
        from rebook.engine.services.credential_service import CredentialService
        from rebook.engine.services.session_service import SessionService

        self._datastore = Datastore(self._config.db)
        await self._datastore.open()
        await run_auto_migrate(self._datastore.engine)

        self._credential_service = CredentialService(
            self._datastore,
            bcrypt_rounds=self._config.auth.bcrypt_rounds,
            metrics=self._metrics,
        )
        self._session_service = SessionService(self._config.auth)
        self._contact_service = ContactService(self._datastore, metrics=self._metrics)

        self._initialized = True
        logger.info("Engine initialized (db=%s)", self._config.db.engine)

    async def close(self) -> None:
        """Gracefully shut down all services and connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        self._credential_service = None
        self._session_service = None
        self._contact_service = None

        if self._datastore is not None:
            await self._datastore.close()
            self._datastore = None

        self._initialized = False

    async def health_check(self) -> dict[str, str]:
        """Report engine and datastore status."""
        if not self._initialized or self._datastore is None:
            return {"engine": "not_initialized", "datastore": "unknown"}
        datastore_ok = await self._datastore.ping()
        return {"engine": "ok", "datastore": "ok" if datastore_ok else "error"}

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> AppConfig:
        """Get the application configuration."""
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Check if the engine has been initialized."""
        return self._initialized

    @property
    def datastore(self) -> Datastore:
        """Get the datastore."""
        if self._datastore is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._datastore

    @property
    def credential_service(self) -> CredentialService:
        """Get the credential (account) service."""
        if self._credential_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._credential_service

    @property
    def session_service(self) -> SessionService:
        """Get the session token service."""
        if self._session_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._session_service

    @property
    def contact_service(self) -> ContactService:
        """Get the contact service."""
        if self._contact_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._contact_service

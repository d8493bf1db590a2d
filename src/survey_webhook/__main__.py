"""Main application entry point."""

import asyncio
import logging
from typing import Optional, Union

import uvicorn

from .config import Config
from .database.engine import close_database, init_database
from .database.settings import DatabaseSettingsStore
from .host.interface import SettingsProvider
from .host.memory import InMemoryHost
from .host.remote import RemoteControlHost
from .subscriber.event_handler import SurveyCompletionHandler
from .subscriber.metrics import get_metrics
from .api.app import create_app
from .api.dependencies import set_config_instance, set_handler_instance, set_settings_store_instance
from .webhook import ConfigurationResolver, WebhookDispatcher

logger = logging.getLogger(__name__)


def build_host(config: Config) -> Union[InMemoryHost, RemoteControlHost]:
    """
    Create the survey host adapter selected by the configuration.

    Raises:
        ValueError: If the RemoteControl backend is selected without a URL
    """
    if config.host_backend == "remotecontrol":
        if not config.remotecontrol_url:
            raise ValueError("RemoteControl backend selected but no RemoteControl URL configured")
        logger.info(f"Using LimeSurvey RemoteControl host at {config.remotecontrol_url}")
        return RemoteControlHost(
            url=config.remotecontrol_url,
            username=config.remotecontrol_username or "",
            password=config.remotecontrol_password or "",
            timeout=config.webhook_timeout,
            verify=config.webhook_verify_tls,
        )

    if config.host_fixtures:
        return InMemoryHost.from_file(config.host_fixtures)

    logger.info("Using empty in-memory host")
    return InMemoryHost()


def build_handler(
    config: Config,
    settings: SettingsProvider,
    host: Union[InMemoryHost, RemoteControlHost],
) -> SurveyCompletionHandler:
    """Wire resolver, host and dispatcher into a completion handler."""
    metrics = get_metrics() if config.metrics_enabled else None
    dispatcher = WebhookDispatcher(
        timeout=config.webhook_timeout,
        verify_tls=config.webhook_verify_tls,
        parallel=config.webhook_parallel,
        strict_status=config.webhook_strict_status,
        metrics=metrics,
    )
    return SurveyCompletionHandler(
        resolver=ConfigurationResolver(settings),
        responses=host,
        participants=host,
        exporter=host,
        dispatcher=dispatcher,
        default_language=config.default_language,
        metrics=metrics,
    )


class Application:
    """Main application controller."""

    def __init__(self, config: Config):
        """
        Initialize application.

        Args:
            config: Application configuration
        """
        self.config = config
        self.host: Optional[Union[InMemoryHost, RemoteControlHost]] = None
        self.handler: Optional[SurveyCompletionHandler] = None
        self.api_server_task: Optional[asyncio.Task] = None
        self.running = False

    async def start(self) -> None:
        """Start the application."""
        logger.info("Starting Survey Webhook")
        logger.info(f"\n{self.config.display()}")

        logger.info("Initializing database...")
        db_engine = init_database(self.config.db_path)
        settings_store = DatabaseSettingsStore(db_engine)

        self.host = build_host(self.config)
        self.handler = build_handler(self.config, settings_store, self.host)

        # Make instances available to API routes
        set_config_instance(self.config)
        set_settings_store_instance(settings_store)
        set_handler_instance(self.handler)

        logger.info(f"Starting API server on {self.config.api_host}:{self.config.api_port}")
        self.api_server_task = asyncio.create_task(self._run_api_server())

        self.running = True
        logger.info("Application started successfully")

    async def stop(self) -> None:
        """Stop the application."""
        logger.info("Stopping Survey Webhook...")
        self.running = False

        if self.api_server_task:
            self.api_server_task.cancel()
            try:
                await self.api_server_task
            except asyncio.CancelledError:
                pass

        if self.handler:
            await self.handler.dispatcher.close()

        if isinstance(self.host, RemoteControlHost):
            await self.host.close()

        close_database()

        logger.info("Application stopped")

    async def _run_api_server(self) -> None:
        """Run the FastAPI server."""
        try:
            app = create_app(
                title=self.config.api_title,
                version=self.config.api_version,
                enable_metrics=self.config.metrics_enabled,
                bearer_token=self.config.api_bearer_token,
            )

            config = uvicorn.Config(
                app,
                host=self.config.api_host,
                port=self.config.api_port,
                log_level="info",
                access_log=True,
            )

            server = uvicorn.Server(config)
            await server.serve()

        except asyncio.CancelledError:
            logger.info("API server shutting down...")
            raise
        except Exception as e:
            logger.error(f"API server error: {e}", exc_info=True)
            if self.config.metrics_enabled:
                get_metrics().record_error("api_server", "server_failed")
        finally:
            self.running = False

    async def run(self) -> None:
        """Run the application until interrupted."""
        try:
            await self.start()

            while self.running:
                await asyncio.sleep(1)

        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        except Exception as e:
            logger.error(f"Application error: {e}", exc_info=True)
        finally:
            await self.stop()


def main() -> None:
    """Main entry point - delegates to CLI."""
    from .cli import cli
    cli()


if __name__ == "__main__":
    main()

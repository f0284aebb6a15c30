"""Main entry point - runs the API and the liquidity manager."""

import asyncio
import logging
import signal
from typing import Optional

import uvicorn

from penguin.api.app import create_app, ensure_deployed
from penguin.config import get_settings
from penguin.ledger.database import close_db, init_db
from penguin.routing import DryRunRouter
from penguin.services import LiquidityManager

logger = logging.getLogger(__name__)


class Application:
    """Main application that runs the API server and the liquify loop."""

    def __init__(self):
        self.settings = get_settings()
        self.liquidity_manager: Optional[LiquidityManager] = None
        self._shutdown_event = asyncio.Event()

    async def start(self):
        """Start all services."""
        log_level = logging.DEBUG if self.settings.debug else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        logger.info("Starting Penguin...")
        logger.info(f"Environment: {self.settings.environment}")

        await init_db()
        await ensure_deployed()
        logger.info("Database initialized")

        tasks = [asyncio.create_task(self._run_api())]
        logger.info("API task created")

        self.liquidity_manager = self._create_liquidity_manager()
        tasks.append(
            asyncio.create_task(
                self.liquidity_manager.run(self.settings.liquify_interval_seconds)
            )
        )
        logger.info("Liquidity manager task created")

        await self._shutdown_event.wait()

        if self.liquidity_manager is not None:
            self.liquidity_manager.stop()
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        await self._cleanup()

    def _create_liquidity_manager(self) -> LiquidityManager:
        """Build a manager that follows whichever address the token routes tax to."""
        # Seed the simulated pool at 1 pair unit per 1,000,000 tokens
        unit = self.settings.unit
        router = DryRunRouter(token_reserve=1_000_000 * unit, pair_reserve=unit)

        return LiquidityManager(
            router=router,
            token=self.settings.token_symbol,
            pair_asset=self.settings.pair_asset,
            threshold=self.settings.liquify_threshold_units,
            fraction_bps=self.settings.liquify_fraction_bps,
        )

    async def _run_api(self):
        """Run the FastAPI server."""
        try:
            app = create_app()
            config = uvicorn.Config(
                app,
                host=self.settings.api_host,
                port=self.settings.api_port,
                log_level="debug" if self.settings.debug else "info",
            )
            server = uvicorn.Server(config)
            logger.info(f"Starting API server on {self.settings.api_host}:{self.settings.api_port}")
            await server.serve()
        except asyncio.CancelledError:
            logger.info("API server cancelled")
        except Exception as e:
            logger.error(f"API error: {e}")
            raise

    async def _cleanup(self):
        """Cleanup resources."""
        logger.info("Cleaning up...")
        await close_db()
        logger.info("Cleanup complete")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()


def main():
    """Main entry point."""
    app = Application()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()

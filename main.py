import asyncio
import logging
from dotenv import load_dotenv
from sentry_monitor.models.config import AppConfig
from sentry_monitor.monitor import SentryMonitor

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

async def main():
    try:
        config = AppConfig.from_env()

        if config.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        if not config.sentry.is_configured():
            logger.error("Missing Sentry configuration (SENTRY_AUTH_TOKEN and SENTRY_ORG required)")
            return

        logger.info("Starting Sentry Monitor...")
        monitor = SentryMonitor(config)
        await monitor.start()

    except Exception as e:
        logger.error(f"Fatal error: {e}")
    except KeyboardInterrupt:
        logger.info("Monitor shutdown requested")

if __name__ == "__main__":
    asyncio.run(main())

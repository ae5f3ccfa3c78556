"""
Archon - Discord bot with Clockify webhook announcements

Usage:
    python bot.py

Environment Variables:
    BOT_TOKEN - Discord bot token (required)
    CLIENT_ID - Application ID used to register slash commands
    DEV_GUILD_ID - Register slash commands for this guild only
    COMMAND_PREFIX - Prefix for chat commands (default: ^)
    LOG_LEVEL - Logging level (default: INFO)
    LOG_FILE_PATH - Path for log files
    WEBHOOK_PORT - Port of the webhook server (default: 3030)
    CLOCKIFY_API_KEY - Clockify API key
    CLOCKIFY_WORKSPACE_ID - Clockify workspace
"""

import logging
import sys

from core.errors import ConfigurationError

# Set up basic logging first
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger('archon')


def main():
    """Main entry point for Archon"""
    try:
        logger.info("Starting Archon...")

        from services.bot_application import create_application

        app = create_application()
        app.run_sync()

    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

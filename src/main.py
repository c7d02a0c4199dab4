import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

from src.core.config import get_classifier_settings, get_server_settings, load_config

# --- Configuration & Setup ---

# Configure logging structure
# In a real container, these logs would be captured by Datadog/Splunk/CloudWatch
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("TriageProxy")

# Load environment variables
load_dotenv()


def main() -> None:
    logger.info("--- Starting Ticket Triage Proxy ---")

    # Fail fast if config is bad
    try:
        app_config = load_config("config.yaml")
        classifier_settings = get_classifier_settings(app_config)
        server_settings = get_server_settings(app_config)
    except Exception as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    if classifier_settings["strategy"] == "remote" and not os.getenv("ML_API_URL"):
        # Not fatal: the proxy still answers, every classification returns 502
        logger.error("ML_API_URL is missing from environment variables.")

    logger.info(
        f"Serving on {server_settings['host']}:{server_settings['port']} "
        f"with the '{classifier_settings['strategy']}' classifier."
    )
    uvicorn.run("src.api.main:app", host=server_settings["host"], port=server_settings["port"], log_level="info")


if __name__ == "__main__":
    main()

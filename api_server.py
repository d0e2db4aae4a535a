"""
API server entrypoint for the Wellness Minutes Ledger
"""
import os
import sys

# Add src to Python path (relative to api_server.py)
src_path = os.path.join(os.path.dirname(__file__), "src")
if os.path.exists(src_path) and src_path not in sys.path:
    sys.path.insert(0, src_path)

from wellness_ledger.main import app  # noqa: E402


if __name__ == "__main__":
    import uvicorn
    import logging

    logger = logging.getLogger(__name__)

    try:
        port = int(os.getenv("PORT", "8000"))
    except ValueError:
        logger.warning(f"Invalid PORT value: {os.getenv('PORT')}, using default 8000")
        port = 8000

    logger.info(f"Starting Wellness Minutes Ledger API on port {port}")
    logger.info(f"Health check endpoint: http://0.0.0.0:{port}/health")

    try:
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=port,
            log_config=None,  # Keep the structured logging set up by create_app
            access_log=True,
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=True)
        sys.exit(1)

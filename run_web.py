#!/usr/bin/env python3
"""
Main entry point for the Poolside scorekeeper web application.

This script launches the Flask-based operator API.
"""
from poolside.ui.web_app import run_web_app
from poolside.utils import APP_TITLE, get_app_config, init_logging

if __name__ == "__main__":
    config = get_app_config()
    logger = init_logging("web", level=config.LOG_LEVEL)
    logger.info("%s on http://%s:%s (state file: %s)", APP_TITLE, config.HOST, config.PORT, config.STATE_PATH)
    run_web_app(host=config.HOST, port=config.PORT, state_path=config.STATE_PATH)

#!/usr/bin/env python3
"""
Main entry point for the GameTime web application.

This script launches the Flask-based JSON API server.
"""
import argparse

from gametime.ui.web_app import run_web_app

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the GameTime match tracker")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=7122)
    parser.add_argument("--config", default=None, help="Path to a JSON config file")
    args = parser.parse_args()

    run_web_app(host=args.host, port=args.port, config_path=args.config)

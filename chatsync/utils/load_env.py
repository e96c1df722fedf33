#!/usr/bin/env python3
"""
Environment Variable Loader

Loads environment variables from a .env file so that `$VAR` references in
config.yaml (user id, server URLs, session headers) resolve before the
configuration is read.
"""

import os
import argparse
from typing import Optional

from dotenv import load_dotenv


def load_env(env_file: Optional[str] = None) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        env_file: Path to the .env file. If None, looks for .env in the current directory.

    Returns:
        bool: True if the file existed and was loaded
    """
    if env_file is None:
        env_file = ".env"

    if not os.path.exists(env_file):
        print(f"Warning: Environment file {env_file} not found.")
        print("Create one by copying .env.example: cp .env.example .env")
        return False

    # Values in the file take precedence over the inherited environment
    load_dotenv(env_file, override=True)
    print(f"Loaded environment variables from {env_file} (with override)")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load environment variables from a .env file")
    parser.add_argument("--env-file", type=str, help="Path to the .env file")
    args = parser.parse_args()

    load_env(args.env_file)

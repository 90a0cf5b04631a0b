"""Top-level package for the Fragment analytics ingestion service."""

__all__ = [
    "APP_ENV",
    "VERSION",
]

from dotenv import load_dotenv
import os
load_dotenv()

APP_ENV = os.getenv("APP_ENV", "production")

# Protocol version stamped on every normalized event
VERSION = "v1.0"

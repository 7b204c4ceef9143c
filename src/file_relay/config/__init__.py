"""
Configuration management for the File Relay.

Contains the Pydantic settings model and the cached accessor used by the app
factory, the CLI and the serverless entrypoint.
"""

from file_relay.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""
Simple Redis client manager that creates and tracks clients.
"""

import asyncio
import atexit
import threading
from typing import Dict

from loguru import logger
from redis.asyncio import Redis

from ..config import config
from .mongo import hide_password_in_connection_string


class RedisManager:
    """
    Simple Redis client manager.

    Features:
    - Creates and tracks one Redis client per label
    - Loads REDIS_URL_<LABEL> connection strings from configuration
    - Supports both standalone and cluster modes (`?mode=cluster`)
    - Ensures all clients are closed on process exit
    - Thread-safe singleton pattern
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, '_initialized'):
            return

        self._clients: Dict[str, Redis] = {}
        self._connection_strings: Dict[str, str] = {}
        self._connection_modes: Dict[str, str] = {}
        self._lock = threading.Lock()

        self._load_connection_strings()

        atexit.register(self._cleanup)

        self._initialized = True

    @staticmethod
    def _get_label_from_env_var(env_var: str) -> str | None:
        if env_var.startswith('REDIS_URL_'):
            return env_var[10:].lower()
        return None

    def _load_connection_strings(self):
        for key, value in config.items():
            label = self._get_label_from_env_var(key)
            if label is None or not value:
                continue

            self._connection_strings[label] = value
            mode = self._extract_mode_from_url(value)
            self._connection_modes[label] = mode
            logger.info(
                "Loaded Redis connection string for label '{}' (mode: {}): {}",
                label, mode, hide_password_in_connection_string(value)
            )

        if 'default' not in self._connection_strings:
            default_url = config.get_redis_url('default')
            self._connection_strings['default'] = default_url
            self._connection_modes['default'] = self._extract_mode_from_url(default_url)

        logger.info(
            "Loaded {} Redis connection strings: {}",
            len(self._connection_strings), list(self._connection_strings.keys())
        )

    @staticmethod
    def _extract_mode_from_url(connection_string: str) -> str:
        """Return 'cluster' or 'standalone' from the `mode=` query parameter."""
        _, _, query = connection_string.partition('?')
        for param in query.split('&'):
            if param.startswith('mode='):
                mode = param.split('=', 1)[1]
                if mode in ('cluster', 'standalone'):
                    return mode
        return 'standalone'

    @staticmethod
    def _clean_connection_string(connection_string: str) -> str:
        """Remove the `mode` parameter, which redis-py does not understand."""
        base_url, sep, query = connection_string.partition('?')
        if not sep:
            return connection_string

        clean_params = [param for param in query.split('&') if param and not param.startswith('mode=')]
        if clean_params:
            return f"{base_url}?{'&'.join(clean_params)}"
        return base_url

    def get_client(self, label: str | None = None) -> Redis:
        """
        Get Redis client by label.

        Raises:
            ValueError: If no connection string is configured for the label
        """
        label = label or 'default'

        with self._lock:
            if label not in self._clients:
                if label not in self._connection_strings:
                    raise ValueError(f"No Redis connection string found for label '{label}'")

                mode = self._connection_modes.get(label, 'standalone')
                clean_url = self._clean_connection_string(self._connection_strings[label])

                logger.info("Open Redis client for label '{}' (mode: {})", label, mode)

                if mode == 'cluster':
                    from redis.asyncio.cluster import RedisCluster
                    self._clients[label] = RedisCluster.from_url(clean_url, decode_responses=True)
                else:
                    self._clients[label] = Redis.from_url(clean_url, decode_responses=True)

            return self._clients[label]

    async def close_client(self, label: str):
        with self._lock:
            client = self._clients.pop(label, None)
        if client is None:
            return

        try:
            await client.aclose()
            logger.info("Closed Redis client for label '{}'", label)
        except Exception as e:
            logger.error("Error closing Redis client for label '{}': {}", label, e)

    async def close_all(self):
        with self._lock:
            labels = list(self._clients.keys())

        for label in labels:
            await self.close_client(label)

    def _cleanup(self):
        """Close whatever is still open when the process exits."""
        if not self._clients:
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.close_all())
        else:
            logger.warning("Event loop still running at exit, leaving {} Redis clients open", len(self._clients))


_redis_manager = None


def get_redis_manager() -> RedisManager:
    """Get the global Redis manager instance."""
    global _redis_manager
    if _redis_manager is None:
        _redis_manager = RedisManager()
    return _redis_manager


def get_redis_client(label: str | None = None) -> Redis:
    """Get Redis client by label."""
    return get_redis_manager().get_client(label)

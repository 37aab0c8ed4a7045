"""Lua script loading and invocation by SHA-1 digest.

Scripts are referenced by the SHA-1 of their source, which is what Redis
uses as the EVALSHA identifier. If the server has evicted a script (after
``SCRIPT FLUSH`` or a restart) the call is answered with NOSCRIPT; the runner
then reloads the body and retries the same call once.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from threading import Lock
from typing import Any, Optional, Sequence

import redis.asyncio as redis
from redis.exceptions import NoScriptError
import structlog

from ..core.errors import RemoteCommunicationError, ScriptNotCachedError
from ..observability.metrics import record_script_reload

logger = structlog.get_logger(__name__)

SCRIPT_NAMES = ("add", "cas", "check")
MAX_SCRIPT_RELOADS = 1

_PRELUDE = "common"

# script name -> (source, sha); written once per name, read without locking
_SCRIPTS: dict[str, tuple[str, str]] = {}
_SCRIPTS_LOCK = Lock()


def _read(name: str) -> str:
    return resources.files("redis_bloomfilter.scripts").joinpath(f"{name}.lua").read_text("utf-8")


def get_script(name: str) -> tuple[str, str]:
    """
    Return the full source and SHA-1 of a named script.

    Args:
        name: One of SCRIPT_NAMES

    Returns:
        Tuple of (source, sha)
    """
    cached = _SCRIPTS.get(name)
    if cached is not None:
        return cached
    if name not in SCRIPT_NAMES:
        raise KeyError(f"unknown script: {name}")
    source = _read(_PRELUDE) + "\n" + _read(name)
    sha = hashlib.sha1(source.encode("utf-8")).hexdigest()
    with _SCRIPTS_LOCK:
        return _SCRIPTS.setdefault(name, (source, sha))


class ScriptStatus(str, Enum):
    OK = "ok"
    NOT_CACHED = "not_cached"
    FAILED = "failed"


@dataclass(frozen=True)
class ScriptResult:
    """Outcome of one EVALSHA round trip."""

    status: ScriptStatus
    value: Any = None
    error: Optional[redis.RedisError] = None


class ScriptRunner:
    """Invokes the filter scripts on one Redis connection."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    async def ensure_loaded(self, names: Sequence[str] = SCRIPT_NAMES) -> None:
        """
        Load any script the server does not already cache.

        Raises:
            RemoteCommunicationError: If SCRIPT EXISTS or SCRIPT LOAD fails
        """
        shas = [get_script(name)[1] for name in names]
        try:
            exists = await self.client.script_exists(*shas)
        except redis.RedisError as e:
            raise RemoteCommunicationError("script_exists", str(e)) from e
        for name, loaded in zip(names, exists):
            if not loaded:
                await self.load(name)

    async def load(self, name: str) -> str:
        source, sha = get_script(name)
        try:
            loaded_sha = await self.client.script_load(source)
        except redis.RedisError as e:
            raise RemoteCommunicationError("script_load", str(e)) from e
        if isinstance(loaded_sha, bytes):
            loaded_sha = loaded_sha.decode("utf-8")
        if loaded_sha != sha:
            logger.warning("lua_script_sha_mismatch", script=name, expected=sha, actual=loaded_sha)
        logger.info("lua_script_loaded", script=name, sha=sha)
        return sha

    async def evalsha(self, name: str, keys: Sequence[str], args: Sequence[Any]) -> ScriptResult:
        _, sha = get_script(name)
        try:
            value = await self.client.evalsha(sha, len(keys), *keys, *args)
        except NoScriptError as e:
            return ScriptResult(ScriptStatus.NOT_CACHED, error=e)
        except redis.RedisError as e:
            return ScriptResult(ScriptStatus.FAILED, error=e)
        return ScriptResult(ScriptStatus.OK, value=value)

    async def run(self, name: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        """
        Invoke a script, reloading it at most once on NOSCRIPT.

        Args:
            name: Script name
            keys: KEYS passed to the script
            args: ARGV passed to the script

        Returns:
            The script's reply

        Raises:
            ScriptNotCachedError: If NOSCRIPT is returned again after reload
            RemoteCommunicationError: For any other Redis failure
        """
        reloads = 0
        while True:
            result = await self.evalsha(name, keys, args)
            if result.status is ScriptStatus.OK:
                return result.value
            if result.status is ScriptStatus.FAILED:
                raise RemoteCommunicationError(f"evalsha:{name}", str(result.error)) from result.error
            if reloads >= MAX_SCRIPT_RELOADS:
                raise ScriptNotCachedError(name, get_script(name)[1]) from result.error
            reloads += 1
            logger.warning("lua_script_not_cached", script=name)
            record_script_reload(name)
            await self.load(name)

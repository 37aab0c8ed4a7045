"""Execution strategies for the Bloom filter bit operations."""

from .base import SCRIPTING_MIN_VERSION, Driver, FilterDriver
from .lua import LuaDriver
from .pipeline import PipelineDriver
from .scripts import ScriptResult, ScriptRunner, ScriptStatus, get_script

__all__ = [
    "Driver",
    "FilterDriver",
    "LuaDriver",
    "PipelineDriver",
    "SCRIPTING_MIN_VERSION",
    "ScriptResult",
    "ScriptRunner",
    "ScriptStatus",
    "get_script",
]

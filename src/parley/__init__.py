"""Parley - one output template, many conversational platforms."""

from parley.app import App
from parley.config import ParleySettings, get_settings, resolve
from parley.errors import (
    ConfigMergeError,
    DuplicateIdentityError,
    LifecycleHookError,
    LifecycleStateError,
    ParleyError,
    UnsupportedConversionError,
)
from parley.extensible import Extensible
from parley.hookspecs import hookimpl
from parley.platforms import CorePlatform, Platform, PlatformDescriptor, make_platform
from parley.plugin import Plugin, PluginDefinition, PluginState

__version__ = "0.1.0"

__all__ = [
    "App",
    "ConfigMergeError",
    "CorePlatform",
    "DuplicateIdentityError",
    "Extensible",
    "LifecycleHookError",
    "LifecycleStateError",
    "ParleyError",
    "ParleySettings",
    "Platform",
    "PlatformDescriptor",
    "Plugin",
    "PluginDefinition",
    "PluginState",
    "UnsupportedConversionError",
    "get_settings",
    "hookimpl",
    "make_platform",
    "resolve",
]

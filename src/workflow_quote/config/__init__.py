"""Configuration subpackage - settings and logging setup."""
from .settings import Settings, get_settings, reset_settings
from .log_setup import setup_logging

__all__ = ['Settings', 'get_settings', 'reset_settings', 'setup_logging']

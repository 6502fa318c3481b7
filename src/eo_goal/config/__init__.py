"""Configuration module for the EO goal tracker."""

from eo_goal.config.logging import bind_run_context, configure_logging
from eo_goal.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging", "bind_run_context"]

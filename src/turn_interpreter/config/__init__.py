"""Configuration module."""

from .settings import InterpreterConfig, load_config, setup_logging

__all__ = ["InterpreterConfig", "load_config", "setup_logging"]

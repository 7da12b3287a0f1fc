"""
Logging configuration for technology period evaluations.

Levels are set per calculation stage (cost/share/production) in logging_config.yaml. The stage
that is currently running is tracked thread-locally, so DEBUG records from shared helpers are
kept or dropped depending on which stage called them.

Usage:
    # At start-up
    LoggingConfig.configure_from_yaml("logging_config.yaml", logging.INFO)

    # Around each stage of a subsector pass
    with LoggingConfig.simulation_logging("ShareEngine"):
        runner.calculate_shares(...)
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

import yaml

# Thread-local storage for the stage currently running
_current_module = threading.local()

STAGE_TO_MODULE = {
    "CostEngine": "cost",
    "ShareEngine": "share",
    "ProductionDispatcher": "production",
}


class ShortNameFormatter(logging.Formatter):
    """
    Formatter that prints the stage and the last part of the logger name.

        ERROR:techshare.domain.models:Requested fuel ...
    becomes
        ERROR   | COST       | models: Requested fuel ...
    """

    def format(self, record: logging.LogRecord) -> str:
        short_name = record.name.rsplit(".", 1)[-1]
        context = getattr(_current_module, "name", None)
        context_str = context.upper() if context else "SETUP"
        return f"{record.levelname:<7} | {context_str:<10} | {short_name}: {record.getMessage()}"


class ContextAwareFilter(logging.Filter):
    """
    Decide on DEBUG records from the stage that is running.

    Records above DEBUG always pass unless a logger override says otherwise. Inside a stage,
    DEBUG passes if the stage's level allows it; outside any stage the CLI level decides.
    """

    def __init__(
        self,
        module_levels: Dict[str, int],
        function_overrides: Dict[str, int],
        cli_level: Optional[int] = None,
    ):
        """
        Args:
            module_levels: Mapping of stage names (cost/share/production) to logging levels
            function_overrides: Mapping of short logger names to logging levels
            cli_level: Level used outside stages; also a ceiling for the stage levels
        """
        super().__init__()
        self.module_levels = module_levels
        self.function_overrides = function_overrides
        self.cli_level = cli_level if cli_level is not None else logging.WARNING

    def filter(self, record: logging.LogRecord) -> bool:
        short_name = record.name.rsplit(".", 1)[-1]
        if short_name in self.function_overrides:
            return record.levelno >= self.function_overrides[short_name]

        if record.levelno > logging.DEBUG:
            return True

        current_module = getattr(_current_module, "name", None)
        if not current_module:
            return record.levelno >= self.cli_level
        return self.module_levels.get(current_module, logging.INFO) <= logging.DEBUG


class LoggingConfig:
    """Manages logging configuration for period evaluations."""

    # Write per-period diagnostic JSON next to the results (set from YAML)
    DEBUG_DUMP = False

    _installed_filter: Optional[ContextAwareFilter] = None

    @classmethod
    @contextmanager
    def module_context(cls, module_name: str) -> Iterator[None]:
        """
        Mark ``module_name`` (cost/share/production) as the running stage.

        Example:
            with LoggingConfig.module_context("cost"):
                logger.debug("kept if the cost stage is configured at DEBUG")
        """
        previous = getattr(_current_module, "name", None)
        _current_module.name = module_name
        try:
            yield
        finally:
            _current_module.name = previous

    @classmethod
    def current_module(cls) -> Optional[str]:
        return getattr(_current_module, "name", None)

    @classmethod
    def configure_from_yaml(cls, yaml_path: str | Path, cli_max_level: Optional[int] = None) -> None:
        """
        Load the YAML configuration and install the filter and formatter on the root logger.

        Args:
            yaml_path: Path to logging_config.yaml
            cli_max_level: Optional CLI level, applied as a ceiling to every stage

        Example YAML structure:
            version: 1
            features:
              debug_dump: false
            modules:
              cost: INFO
              share: DEBUG
              production: INFO
            function_overrides:
              in_memory_marketplace: INFO
        """
        with open(yaml_path) as f:
            config = yaml.safe_load(f) or {}
        cls.configure(config, cli_max_level)

    @classmethod
    def configure(cls, config: dict, cli_max_level: Optional[int] = None) -> None:
        module_levels = {}
        for module, level_str in config.get("modules", {}).items():
            level = getattr(logging, level_str)
            if cli_max_level:
                level = max(level, cli_max_level)
            module_levels[module] = level

        function_overrides = {
            name: getattr(logging, level_str) for name, level_str in config.get("function_overrides", {}).items()
        }

        features = config.get("features", {})
        cls.DEBUG_DUMP = features.get("debug_dump", False)

        context_filter = ContextAwareFilter(module_levels, function_overrides, cli_max_level)
        formatter = ShortNameFormatter()

        root = logging.getLogger()
        if cls._installed_filter is not None:
            root.removeFilter(cls._installed_filter)
            for h in root.handlers:
                h.removeFilter(cls._installed_filter)
        root.addFilter(context_filter)
        cls._installed_filter = context_filter

        if not root.handlers:
            stream_handler = logging.StreamHandler()
            stream_handler.setLevel(cli_max_level or logging.DEBUG)
            root.addHandler(stream_handler)
            root.setLevel(cli_max_level or logging.DEBUG)

        for h in root.handlers:
            h.addFilter(context_filter)
            h.setFormatter(formatter)

        for logger_name, level_str in config.get("external", {}).items():
            logging.getLogger(logger_name).setLevel(getattr(logging, level_str))

    @classmethod
    @contextmanager
    def simulation_logging(cls, stage_name: str) -> Iterator[None]:
        """
        Run a calculation stage under its logging context.

        - CostEngine -> cost
        - ShareEngine -> share
        - ProductionDispatcher -> production

        Unknown stage names run without a context.
        """
        module = STAGE_TO_MODULE.get(stage_name)
        logging.getLogger(__name__).debug("Running %s with configured logging levels", stage_name)
        if module:
            with cls.module_context(module):
                yield
        else:
            yield

# ============================================================================
# CLAUDE CONTEXT - LOGGING
# ============================================================================
# STATUS: Shared - used by every golquery layer
# PURPOSE: JSON-only structured logging for the GOL feature store facade
# EXPORTS: ComponentType, LogLevel, LogContext, ComponentConfig, JSONFormatter, LoggerFactory, log_exceptions, get_memory_stats, log_memory_checkpoint
# INTERFACES: Dataclass models, enums, factory, JSON formatter, exception decorator, debug-mode memory tracking
# DEPENDENCIES: enum, dataclasses, typing, datetime, logging, json, traceback, psutil
# SOURCE: Facade layers define component types
# SCOPE: Foundation and factory layers for all logging in the package
# VALIDATION: Simple type checking via dataclasses
# PATTERNS: JSON-only output, Exception decorator pattern
# ENTRY_POINTS: LoggerFactory.create_logger(), @log_exceptions decorator
# ============================================================================

"""
Unified Logger System - Schemas and Factory

Single module holding the logging schemas (component types, levels, context)
and the factory that turns them into configured stdlib loggers.

Design Principles:
- Strong typing with dataclasses
- Enum safety for categories
- Component-specific loggers
- Clean factory pattern
- One JSON object per line on stderr, leaving stdout to the caller

Date: 19 OCT 2026
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import os
import sys
import json
import traceback
from functools import wraps

import psutil


# ============================================================================
# DEBUG MODE - Memory tracking around large materializations
# ============================================================================

def get_memory_stats(debug_mode: Optional[bool] = None) -> Optional[Dict[str, float]]:
    """
    Get current process and system memory statistics.

    Only executes if debug mode is enabled. When the caller does not pass
    debug_mode, the golquery configuration decides.

    Args:
        debug_mode: Explicit debug flag; None reads the configuration

    Returns:
        dict with memory stats or None if debug disabled
        {
            'process_rss_mb': float,      # Resident Set Size (actual RAM used)
            'process_vms_mb': float,      # Virtual Memory Size
            'system_available_mb': float, # Available system memory
            'system_percent': float       # System memory usage %
        }
    """
    if debug_mode is None:
        try:
            from golquery.config import get_golquery_config
            debug_mode = get_golquery_config().debug_mode
        except Exception as e:
            # Debug feature must never break the operation being measured
            print(f"debug_mode check failed: {e}", file=sys.stderr, flush=True)
            return None

    if not debug_mode:
        return None

    process = psutil.Process(os.getpid())
    mem_info = process.memory_info()
    system_mem = psutil.virtual_memory()

    return {
        'process_rss_mb': round(mem_info.rss / (1024**2), 1),
        'process_vms_mb': round(mem_info.vms / (1024**2), 1),
        'system_available_mb': round(system_mem.available / (1024**2), 1),
        'system_percent': round(system_mem.percent, 1)
    }


def log_memory_checkpoint(logger: logging.Logger, checkpoint_name: str,
                          debug_mode: Optional[bool] = None, **extra_fields):
    """
    Log a memory usage checkpoint.

    Only logs if debug_mode is on. Otherwise, this is a no-op.

    Args:
        logger: Python logger instance
        checkpoint_name: Descriptive name for this checkpoint
        debug_mode: Explicit debug flag; None reads the configuration
        **extra_fields: Additional context fields (e.g., feature_count=12000)

    Example:
        logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "QueryResult")
        log_memory_checkpoint(logger, "After materialize", feature_count=12000)
    """
    mem_stats = get_memory_stats(debug_mode)
    if mem_stats:
        all_fields = {**mem_stats, **extra_fields, 'checkpoint': checkpoint_name}
        logger.info(f"MEMORY CHECKPOINT: {checkpoint_name}", extra={'custom_dimensions': all_fields})


# ============================================================================
# COMPONENT TYPES - Aligned with facade layers
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the facade layers.

    Each layer has specific logging needs and levels.
    """
    SERVICE = "service"        # Query builders
    REPOSITORY = "repository"  # FeatureStore / QueryResult
    FACTORY = "factory"        # Engine registry
    TRIGGER = "trigger"        # Command-line entry point
    ADAPTER = "adapter"        # Engine adapters
    VALIDATOR = "validator"    # Store path validation


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


# ============================================================================
# LOG CONTEXT - Store and query correlation
# ============================================================================

@dataclass
class LogContext:
    """
    Context for log correlation across one store's lifetime.

    Every query issued against a store shares the store path and engine
    name, so they are attached once to the store's logger.
    """
    store_path: Optional[str] = None  # GOL file the store was opened from
    engine: Optional[str] = None  # Engine adapter name (geodesk, memory)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'store_path': self.store_path,
                'engine': self.engine
            }.items() if v is not None
        }


# ============================================================================
# COMPONENT CONFIGURATION - Per-component settings
# ============================================================================

@dataclass
class ComponentConfig:
    """
    Configuration for component-specific logging.

    Each component type can have different settings.
    """
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# ============================================================================
# JSON FORMATTER - Structured logging
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs one JSON object per record so log shippers can parse it directly.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    This factory creates Python loggers configured for each
    component type with appropriate settings and context.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.REPOSITORY,
            "FeatureStore"
        )
        logger.info("Opening store")
    """

    # Check environment variable for debug mode
    default_level = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO

    DEFAULT_CONFIGS = {
        ComponentType.SERVICE: ComponentConfig(
            component_type=ComponentType.SERVICE,
            log_level=default_level
        ),
        ComponentType.REPOSITORY: ComponentConfig(
            component_type=ComponentType.REPOSITORY,
            log_level=default_level
        ),
        ComponentType.FACTORY: ComponentConfig(
            component_type=ComponentType.FACTORY,
            log_level=default_level
        ),
        ComponentType.TRIGGER: ComponentConfig(
            component_type=ComponentType.TRIGGER,
            log_level=default_level
        ),
        ComponentType.ADAPTER: ComponentConfig(
            component_type=ComponentType.ADAPTER,
            log_level=default_level
        ),
        ComponentType.VALIDATOR: ComponentConfig(
            component_type=ComponentType.VALIDATOR,
            log_level=default_level
        )
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "FeatureStore")
            context: Optional log context for correlation
            config: Optional custom configuration

        Returns:
            Configured Python logger
        """
        if config is None:
            config = cls.DEFAULT_CONFIGS.get(
                component_type,
                ComponentConfig(component_type=component_type)
            )

        # Create hierarchical logger name
        logger_name = f"golquery.{component_type.value}.{name}"
        logger = logging.getLogger(logger_name)

        # Set log level - handle both LogLevel enum and string
        if isinstance(config.log_level, str):
            log_level = LogLevel.from_string(config.log_level).to_python_level()
        else:
            log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()

        # stderr: stdout carries command output such as GeoJSON
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(log_level)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

        # Still reach the root logger so host applications and pytest's caplog see records
        logger.propagate = True

        # Unwrap a previous context wrapper so repeated creation does not stack them
        original_log = getattr(logger, '_golquery_original_log', logger._log)
        logger._golquery_original_log = original_log

        def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
            """Wrapper to inject context as custom dimensions."""
            if extra is None:
                extra = {}

            if context:
                custom_dims = context.to_dict()
                custom_dims['component_type'] = component_type.value
                custom_dims['component_name'] = name
            else:
                custom_dims = {
                    'component_type': component_type.value,
                    'component_name': name
                }

            if 'custom_dimensions' in extra:
                custom_dims.update(extra['custom_dimensions'])

            extra['custom_dimensions'] = custom_dims

            # One extra frame so records point at the caller, not this wrapper
            original_log(level, msg, args, exc_info=exc_info, extra=extra,
                         stack_info=stack_info, stacklevel=stacklevel + 1)

        logger._log = log_with_context

        return logger


# ============================================================================
# EXCEPTION DECORATOR - Automatic exception logging with context
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to automatically log exceptions with full context.

    Can be used in three ways:
    1. With existing logger: @log_exceptions(logger=my_logger)
    2. With component info: @log_exceptions(ComponentType.TRIGGER, "cli")
    3. Simple: @log_exceptions() - uses function module and name

    Args:
        component_type: Optional component type for creating logger
        component_name: Optional component name for creating logger
        logger: Optional existing logger to use

    Returns:
        Decorator function that wraps the target function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if logger:
                log = logger
            elif component_type and component_name:
                log = LoggerFactory.create_logger(component_type, component_name)
            else:
                log = LoggerFactory.create_logger(
                    ComponentType.SERVICE,
                    func.__module__ or "unknown"
                )

            try:
                return func(*args, **kwargs)
            except Exception as e:
                log.error(
                    f"Exception in {func.__name__}",
                    exc_info=True,
                    extra={
                        'custom_dimensions': {
                            'function_name': func.__name__,
                            'function_module': func.__module__,
                            'exception_type': type(e).__name__,
                            'exception_message': str(e),
                            'function_args': str(args)[:500],
                            'function_kwargs': str(kwargs)[:500],
                            'traceback': traceback.format_exc()
                        }
                    }
                )
                # Re-raise the exception - don't swallow it
                raise
        return wrapper
    return decorator

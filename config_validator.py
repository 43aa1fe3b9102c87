import logging
from urllib.parse import urlparse

from error_handler import ConfigurationError

logger = logging.getLogger('chart_assistant.config_validator')

NUMERIC_DEFAULTS = {
    'request_timeout_seconds': 30,
    'rate_limit_max_requests': 10,
    'rate_limit_window_seconds': 60,
    'max_message_length': 10000,
    'max_history_length': 100,
    'max_conversation_id_length': 100,
    'pie_max_rows': 8,
}

FLOAT_SETTINGS = ('request_timeout_seconds', 'rate_limit_window_seconds')


def _validate_url(config_module, attr_name, display_name=None):
    """Validate a URL configuration attribute; https is mandatory in production."""
    if display_name is None:
        display_name = attr_name.replace('_', ' ').title()

    value = getattr(config_module, attr_name, "")
    if not isinstance(value, str) or not value:
        logger.error(f"{display_name} not found in config or is empty")
        raise ConfigurationError(f"{display_name} is missing or empty in config")

    parsed = urlparse(value)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        logger.error(f"{display_name} in config is not a valid HTTP/HTTPS URL: '{value}'")
        raise ConfigurationError(f"{display_name} is not a valid HTTP/HTTPS URL")

    if getattr(config_module, 'app_env', 'development') == 'production' and parsed.scheme != 'https':
        logger.error(f"{display_name} must use https in production")
        raise ConfigurationError(f"{display_name} must use https in production")


def _validate_positive_number(config_module, attr_name, default):
    """Coerce a numeric setting, falling back to its default when invalid."""
    raw_value = getattr(config_module, attr_name, default)
    cast = float if attr_name in FLOAT_SETTINGS else int

    try:
        value = cast(raw_value)
        if value <= 0:
            logger.warning(f"{attr_name} in config ('{raw_value}') must be positive. Using default.")
            value = default
    except (ValueError, TypeError):
        logger.warning(f"Invalid {attr_name} in config ('{raw_value}'), using default.")
        value = default

    setattr(config_module, attr_name, value)
    return value


def _validate_app_env(config_module):
    app_env = getattr(config_module, 'app_env', 'development')
    if app_env not in ('development', 'production'):
        logger.warning(f"Unknown app_env '{app_env}' in config. Using development.")
        config_module.app_env = 'development'


def validate_config(config_module):
    """
    Validate the configuration module (config.py)

    Args:
        config_module: The imported config module

    Returns:
        bool: True if the configuration is valid

    Raises:
        ConfigurationError: If the webhook URL is unusable (a ValueError)
    """
    _validate_app_env(config_module)

    _validate_url(config_module, "webhook_url", display_name="Webhook URL")
    logger.info(f"Using webhook at {config_module.webhook_url}")

    for attr_name, default in NUMERIC_DEFAULTS.items():
        _validate_positive_number(config_module, attr_name, default)

    logger.info(
        f"Rate limit configured: {config_module.rate_limit_max_requests} requests per "
        f"{config_module.rate_limit_window_seconds}s per conversation"
    )

    return True

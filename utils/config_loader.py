# StockPulse/utils/config_loader.py
import yaml
import os
import logging

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "settings.yaml")


def load_app_config(config_path=DEFAULT_CONFIG_PATH):
    """
    Loads application configuration from a YAML file.
    Returns the config dict, or a dict with an 'error' key on failure.
    """
    if not os.path.exists(config_path):
        logging.error(f"Configuration file not found: {config_path}")
        return {"error": f"Configuration file not found: {config_path}"}
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logging.info(f"Configuration loaded from {config_path}")
        return config
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Error loading configuration from {config_path}: {e}")
        return {"error": f"Error loading configuration from {config_path}: {e}"}


def setup_logging(config):
    """
    Configures logging based on the loaded configuration.
    Overrides any pre-existing handlers on the root logger.
    """
    log_config = config.get('logging', {})
    if not log_config:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
        return

    level_str = log_config.get('level', 'INFO').upper()
    level = getattr(logging, level_str, logging.INFO)
    log_format = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_file = log_config.get('file_name')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    if log_file:
        log_file_path = log_file if os.path.isabs(log_file) else os.path.join(PROJECT_ROOT, log_file)
        try:
            file_handler = logging.FileHandler(log_file_path, mode='a')
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(log_format))
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"ERROR: Could not create log file handler for {log_file_path}. Error: {e}")

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(stream_handler)

    logging.info(f"Logging configured. Level: {level_str}. Log file: {log_file or 'disabled'}")


def save_app_config(config_data, config_path=DEFAULT_CONFIG_PATH):
    """Saves the configuration dictionary to a YAML file."""
    try:
        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)
        logging.info(f"Configuration saved successfully to {config_path}")
        return True
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Error saving configuration to {config_path}: {e}", exc_info=True)
        return False


def get_section(name, config=None):
    """Returns a config section as a dict, empty when missing or when config failed to load."""
    config = APP_CONFIG if config is None else config
    if "error" in config:
        return {}
    section = config.get(name) or {}
    return section if isinstance(section, dict) else {}


# --- Main config loading logic ---
# This block runs when the module is first imported.
APP_CONFIG = load_app_config()
if "error" not in APP_CONFIG:
    setup_logging(APP_CONFIG)
else:
    logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.warning(f"Using fallback logging due to config error: {APP_CONFIG.get('error')}")

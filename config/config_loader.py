import json
import os
from datetime import datetime

DEFAULT_CONFIG_PATH = "config/runtime_config.json"

DEFAULT_CONFIG = {
    "max_steps": 100_000,
    "allow_undefined": False,
    "tape_window": 20,
    "transition_display_limit": 10,
    "history_limit": 10_000,
    "step_delay": 0.0,
    "worker_threads": 4,
    "batch_size": 256,
    "output_directory": "logs/",
    "log_file_prefix": "turing_",
    "results_directory": "results/"
}

# Expected types for validation
CONFIG_SCHEMA = {
    "max_steps": int,
    "allow_undefined": bool,
    "tape_window": int,
    "transition_display_limit": int,
    "history_limit": int,
    "step_delay": (int, float),
    "worker_threads": int,
    "batch_size": int,
    "output_directory": str,
    "log_file_prefix": str,
    "results_directory": str
}

POSITIVE_KEYS = ("max_steps", "tape_window", "worker_threads", "batch_size")


def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        value = config[key]
        # bool is an int subclass; only accept it where a bool is expected
        if isinstance(value, bool) and expected_type is not bool:
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")
        if not isinstance(value, expected_type):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")

    for key in POSITIVE_KEYS:
        if config[key] <= 0:
            raise ValueError(f"Config key '{key}' must be positive, got {config[key]}.")
    for key in ("transition_display_limit", "history_limit", "step_delay"):
        if config[key] < 0:
            raise ValueError(f"Config key '{key}' must not be negative, got {config[key]}.")


def load_config(path=DEFAULT_CONFIG_PATH, echo=False):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    validate_config(config)

    os.makedirs(config["output_directory"], exist_ok=True)

    if echo:
        print(f"[{datetime.now()}] Loaded config:")
        for key, value in config.items():
            print(f"  {key}: {value}")

    return config


def load_config_or_default(path=DEFAULT_CONFIG_PATH):
    """Runtime config when the file exists, the validated defaults otherwise."""
    if os.path.exists(path):
        return load_config(path)
    config = DEFAULT_CONFIG.copy()
    validate_config(config)
    return config


def save_config(config, path=DEFAULT_CONFIG_PATH):
    validate_config(config)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)

"""Tool configuration (optional YAML file over built-in defaults)."""

import os

import yaml

DEFAULTS = {
    "output_dir": "output",
    "log_level": "INFO",
    "mark_values": "1,X,x,YES,yes",
    "records_header": "RoleName",
    "a_header": "RoleName",
    "b_header": "EntitlementName",
    "compare_report_limit": 200,
}


def load_config(config_path):
    """Load configuration from a YAML file."""
    config = dict(DEFAULTS)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        config.update(user_config)
    return config

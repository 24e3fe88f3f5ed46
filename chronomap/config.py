"""
Engine Configuration Manager for chronomap
Handles loading and saving clustering, layout and zoom preferences.
"""

import copy
import json
import logging
import os

# Configure logger
logger = logging.getLogger(__name__)


class EngineConfig:
    """
    Manages engine preferences.
    Preferences are stored under a 'chronomap' key of a JSON config file,
    so the file can be shared with other application settings.
    """

    CONFIG_KEY = 'chronomap'

    DEFAULT_CONFIG = {
        'clustering': {
            'base_threshold_pixels': 50.0,
            'min_threshold': 20.0,
            'spatial_radius': 30.0
        },
        'labels': {
            'line_height': 20.0,
            'overlap_pixels': 100.0,
            'sort_by_x': False
        },
        'zoom': {
            'min_scale': 1.0,
            'max_scale': 1000000.0,
            'wheel_delta_factor': 0.002,
            'go_to_date_months': 6
        },
        'fit': {
            'padding_ratio': 0.2,
            'min_padding_days': 30
        },
        'debounce': {
            'quiescence_ms': 50
        },
        'viewport': {
            'buffer_ratio': 0.0
        }
    }

    def __init__(self, config_file=None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file (optional)
        """
        self.config_file = config_file
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file and os.path.exists(config_file):
            self.load()

    def load(self):
        """
        Load preferences from the configuration file.

        Unknown sections and keys are ignored. A missing or empty file leaves
        the defaults in place.

        Raises:
            json.JSONDecodeError: If the file is not valid JSON
        """
        if not self.config_file or not os.path.exists(self.config_file):
            return

        if os.path.getsize(self.config_file) == 0:
            return

        with open(self.config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        section_data = data.get(self.CONFIG_KEY, {})
        for section, values in section_data.items():
            if section not in self.config:
                logger.warning(f"Ignoring unknown config section '{section}'")
                continue
            for key, value in values.items():
                if key not in self.config[section]:
                    logger.warning(f"Ignoring unknown config key '{section}.{key}'")
                    continue
                self.config[section][key] = value

        logger.info(f"Loaded engine configuration from {self.config_file}")

    def save(self):
        """Save preferences to the configuration file, keeping other sections."""
        if not self.config_file:
            return

        existing_data = {}
        if os.path.exists(self.config_file) and os.path.getsize(self.config_file) > 0:
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    existing_data = json.load(f)
            except json.JSONDecodeError:
                # File exists but is not valid JSON, start fresh
                logger.warning(f"Overwriting invalid config file {self.config_file}")
                existing_data = {}

        existing_data[self.CONFIG_KEY] = self.config

        config_dir = os.path.dirname(self.config_file)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(existing_data, f, indent=2)

    def get(self, section, key):
        """
        Get a preference value.

        Raises:
            KeyError: If the section or key does not exist
        """
        return self.config[section][key]

    def set(self, section, key, value):
        """
        Set a preference value.

        Raises:
            KeyError: If the section or key does not exist
        """
        if key not in self.config[section]:
            raise KeyError(f"Unknown config key '{section}.{key}'")
        self.config[section][key] = value

    def reset_to_defaults(self):
        """Reset all preferences to default values."""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

"""
Settings of RestFrame.

Values come from `restframe.conf.default_config`, overridden by the module
named in the RESTFRAME_CONFIG environment variable. Flask apps initialized
with `RestFrame` hold a copy in `app.config`, where per-app overrides go.
"""

import importlib
import logging
import os

from flask import current_app, has_app_context

from restframe.conf import default_config
from restframe.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "RESTFRAME_CONFIG"
DEFAULT_CONFIG_MODULE = "restframe.conf.default_config"


def _settings_of(module):
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


class Config:
    """UPPER_CASE settings loaded from the defaults and a config module

    :param config_module_str: Dotted path of the module overriding the
        defaults. The RESTFRAME_CONFIG environment variable wins over it.
    """

    def __init__(self, config_module_str=None):
        module_path = os.environ.get(ENVIRONMENT_VARIABLE, config_module_str)
        if not module_path:
            logger.debug(f"No config module given, using {DEFAULT_CONFIG_MODULE}")
            module_path = DEFAULT_CONFIG_MODULE

        self.CONFIG_MODULE = importlib.import_module(module_path)

        settings = _settings_of(default_config)
        settings.update(_settings_of(self.CONFIG_MODULE))
        for name, value in settings.items():
            setattr(self, name, value)

        if not getattr(self, "SECRET_KEY", None):
            raise ConfigurationError("The SECRET_KEY setting must not be empty.")

    def as_dict(self):
        """Settings by name, without the config module itself"""
        return {
            name: getattr(self, name)
            for name in dir(self)
            if name.isupper() and name != "CONFIG_MODULE"
        }

    def __repr__(self):
        return f'<{self.__class__.__name__} "{self.CONFIG_MODULE.__name__}">'


active_config = Config()


def get_setting(name, default=None):
    """Look up a setting, preferring the config of the running Flask app"""
    if has_app_context() and name in current_app.config:
        return current_app.config[name]
    return getattr(active_config, name, default)

# -*- coding: utf-8 -*-
import os
import yaml
import logging


MINUTE = 60
HOUR = 60 * MINUTE


def format_duration(seconds):
    """Short human readable elapsed time, like ``3m 4s`` or ``5.6s``"""
    # tenths of second
    remainder = int(round(float(seconds) * 10))
    hours, remainder = divmod(remainder, HOUR * 10)
    minutes, remainder = divmod(remainder, MINUTE * 10)
    secs, tenths = divmod(remainder, 10)
    if hours > 0:
        return "%sh %sm" % (hours, minutes)
    elif minutes > 0:
        return "%sm %ss" % (minutes, secs)
    return "%s.%ss" % (secs, tenths)


def load_yaml(path, logger=None):
    if not logger:
        logger = logging.getLogger(__name__)
    logger.debug("Reading YAML file: %s" % path)
    try:
        with open(path) as file:
            data = yaml.load(file, Loader=yaml.SafeLoader)
    except IOError as e:
        logger.error("Cannot read YAML file. %s" % (str(e)))
        raise
    except yaml.YAMLError as e:
        msg = "Invalid YAML in '%s': %s" % (path, str(e))
        logger.error(msg)
        raise ValueError(msg)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = "YAML file '%s' must contain a mapping" % path
        logger.error(msg)
        raise ValueError(msg)
    return data



class ContainerConfig(object):
    """Per container settings read from ``<config_dir>/<name>.yml``"""

    def __init__(self, config_dir=None, logger=None):
        if not logger:
            logger = logging.getLogger(self.__class__.__name__)
        self.logger = logger
        self.config_dir = config_dir

    def get(self, name, defaults={}):
        config = dict(defaults)
        if not self.config_dir:
            return config
        path = os.path.join(self.config_dir, name + '.yml')
        if not os.path.isfile(path):
            self.logger.debug("No configuration for container '%s' in %s" % (name, self.config_dir))
            return config
        config.update(load_yaml(path, self.logger))
        return config

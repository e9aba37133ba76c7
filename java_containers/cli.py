# -*- coding: utf-8 -*-
"""
Buildpack interface (detect, compile, release) for the Karaf and Tarball containers
"""
__purpose__ = """
Runs one step of the Cloudfoundry buildpack lifecycle for the application folder.
`detect` prints the name of the containers able to run the application, `compile`
downloads and prepares the container, and `release` prints the YAML document with
the start command of the application (default_process_types/web).
"""

import os
import sys
import time
import yaml
import logging
import argparse

from . import __program__, __version__
from .cache import ApplicationCache
from .config import ContainerConfig
from .containers import CONTAINERS
from .errors import StagingError


def get_containers(args, logger):
    config = ContainerConfig(args.config_dir, logger)
    cache = None
    if getattr(args, 'cache_dir', None):
        cache = ApplicationCache(args.cache_dir, logger=logger)
    result = []
    for cls in CONTAINERS:
        name = cls.__name__.lower()
        container = cls(args.app_dir, args.java_home, list(args.java_opt),
            config.get(name), cache, logger)
        result.append(container)
    return result


def detected(containers, logger):
    found = [c for c in containers if c.detect()]
    logger.debug("Detected containers: %s" % [c.name for c in found])
    return found


def single(containers, logger):
    found = detected(containers, logger)
    if not found:
        msg = "No container can run the application"
        logger.error(msg)
        raise StagingError(msg)
    if len(found) > 1:
        msg = "Application can be run by more than one container: %s" % ", ".join(c.name for c in found)
        logger.error(msg)
        raise StagingError(msg)
    return found[0]


def run_detect(args, logger):
    found = detected(get_containers(args, logger), logger)
    if not found:
        return 1
    print(" ".join(c.name for c in found), flush=True)
    return 0


def run_compile(args, logger):
    container = single(get_containers(args, logger), logger)
    logger.info("Compiling application with container %s" % container.name)
    container.compile()
    return 0


def run_release(args, logger):
    container = single(get_containers(args, logger), logger)
    command = container.release()
    logger.debug("Start command: %s" % command)
    data = {
        "addons": [],
        "config_vars": {},
        "default_process_types": {
            "web": command,
        },
    }
    print(yaml.safe_dump(data, default_flow_style=False), end='', flush=True)
    return 0


def parser():
    epilog = __purpose__ + '\n'
    epilog += __program__ + " " + __version__
    parser = argparse.ArgumentParser(formatter_class=argparse.RawTextHelpFormatter, description=__doc__, epilog=epilog)
    parser.add_argument('-d', '--debug', action='store_true', default=False, help='Enable debug mode')
    parser.add_argument('--config-dir', default=os.environ.get("CONTAINERS_CONFIG", ""), help='Folder with the <container>.yml settings')
    parser.add_argument('--java-home', default='.java', help='JAVA_HOME relative to the application folder')
    parser.add_argument('--java-opt', action='append', default=[], help='Java option for the application')
    subparsers = parser.add_subparsers(dest='step', required=True)
    p = subparsers.add_parser('detect', help='Print the containers able to run the application')
    p.add_argument('app_dir', type=str, help='Application directory')
    p.set_defaults(func=run_detect)
    p = subparsers.add_parser('compile', help='Download and prepare the container')
    p.add_argument('app_dir', type=str, help='Application directory')
    p.add_argument('cache_dir', type=str, help='Buildpack cache directory')
    p.set_defaults(func=run_compile)
    p = subparsers.add_parser('release', help='Print the release YAML with the start command')
    p.add_argument('app_dir', type=str, help='Application directory')
    p.set_defaults(func=run_release)
    return parser


def main(argv=None):
    args = parser().parse_args(argv)
    logger = logging.getLogger()
    # stdout is the output of detect and release
    handler = logging.StreamHandler(sys.stderr)
    logger.addHandler(handler)
    if args.debug:
        logger.setLevel(logging.DEBUG)
        handler.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)
        handler.setLevel(logging.INFO)
    start = time.time()
    try:
        rc = args.func(args, logger)
        logger.debug("Step '%s' finished in %.1fs" % (args.step, time.time() - start))
        return rc
    except Exception as e:
        print("ERROR: %s" % str(e), file=sys.stderr, flush=True)
        return 1
    finally:
        logger.removeHandler(handler)
        sys.stdout.flush()
        sys.stderr.flush()


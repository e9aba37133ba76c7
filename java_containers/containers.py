# -*- coding: utf-8 -*-
"""
Containers supported by this buildpack. Each one implements the staging
lifecycle: detect, compile and release.
"""

import os
import re
import glob
import time
import shutil
import logging

from .config import format_duration, load_yaml
from .errors import StagingError
from .patcher import ConfigLinePatcher
from .runner import Runner


def progress(msg, end='\n'):
    print("-----> %s" % msg, end=end, flush=True)



class Container(object):
    Defaults = {}

    def __init__(self, app_dir, java_home='', java_opts=None, configuration=None, cache=None, logger=None):
        if not logger:
            logger = logging.getLogger(self.__class__.__name__)
        self.logger = logger
        self.app_dir = app_dir
        self.java_home = java_home
        self.java_opts = java_opts if java_opts is not None else []
        self.configuration = dict(self.Defaults)
        if configuration:
            self.configuration.update(configuration)
        self.cache = cache
        self.runner = Runner(app_dir, logger=logger, prefix='      ')
        self.patcher = ConfigLinePatcher(logger)

    @property
    def name(self):
        raise NotImplementedError

    def detect(self):
        raise NotImplementedError

    def compile(self):
        raise NotImplementedError

    def release(self):
        raise NotImplementedError

    def _java_opts_(self):
        return ' '.join(sorted(o for o in self.java_opts if o is not None))



class Karaf(Container):
    """Apache Karaf OSGi container, applies when the app provides ``karaf.yml``"""

    Defaults = {
        "version": '2.3.1',
        "uri": 'http://apache.claz.org/karaf/{version}/apache-karaf-{version}.tar.gz',
    }
    KEY_HTTP_PORT = 'http.port'
    KARAF_HOME = '.karaf'
    CONFIG_FILE = 'karaf.yml'
    PAX_WEB_CFG = 'etc/org.ops4j.pax.web.cfg'
    FEATURES_CFG = 'etc/org.apache.karaf.features.cfg'

    @property
    def version(self):
        return str(self.configuration['version'])

    @property
    def uri(self):
        return self.configuration['uri'].replace('{version}', self.version)

    @property
    def name(self):
        return "karaf-%s" % self.version

    @property
    def karaf_home(self):
        return os.path.join(self.app_dir, self.KARAF_HOME)

    def detect(self):
        if os.path.isfile(os.path.join(self.app_dir, self.CONFIG_FILE)):
            return self.name
        return None

    def compile(self):
        if not self.cache:
            msg = "Karaf container needs an application cache to download %s" % self.uri
            self.logger.error(msg)
            raise StagingError(msg)
        start = time.time()
        progress("Downloading Karaf %s from %s " % (self.version, self.uri), end='')
        with self.cache.get(self.uri) as f:
            print("(%s)" % format_duration(time.time() - start), flush=True)
            self.expand(f.name)
        self.configure()
        self.deploy_bundles()

    def release(self):
        self.java_opts.append("-D%s=$PORT" % self.KEY_HTTP_PORT)
        return ('JAVA_HOME=/app/%s JAVA_OPTS="%s" KARAF_BASE=/app/%s KARAF_DATA=/app/%s/data %s/bin/karaf server'
            % (self.java_home, self._java_opts_(), self.KARAF_HOME, self.KARAF_HOME, self.KARAF_HOME))

    def expand(self, archive):
        start = time.time()
        progress("Expanding Karaf to %s " % self.KARAF_HOME, end='')
        home = self.karaf_home
        try:
            if os.path.isdir(home):
                shutil.rmtree(home)
            os.makedirs(os.path.join(home, 'data', 'log'), mode=0o755)
        except OSError as e:
            self.logger.error("Error preparing Karaf home '%s': %s" % (home, str(e)))
            raise
        self.runner.check(["tar", "xzf", archive, "-C", home, "--strip-components", "1",
            "--exclude", "demos", "--exclude", "karaf-manual-*"])
        print("(%s)" % format_duration(time.time() - start), flush=True)

    def configure(self):
        self.patcher.apply(os.path.join(self.karaf_home, self.PAX_WEB_CFG),
            'org.osgi.service.http.port', lambda value: '${%s}' % self.KEY_HTTP_PORT)
        config = load_yaml(os.path.join(self.app_dir, self.CONFIG_FILE), self.logger)
        features = config.get('features')
        if features:
            if isinstance(features, (list, tuple)):
                features = ','.join(str(f) for f in features)
            else:
                features = str(features)
            progress("Adding boot features %s" % features)
            self.patcher.apply(os.path.join(self.karaf_home, self.FEATURES_CFG),
                'featuresBoot', lambda value: ','.join(v for v in (value, features) if v))

    def deploy_bundles(self):
        deploy = os.path.join(self.karaf_home, 'deploy')
        os.makedirs(deploy, mode=0o755, exist_ok=True)
        # hidden folders (the Karaf home itself) are not matched by glob
        for path in sorted(glob.glob(os.path.join(self.app_dir, '**', '*.jar'), recursive=True)):
            name = os.path.basename(path)
            progress("Deploying jar file %s " % name)
            try:
                shutil.move(path, os.path.join(deploy, name))
            except OSError as e:
                self.logger.error("Cannot deploy '%s': %s" % (path, str(e)))
                raise



class Tarball(Container):
    """Application shipped as a tarball with its own start script"""

    Defaults = {
        "archive": 'myapp.tar.gz',
        "home": '/app/dsp-k-1.2.0',
        "config_file": 'dsp/config/dsp.core.conf',
        "port_property": 'dsp.admin.webservice.http.port',
    }
    CONTAINER_NAME = 'tarball'

    @property
    def name(self):
        return self.CONTAINER_NAME

    @property
    def archive(self):
        return os.path.join(self.app_dir, self.configuration['archive'])

    def detect(self):
        if os.path.isfile(self.archive):
            return self.name
        return None

    def compile(self):
        self.logger.debug("Expanding %s in %s" % (self.archive, self.app_dir))
        self.runner.check(["tar", "xzvf", self.archive], wpath=self.app_dir)

    def sed_escape(self, key):
        # the expression is double quoted, the shell would consume these
        if re.search(r'[\\"$`]', key):
            msg = "Unsupported characters in port property '%s'" % key
            self.logger.error(msg)
            raise ValueError(msg)
        return re.sub(r'([/.*\[\]^&])', r'\\\1', key)

    def release(self):
        home = self.configuration['home']
        key = self.sed_escape(self.configuration['port_property'])
        config_file = os.path.join(home, self.configuration['config_file'])
        sed_port = 'sed -i "s/%s=.*/%s=$PORT/g" %s' % (key, key, config_file)
        return "%s && JAVA_HOME=/app/%s %s/bin/start" % (sed_port, self.java_home, home)


CONTAINERS = [Karaf, Tarball]

# -*- coding: utf-8 -*-
"""
Karaf and Tarball containers for the Cloudfoundry Java buildpack
"""
__program__ = "java_containers"
__version__ = "0.1.0"
__license__ = "MIT"

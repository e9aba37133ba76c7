# -*- coding: utf-8 -*-
"""
Download cache for the artifacts used by the containers (runtime tarballs).

Entries live in the cache folder keyed by the SHA-1 of the URI:

    <sha1>.cached          the downloaded artifact
    <sha1>.etag            ETag sent by the server, if any
    <sha1>.last_modified   Last-Modified sent by the server, if any

When an entry exists a conditional request is done, so a ``304`` reuses the
local copy. If the server cannot be reached the local copy is used anyway.
"""

import os
import hashlib
import logging
import tempfile
import requests

from contextlib import contextmanager
from urllib.parse import unquote, urlsplit

from .errors import StagingError


class ApplicationCache(object):
    chunk_size = 64 * 1024

    def __init__(self, cachedir, timeout=60, session=None, logger=None):
        if not logger:
            logger = logging.getLogger(self.__class__.__name__)
        self.logger = logger
        try:
            os.makedirs(cachedir, mode=0o755, exist_ok=True)
        except OSError as e:
            self.logger.error("Cache directory cannot be created: %s" % (str(e)))
            raise
        self.cachedir = cachedir
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _paths_(self, uri):
        key = hashlib.sha1(uri.encode('utf-8')).hexdigest()
        base = os.path.join(self.cachedir, key)
        return base + '.cached', base + '.etag', base + '.last_modified'

    def _read_(self, path):
        if os.path.isfile(path):
            with open(path) as f:
                return f.read().strip()
        return None

    def _write_(self, path, value):
        if value:
            with open(path, 'w') as f:
                f.write(value)
        elif os.path.isfile(path):
            os.remove(path)

    def _download_(self, uri, cached, etag_file, last_modified_file):
        headers = {}
        if os.path.isfile(cached):
            etag = self._read_(etag_file)
            last_modified = self._read_(last_modified_file)
            if etag:
                headers['If-None-Match'] = etag
            if last_modified:
                headers['If-Modified-Since'] = last_modified
        self.logger.debug("Requesting %s with headers %s" % (uri, headers))
        try:
            with self.session.get(uri, headers=headers, stream=True, timeout=self.timeout) as r:
                if r.status_code == 304:
                    self.logger.debug("Cached copy of %s is up to date" % uri)
                    return
                r.raise_for_status()
                fd, temp = tempfile.mkstemp(dir=self.cachedir, suffix='.part')
                try:
                    with os.fdopen(fd, 'wb') as f:
                        for chunk in r.iter_content(chunk_size=self.chunk_size):
                            f.write(chunk)
                    os.replace(temp, cached)
                except OSError:
                    if os.path.exists(temp):
                        os.remove(temp)
                    raise
                self._write_(etag_file, r.headers.get('ETag'))
                self._write_(last_modified_file, r.headers.get('Last-Modified'))
                self.logger.debug("Downloaded %s to %s" % (uri, cached))
        except requests.exceptions.RequestException as e:
            if os.path.isfile(cached):
                self.logger.warning("Unable to download %s, using cached copy: %s" % (uri, str(e)))
                return
            msg = "Unable to download %s: %s" % (uri, str(e))
            self.logger.error(msg)
            raise StagingError(msg)

    def local_path(self, uri):
        scheme, _, path, _, _ = urlsplit(uri)
        if scheme == 'file':
            return unquote(path)
        if not scheme:
            return uri
        if scheme not in ('http', 'https'):
            msg = "Unsupported URI scheme '%s': %s" % (scheme, uri)
            self.logger.error(msg)
            raise ValueError(msg)
        cached, etag_file, last_modified_file = self._paths_(uri)
        self._download_(uri, cached, etag_file, last_modified_file)
        return cached

    @contextmanager
    def get(self, uri):
        path = self.local_path(uri)
        with open(path, 'rb') as f:
            yield f

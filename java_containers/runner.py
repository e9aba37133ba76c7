# -*- coding: utf-8 -*-
import sys
import logging

from subprocess import (Popen, PIPE)

from .errors import StagingError


class Runner(object):

    def __init__(self, working_path, logger=None, echo=True, prefix=''):
        if not logger:
            logger = logging.getLogger(self.__class__.__name__)
        self.logger = logger
        self.working_path = working_path
        self.echo = echo
        self.prefix = prefix

    def _output_(self, lines, stream):
        for line in lines:
            self.logger.debug(line)
            if self.echo:
                if self.prefix:
                    print(self.prefix, line, file=stream, flush=True)
                else:
                    print(line, file=stream, flush=True)

    def run(self, command, wpath=None):
        working_path = wpath if wpath != None else self.working_path
        kwargs = dict(
            cwd = working_path,
            stdout = PIPE,
            stderr = PIPE,
        )
        self.logger.debug("Running: %s" % command)
        with Popen(command, **kwargs) as p:
            out, err = p.communicate()
        stdout = out.decode('utf-8', errors='replace').splitlines()
        stderr = err.decode('utf-8', errors='replace').splitlines()
        self._output_(stdout, sys.stdout)
        self._output_(stderr, sys.stderr)
        return p.returncode, stdout, stderr

    def check(self, command, wpath=None):
        rc, out, err = self.run(command, wpath=wpath)
        if rc != 0:
            msg = "Command %s failed with returncode %s: %s" % (command, rc, " ".join(err))
            self.logger.error(msg)
            raise StagingError(msg)
        return out

# -*- coding: utf-8 -*-
"""
Maintain ``key=value`` lines in plain text configuration files
"""

import os
import shutil
import logging
import tempfile


def patch_lines(lines, key, transform):
    """Fold over ``lines`` rewriting the first ``key=...`` line.

    Returns a tuple ``(lines, matched)``. Lines are given and returned without
    their line terminator. Only the first line whose key is exactly ``key``
    gets ``transform(previous.strip())``, any later duplicate is kept as it is.
    """
    output = []
    matched = False
    for line in lines:
        prop = line.split('=', 1)
        if not matched and len(prop) == 2 and prop[0] and prop[0] == key:
            output.append("%s=%s" % (key, transform(prop[1].strip())))
            matched = True
        else:
            output.append(line)
    return output, matched



def current_umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask


class ConfigLinePatcher(object):
    backup_suffix = ".bak"
    # java .cfg and .properties files are ISO-8859-1, any byte maps to one char
    encoding = 'latin-1'

    def __init__(self, logger=None):
        if not logger:
            logger = logging.getLogger(self.__class__.__name__)
        self.logger = logger

    def read_lines(self, path):
        try:
            with open(path, 'r', encoding=self.encoding) as f:
                return [line.rstrip('\n') for line in f]
        except OSError as e:
            self.logger.error("Cannot read '%s': %s" % (path, str(e)))
            raise

    def backup(self, path):
        backup = path + self.backup_suffix
        try:
            shutil.copy2(path, backup)
        except OSError as e:
            self.logger.error("Cannot create backup '%s': %s" % (backup, str(e)))
            raise
        self.logger.debug("Backup of '%s' written to '%s'" % (path, backup))
        return backup

    def write_lines(self, path, lines):
        # temporary file in the same folder, so the rename does not cross filesystems
        directory = os.path.dirname(os.path.abspath(path))
        fd, temp = tempfile.mkstemp(prefix='.' + os.path.basename(path), dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding=self.encoding) as f:
                for line in lines:
                    f.write(line + '\n')
            if os.path.exists(path):
                shutil.copymode(path, temp)
            else:
                os.chmod(temp, 0o666 & ~current_umask())
            os.replace(temp, path)
        except (OSError, UnicodeError) as e:
            self.logger.error("Cannot write '%s': %s" % (path, str(e)))
            if os.path.exists(temp):
                os.remove(temp)
            raise

    def apply(self, path, key, transform):
        lines = []
        matched = False
        if os.path.isfile(path):
            lines = self.read_lines(path)
            self.backup(path)
            lines, matched = patch_lines(lines, key, transform)
        if matched:
            self.logger.debug("Property '%s' updated in '%s'" % (key, path))
        else:
            lines.append("%s=%s" % (key, transform("")))
            self.logger.debug("Property '%s' appended to '%s'" % (key, path))
        self.write_lines(path, lines)


def set_property_in_file(path, key, transform, logger=None):
    ConfigLinePatcher(logger).apply(path, key, transform)

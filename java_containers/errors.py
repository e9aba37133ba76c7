# -*- coding: utf-8 -*-


class StagingError(Exception):
    """A lifecycle phase cannot continue and the staging run has to abort"""
    pass

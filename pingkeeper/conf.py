# -*- coding:utf-8 -*-
from django.conf import settings

DEFAULTS = {
    # Socket timeout and total deadline for fetching a source page, seconds
    'PINGBACK_FETCH_TIMEOUT': 30,
    'PINGBACK_MAX_SOURCE_SIZE': 1024 * 1024,
    'PINGBACK_USER_AGENT': 'pingkeeper',
    'PINGBACK_TARGET_FINDER': 'pingkeeper.finder.ModelTargetFinder',
    # "app_label.ModelName" of the content model used by ModelTargetFinder
    'PINGBACK_POST_MODEL': None,
}

def get(name):
    '''
    Returns a pingkeeper setting from Django settings falling back to its
    default.
    '''
    return getattr(settings, name, DEFAULTS[name])

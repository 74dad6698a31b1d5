# -*- coding:utf-8 -*-
import re
from collections import namedtuple
from datetime import date

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from . import conf

POST_URL_RE = re.compile(
    r'^https?://.*/post/(?P<year>\d{4})/(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<slug>.*)$'
)

class SlugInfo(namedtuple('SlugInfo', 'year month day slug')):
    @property
    def pub_date(self):
        return date(self.year, self.month, self.day)

    @property
    def path(self):
        return '/post/%d/%d/%d/%s' % (self.year, self.month, self.day, self.slug)

def parse_post_url(url):
    '''
    Parses a canonical post URL of the form ".../post/yyyy/MM/dd/slug"
    into a SlugInfo.

    Raises ValueError if the URL doesn't have this form or if the date
    in it doesn't exist.
    '''
    match = POST_URL_RE.match(url)
    if not match:
        raise ValueError('Invalid slug format: %s' % url)
    year, month, day = [int(match.group(g)) for g in ('year', 'month', 'day')]
    date(year, month, day)
    return SlugInfo(year, month, day, match.group('slug'))

class TargetFinder(object):
    '''
    Resolves a target URL to a local content item.

    Subclasses implement find() returning (id, title) of a published,
    not deleted item or None.
    '''
    def find(self, slug_info):
        raise NotImplementedError

    def get_post_id_title(self, url):
        return self.find(parse_post_url(url))

class ModelTargetFinder(TargetFinder):
    '''
    Looks up targets in the model named by PINGBACK_POST_MODEL. The model
    is expected to have "slug", "title", "pub_date", "is_published" and
    "is_deleted" fields.
    '''
    def __init__(self, model=None):
        self.model = model or self.get_model()

    @staticmethod
    def get_model():
        label = conf.get('PINGBACK_POST_MODEL')
        if not label:
            raise ImproperlyConfigured('PINGBACK_POST_MODEL is not set')
        return apps.get_model(label)

    def find(self, slug_info):
        row = self.model._default_manager.filter(
            slug=slug_info.slug,
            pub_date__year=slug_info.year,
            pub_date__month=slug_info.month,
            pub_date__day=slug_info.day,
            is_published=True,
            is_deleted=False,
        ).values_list('pk', 'title').first()
        return row and tuple(row)

def get_finder():
    return import_string(conf.get('PINGBACK_TARGET_FINDER'))()

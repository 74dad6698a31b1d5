# -*- coding:utf-8 -*-
import uuid
import hashlib

from django.db import models, transaction, IntegrityError
from django.utils import timezone

from . import errors

MAX_URL_LENGTH = 2048

def get_domain(url):
    '''
    Returns the host part of url without a leading "www.".

    Everything between "://" and the next "/" is the host. URLs without a
    path or without a scheme don't raise, the remaining text is used.
    '''
    rest = url.split('://', 1)[-1]
    domain = rest.split('/', 1)[0]
    if domain.startswith('www.'):
        domain = domain[len('www.'):]
    return domain

def url_hash(url):
    return hashlib.sha256(url.encode('utf-8')).hexdigest()

class PingbackHistoryManager(models.Manager):
    def already_pinged(self, target_post_id, source_url, source_ip):
        return self.filter(
            target_post_id=str(target_post_id),
            source_url_hash=url_hash(source_url),
            source_ip=source_ip or '',
        ).exists()

    def register(self, source_url, source_title, target_post_id, target_post_title, source_ip):
        '''
        Stores an accepted pingback and returns the new record.

        Raises errors.DuplicatePing if the same source has already pinged
        the same target from the same address, including the case of a
        concurrent request winning the race.
        '''
        try:
            with transaction.atomic():
                return self.create(
                    domain=get_domain(source_url)[:255],
                    source_url=source_url,
                    source_url_hash=url_hash(source_url),
                    source_title=source_title,
                    target_post_id=str(target_post_id),
                    target_post_title=target_post_title,
                    source_ip=source_ip or '',
                )
        except IntegrityError:
            if self.already_pinged(target_post_id, source_url, source_ip):
                raise errors.DuplicatePing
            raise

    def history(self):
        return self.order_by('-ping_time_utc')

    def remove(self, pk):
        self.filter(pk=pk).delete()

class PingbackHistory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    domain = models.CharField(max_length=255)
    source_url = models.URLField(max_length=MAX_URL_LENGTH)
    # sha256 of source_url, short enough for a unique index on any backend
    source_url_hash = models.CharField(max_length=64, editable=False)
    source_title = models.TextField(blank=True)
    target_post_id = models.CharField(max_length=64, db_index=True)
    target_post_title = models.TextField(blank=True)
    source_ip = models.CharField(max_length=45, blank=True)
    ping_time_utc = models.DateTimeField(default=timezone.now)

    objects = PingbackHistoryManager()

    class Meta:
        ordering = ['-ping_time_utc']
        verbose_name = 'pingback'
        verbose_name_plural = 'pingback history'
        constraints = [
            models.UniqueConstraint(
                fields=['target_post_id', 'source_url_hash', 'source_ip'],
                name='unique_pingback_source_target_ip',
            ),
        ]

    def __str__(self):
        return '%s -> %s' % (self.source_url, self.target_post_title)

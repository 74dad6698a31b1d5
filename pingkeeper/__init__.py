'''
Server side of the Pingback protocol
(http://hixie.ch/specs/pingback/pingback-1.0) for Django sites.

Incoming pingbacks are verified by fetching the source page, resolved to
a published post by its "/post/yyyy/MM/dd/slug" URL and stored as
PingbackHistory records.
'''

from .responses import PingbackResponse
from .errors import InvalidPingRequest, TargetNotFoundUnderSource, \
                    TargetDoesNotExist, DuplicatePing

# -*- coding:utf-8 -*-
import logging
from xmlrpc.client import loads, dumps

from django import http
from django import dispatch
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from . import errors
from .examiner import examine_source
from .finder import get_finder
from .models import MAX_URL_LENGTH, PingbackHistory
from .responses import PingbackResponse

logger = logging.getLogger(__name__)

# Connect a handler to the "received" signal to be notified about accepted
# pingbacks. The signal is sent with PingbackHistory as the sender and the
# following keyword arguments:
#
# - history: the new PingbackHistory record
#
# The signal is sent only after the source page has been fetched and found
# to link to the target, the target has been resolved to a published post
# and the pingback has been stored.

received = dispatch.Signal()

METHOD_MARKER = '<methodName>pingback.ping</methodName>'

def parse_payload(body):
    '''
    Parses an XML-RPC pingback.ping request body and returns
    (source_url, target_url).

    Raises a subclass of errors.InvalidPingRequest when the body isn't
    a valid pingback request.
    '''
    if not body or not body.strip():
        raise errors.InvalidPingRequest('Request body is empty')
    if METHOD_MARKER not in body:
        raise errors.MethodNotFound
    try:
        args, method = loads(body)
    except Exception as e:
        # expat and the unmarshaller raise all kinds of errors on bad input
        raise errors.ParseError('Request is not well formed XML-RPC: %r' % e)
    if method != 'pingback.ping':
        raise errors.MethodNotFound('Unknown method "%s"' % method)
    if len(args) < 2 or not all(isinstance(a, str) for a in args[:2]):
        raise errors.InvalidParams
    source_url, target_url = args[0].strip(), args[1].strip()
    if len(source_url) > MAX_URL_LENGTH or len(target_url) > MAX_URL_LENGTH:
        raise errors.InvalidParams('URLs longer than %d characters are not accepted' % MAX_URL_LENGTH)
    return source_url, target_url

def _find_target(url):
    try:
        return get_finder().get_post_id_title(url)
    except ValueError as e:
        logger.info('Target %s is not a post URL: %s', url, e)
        return None

def _handle_pingback(body, source_ip, on_accepted):
    try:
        source_url, target_url = parse_payload(body)
    except errors.InvalidPingRequest as e:
        logger.warning('Invalid pingback request from %s: %s', source_ip, e.faultString)
        return PingbackResponse.INVALID_PING_REQUEST
    logger.info('Processing pingback from %s to %s (%s)', source_url, target_url, source_ip)

    ping = examine_source(source_url, target_url)

    target = _find_target(ping.target_url)
    if target is None:
        logger.error('Can not get post id and title for url %s', ping.target_url)
        return PingbackResponse.TARGET_URI_NOT_EXIST
    post_id, post_title = target
    logger.info('Post "%s:%s" is found for ping', post_id, post_title)

    if PingbackHistory.objects.already_pinged(post_id, ping.source_url, source_ip):
        return PingbackResponse.PINGBACK_ALREADY_REGISTERED

    info = ping.source_document_info
    if not info.source_has_link:
        logger.error('Source %s does not contain a link to %s', ping.source_url, ping.target_url)
        return PingbackResponse.SOURCE_NOT_CONTAIN_TARGET_URI
    if info.contains_html:
        logger.warning('Spam detected on pingback from %s, title: %r', ping.source_url, info.title)
        return PingbackResponse.SPAM_DETECTED_FAKE_NOT_FOUND

    try:
        history = PingbackHistory.objects.register(
            source_url=ping.source_url,
            source_title=info.title,
            target_post_id=post_id,
            target_post_title=post_title,
            source_ip=source_ip,
        )
    except errors.DuplicatePing:
        return PingbackResponse.PINGBACK_ALREADY_REGISTERED
    logger.info('Pingback %s from %s is registered', history.pk, history.domain)
    if on_accepted is not None:
        on_accepted(history)
    received.send(PingbackHistory, history=history)
    return PingbackResponse.SUCCESS

def process_payload(body, source_ip, on_accepted=None):
    '''
    Verifies and stores a pingback request.

    body is the raw XML-RPC request text, source_ip is the address of the
    requesting client. on_accepted is called with the new PingbackHistory
    record when the pingback is accepted.

    Returns a PingbackResponse.
    '''
    try:
        return _handle_pingback(body, source_ip or '', on_accepted)
    except Exception:
        logger.exception('Error processing pingback from %s', source_ip)
        return PingbackResponse.GENERIC_ERROR

FAULTS = {
    PingbackResponse.INVALID_PING_REQUEST: errors.InvalidPingRequest,
    PingbackResponse.SOURCE_NOT_CONTAIN_TARGET_URI: errors.TargetNotFoundUnderSource,
    PingbackResponse.TARGET_URI_NOT_EXIST: errors.TargetDoesNotExist,
    PingbackResponse.PINGBACK_ALREADY_REGISTERED: errors.DuplicatePing,
    PingbackResponse.GENERIC_ERROR: errors.Error,
}

@csrf_exempt
@require_POST
def server_view(request):
    '''
    Server view handling pingback requests.

    Include this view in your urlconf under any path you like and
    provide a link to this URL in your HTML:

        <link rel="pingback" href="..."/>

    Or send it in an HTTP server header:

        X-Pingback: ...

    Pingbacks detected as spam get a plain 404 response.
    '''
    body = request.body.decode(request.encoding or 'utf-8', 'replace')
    response = process_payload(body, request.META.get('REMOTE_ADDR'))
    if response is PingbackResponse.SPAM_DETECTED_FAKE_NOT_FOUND:
        return http.HttpResponseNotFound()
    if response is PingbackResponse.SUCCESS:
        result = dumps(('OK',), methodresponse=True)
    else:
        fault = FAULTS[response]()
        result = dumps(fault)
    return http.HttpResponse(result, content_type='text/xml')

# -*- coding:utf-8 -*-
import re
import socket
import logging
import threading
from collections import namedtuple
from http.client import HTTPConnection, HTTPSConnection, HTTPException
from urllib.parse import urlsplit
from urllib.request import Request, HTTPHandler, HTTPSHandler, build_opener

from . import conf

logger = logging.getLogger(__name__)

SourceDocumentInfo = namedtuple('SourceDocumentInfo', 'title contains_html source_has_link')
PingRequest = namedtuple('PingRequest', 'source_url target_url source_document_info')

UNREACHABLE = SourceDocumentInfo('', False, False)

TITLE_RE = re.compile(r'<title(?:\s[^>]*)?>(.*)</title>', re.IGNORECASE | re.DOTALL)
HTML_RE = re.compile(
    r'''</?\w+((\s+\w+(\s*=\s*(?:"[^"]*"|'[^']*'|[^'">\s]+))?)+\s*|\s*)/?>''',
    re.DOTALL,
)

CHUNK_SIZE = 64 * 1024

class Watchdog(object):
    '''
    Shuts the connection down once the fetch timeout has passed, so neither
    reading headers nor reading the body can outlive it.
    '''
    def __init__(self, timeout):
        self.sock = None
        self.expired = False
        self.timer = threading.Timer(timeout, self.expire)
        self.timer.daemon = True

    def start(self):
        self.timer.start()

    def cancel(self):
        self.timer.cancel()

    def expire(self):
        self.expired = True
        if self.sock is not None:
            try:
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass # already closed

    def connection_class(self, base):
        watchdog = self

        class Connection(base):
            def connect(self):
                super(Connection, self).connect()
                watchdog.sock = self.sock
                if watchdog.expired:
                    watchdog.expire()

        return Connection

class WatchedHTTPHandler(HTTPHandler):
    def __init__(self, watchdog):
        super(WatchedHTTPHandler, self).__init__()
        self.watchdog = watchdog

    def http_open(self, req):
        return self.do_open(self.watchdog.connection_class(HTTPConnection), req)

class WatchedHTTPSHandler(HTTPSHandler):
    def __init__(self, watchdog):
        super(WatchedHTTPSHandler, self).__init__()
        self.watchdog = watchdog

    def https_open(self, req):
        return self.do_open(self.watchdog.connection_class(HTTPSConnection), req,
                            context=self._context)

def open_url(request, timeout, watchdog):
    opener = build_opener(WatchedHTTPHandler(watchdog), WatchedHTTPSHandler(watchdog))
    return opener.open(request, timeout=timeout)

def _read(f, url, max_size, watchdog):
    charset = f.headers.get_content_charset() or 'utf-8'
    chunks, size = [], 0
    while size < max_size and not watchdog.expired:
        chunk = f.read1(min(CHUNK_SIZE, max_size - size))
        if not chunk:
            break
        chunks.append(chunk)
        size += len(chunk)
    else:
        if size >= max_size:
            logger.info('Source %s is larger than %s bytes, the rest is ignored', url, max_size)
    return b''.join(chunks), charset

def fetch(url, timeout, max_size):
    '''
    Downloads the page at url and returns it decoded.

    timeout applies to every socket operation and to the whole download,
    so a slowly trickling server can't hold the request longer.
    '''
    if urlsplit(url).scheme not in ('http', 'https'):
        raise ValueError('Unsupported source URL: %s' % url)
    request = Request(url, headers={'User-Agent': conf.get('PINGBACK_USER_AGENT')})
    watchdog = Watchdog(timeout)
    watchdog.start()
    try:
        with open_url(request, timeout, watchdog) as f:
            data, charset = _read(f, url, max_size, watchdog)
    except (OSError, HTTPException):
        if watchdog.expired:
            raise TimeoutError('Fetching %s took longer than %s seconds' % (url, timeout))
        raise
    finally:
        watchdog.cancel()
    if watchdog.expired:
        raise TimeoutError('Fetching %s took longer than %s seconds' % (url, timeout))
    try:
        return data.decode(charset, 'replace')
    except LookupError:
        return data.decode('utf-8', 'replace')

def extract_title(html):
    match = TITLE_RE.search(html)
    return match.group(1).strip() if match else ''

def contains_html(text):
    return HTML_RE.search(text) is not None

def has_link(html, target_url):
    return target_url.casefold() in html.casefold()

def analyze(html, target_url):
    title = extract_title(html)
    return SourceDocumentInfo(
        title=title,
        contains_html=contains_html(title),
        source_has_link=has_link(html, target_url),
    )

def examine_source(source_url, target_url):
    '''
    Fetches the page at source_url and checks what it says about
    target_url. Returns a PingRequest.

    A source that can't be fetched is reported as not linking to the
    target.
    '''
    try:
        html = fetch(
            source_url,
            conf.get('PINGBACK_FETCH_TIMEOUT'),
            conf.get('PINGBACK_MAX_SOURCE_SIZE'),
        )
    except (OSError, HTTPException, ValueError) as e:
        logger.error('Could not fetch pingback source %s: %s', source_url, e)
        return PingRequest(source_url, target_url, UNREACHABLE)
    info = analyze(html, target_url)
    logger.info('Examined %s: title=%r, contains_html=%s, source_has_link=%s',
                source_url, info.title, info.contains_html, info.source_has_link)
    return PingRequest(source_url, target_url, info)

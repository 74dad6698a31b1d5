from email.message import Message
from xmlrpc.client import dumps


def ping_payload(source_url, target_url):
    return dumps((source_url, target_url), methodname='pingback.ping')


def page(title, body=''):
    return '<html><head><title>%s</title></head><body>%s</body></html>' % (title, body)


class FakeResponse:
    def __init__(self, text='', content_type='text/html; charset=utf-8'):
        self._data = text.encode('utf-8')
        self.headers = Message()
        self.headers['Content-Type'] = content_type

    def read1(self, size=-1):
        if size < 0:
            size = len(self._data)
        chunk, self._data = self._data[:size], self._data[size:]
        return chunk

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def raw_call(*values):
    '''
    Builds a pingback.ping call from raw XML-RPC <value> contents.
    '''
    params = ''.join('<param><value>%s</value></param>' % v for v in values)
    return (
        '<?xml version="1.0"?><methodCall><methodName>pingback.ping</methodName>'
        '<params>%s</params></methodCall>' % params
    )

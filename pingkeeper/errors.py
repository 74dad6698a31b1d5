# -*- coding:utf-8 -*-
from xmlrpc.client import Fault

class Error(Fault):
    code = 0
    message = 'Unknown error'

    def __init__(self, message=None, **kwargs):
        message = message or self.message
        super(Error, self).__init__(self.code, message, **kwargs)

class InvalidPingRequest(Error):
    code = -32600
    message = 'Invalid pingback request'

class ParseError(InvalidPingRequest):
    code = -32700
    message = 'Request is not well formed XML-RPC'

class MethodNotFound(InvalidPingRequest):
    code = -32601
    message = 'Requested method is not pingback.ping'

class InvalidParams(InvalidPingRequest):
    code = -32602
    message = 'Source and target URLs are not found in request'

class TargetNotFoundUnderSource(Error):
    code = 17
    message = 'Target URL is not found under source URL'

class TargetDoesNotExist(Error):
    code = 32
    message = 'Target URL does not exist'

class DuplicatePing(Error):
    code = 48
    message = 'Pingback has already been registered'

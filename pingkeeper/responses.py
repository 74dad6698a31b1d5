# -*- coding:utf-8 -*-
from enum import Enum

class PingbackResponse(Enum):
    '''
    Outcome of processing a single pingback request. Values are stable and
    may be shown to or stored by callers.
    '''
    SUCCESS = 'Success'
    INVALID_PING_REQUEST = 'InvalidPingRequest'
    SOURCE_NOT_CONTAIN_TARGET_URI = 'Error17SourceNotContainTargetUri'
    TARGET_URI_NOT_EXIST = 'Error32TargetUriNotExist'
    PINGBACK_ALREADY_REGISTERED = 'Error48PingbackAlreadyRegistered'
    SPAM_DETECTED_FAKE_NOT_FOUND = 'SpamDetectedFakeNotFound'
    GENERIC_ERROR = 'GenericError'

    def __str__(self):
        return self.value

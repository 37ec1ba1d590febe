# License: LGPL3+

import logging
import threading

from ilias_dl import ReferenceStateError

CLIENT_ID = 'produktiv'

# 所有可以從網頁解析出來的物件都要繼承這個類別

class IliasElement:
    type_identifier = None

    @classmethod
    def querypath_from_id(cls, id, client_id=CLIENT_ID):
        if cls.type_identifier is None:
            return None
        return 'goto.php?target={}_{}&client_id={}'.format(
            cls.type_identifier, id, client_id)

    @classmethod
    def parse(cls, element, request):
        raise NotImplementedError('繼承的類別沒有實作 parse 方法')

class Reference:

    UNAVAILABLE = 'unavailable'
    UNRESOLVED = 'unresolved'
    RESOLVED = 'resolved'

    def __init__(self, element_class, querypath=None):
        self.logger = logging.getLogger(__name__)
        self.element_class = element_class
        self._querypath = querypath
        self._value = None
        self._state = Reference.UNAVAILABLE if querypath is None \
            else Reference.UNRESOLVED
        self._lock = threading.Lock()

    @classmethod
    def from_optional_querypath(cls, element_class, querypath):
        return cls(element_class, querypath)

    @classmethod
    def from_id(cls, element_class, id):
        return cls(element_class, element_class.querypath_from_id(id))

    def __repr__(self):
        return 'Reference({}, {}, {!r})'.format(
            self.element_class.__name__, self._state, self._querypath)

    @property
    def state(self):
        return self._state

    @property
    def querypath(self):
        return self._querypath

    def peek(self):
        if self._state == Reference.RESOLVED:
            return self._value
        return None

    def _fetch(self, request):
        self.logger.debug('準備解析 {} 的 {}'.format(
            self._querypath, self.element_class.__name__))
        document = request.web(self._querypath)
        value = self.element_class.parse(document.getroot(), request)
        self._value = value
        self._state = Reference.RESOLVED
        return value

    def resolve(self, request):
        with self._lock:
            if self._state == Reference.UNAVAILABLE:
                raise ReferenceStateError('{} 沒有連結可以讀取'.format(
                    self.element_class.__name__))
            if self._state == Reference.RESOLVED:
                return self._value
            return self._fetch(request)

    def refresh(self, request):
        with self._lock:
            if self._state == Reference.UNAVAILABLE:
                raise ReferenceStateError('{} 沒有連結可以讀取'.format(
                    self.element_class.__name__))
            return self._fetch(request)

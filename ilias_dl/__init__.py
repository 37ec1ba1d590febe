# License: LGPL3+

from lxml import etree
import io
import logging
import pycurl
import urllib.parse

ILIAS_URL = 'https://ilias.studium.kit.edu'

class Error(Exception):
    def __str__(self):
        return self.message

# 解析網頁時發生的錯誤，解析一律是全有或全無

class ExtractionError(Error):
    def __init__(self, message):
        self.message = message

class StructuralMismatchError(ExtractionError):
    pass

class LocalizationMismatchError(ExtractionError):
    def __init__(self, keys, where=None):
        self.keys = tuple(keys)
        if where:
            message = '在 {} 找不到 {} 欄位'.format(where, ' / '.join(self.keys))
        else:
            message = '找不到 {} 欄位'.format(' / '.join(self.keys))
        super().__init__(message)

class DateGrammarError(ExtractionError):
    pass

class ReferenceStateError(Error):
    def __init__(self, message):
        self.message = message

class CallerContractError(Error):
    def __init__(self, message):
        self.message = message

# 網路傳輸的錯誤，直接往上丟

class TransportError(Error):
    pass

class ServerError(TransportError):
    def __init__(self, status):
        from http import HTTPStatus
        self.status = status
        try:
            phrase = HTTPStatus(status).phrase
            self.message = '伺服器回傳 HTTP 狀態 {} ({})'.format(status, phrase)
        except ValueError:
            self.message = '伺服器回傳 HTTP 狀態 {}'.format(status)

class NetworkError(TransportError):
    def __init__(self, err):
        self.error = err
        if len(err.args) >= 2:
            self.message = '連線失敗：{} (curl {})'.format(err.args[1], err.args[0])
        else:
            self.message = '連線失敗：{}'.format(err)

# ILIAS 自己產生的連結都是 path + query string，不可以重新排序或解碼

def url_to_querypath(url):
    components = urllib.parse.urlsplit(url)
    if components.netloc:
        # netloc 緊接在第一個 // 之後
        start = url.find('//') + 2 + len(components.netloc)
        querypath = url[start:]
    else:
        querypath = url
    querypath = querypath.split('#', maxsplit=1)[0]
    return querypath if querypath else '/'

def querypath_to_url(base_url, querypath):
    return urllib.parse.urljoin(base_url.rstrip('/') + '/', querypath)

class Request:
    def __init__(self, cookies, base_url=ILIAS_URL):
        self.logger = logging.getLogger(__name__)
        self.curl = pycurl.Curl()
        self.cookie = ';'.join(map(lambda x: '{}={}'.format(*x), cookies.items()))
        self.base_url = base_url

    def _prepare(self, querypath, output, progress_callback=None):
        url = querypath_to_url(self.base_url, querypath)
        self.logger.debug('HTTP 請求網址：{}'.format(url))
        self.curl.reset()
        self.curl.setopt(pycurl.USE_SSL, pycurl.USESSL_ALL)
        self.curl.setopt(pycurl.PROTOCOLS, pycurl.PROTO_HTTPS)
        self.curl.setopt(pycurl.REDIR_PROTOCOLS, pycurl.PROTO_HTTPS)
        self.curl.setopt(pycurl.DEFAULT_PROTOCOL, 'https')
        self.curl.setopt(pycurl.URL, url)
        self.curl.setopt(pycurl.COOKIE, self.cookie)
        self.curl.setopt(pycurl.FOLLOWLOCATION, True)
        self.curl.setopt(pycurl.WRITEDATA, output)
        self.curl.setopt(pycurl.HEADERFUNCTION, lambda *x: None)
        if progress_callback:
            self.curl.setopt(pycurl.NOPROGRESS, False)
            self.curl.setopt(pycurl.XFERINFOFUNCTION, progress_callback)
        else:
            self.curl.setopt(pycurl.NOPROGRESS, True)

    def _perform(self):
        try:
            self.curl.perform()
        except pycurl.error as err:
            raise NetworkError(err)
        status = self.curl.getinfo(pycurl.RESPONSE_CODE)
        if status != 200:
            raise ServerError(status)

    def web(self, querypath, encoding=None):
        self.logger.debug('準備送出網頁請求')
        data = io.BytesIO()
        self._prepare(querypath, data)
        self._perform()
        data.seek(io.SEEK_SET)
        return etree.parse(data, etree.HTMLParser(
            encoding=encoding, remove_comments=True))

    def file(self, querypath, output, progress_callback=lambda *x: None):
        self.logger.debug('準備送出檔案下載請求')
        self._prepare(querypath, output, progress_callback=progress_callback)
        self._perform()

    def file_part(self, path):
        with open(path, 'rb') as local_file:
            return local_file.read()

    def post_form(self, querypath, fields):
        self.logger.debug('準備送出表單')
        self._prepare(querypath, io.BytesIO())
        self.curl.setopt(pycurl.POSTFIELDS, urllib.parse.urlencode(fields))
        self._perform()

    def post_multipart(self, querypath, parts):
        self.logger.debug('準備送出 multipart 表單')
        self._prepare(querypath, io.BytesIO())
        form = []
        for name, filename, content in parts:
            if filename is None:
                form.append((name, (pycurl.FORM_CONTENTS, content)))
            else:
                form.append((name, (pycurl.FORM_BUFFER, filename,
                    pycurl.FORM_BUFFERPTR, content)))
        self.curl.setopt(pycurl.HTTPPOST, form)
        self._perform()

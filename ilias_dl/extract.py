# License: LGPL3+

from lxml import etree
from types import MappingProxyType
import logging

from ilias_dl import (StructuralMismatchError, LocalizationMismatchError,
    DateGrammarError)
from ilias_dl.date import parse_date

# ILIAS 會依照使用者設定顯示德文或英文，每個標籤都要接受兩種寫法

DEFAULT_LABELS = MappingProxyType({
    'block_instructions': ('Arbeitsanweisung', 'Work Instructions'),
    'block_schedule': ('Terminplan', 'Schedule'),
    'block_files': ('Dateien', 'Files'),
    'block_submission': ('Ihre Einreichung', 'Your Submission'),
    'key_start_time': ('Startzeit', 'Start Time'),
    'key_end_time': ('Abgabetermin', 'Edit Until'),
    'key_submitted_files': ('Abgegebene Dateien', 'Submitted Files'),
})

class Labels:
    def __init__(self, overrides={}):
        labels = dict(DEFAULT_LABELS)
        for name, spellings in overrides.items():
            if name not in DEFAULT_LABELS:
                raise KeyError('不明的標籤名稱 {}'.format(name))
            if isinstance(spellings, str):
                spellings = [ spellings ]
            labels[name] = tuple(spellings)
        self._labels = MappingProxyType(labels)

    def __getitem__(self, name):
        return self._labels[name]

    def __iter__(self):
        return iter(self._labels)

    def __repr__(self):
        return 'Labels({})'.format(dict(self._labels))

DEFAULT = Labels()

# 用 XPath 模擬 CSS 的 class 選擇器

def has_class(name):
    return 'contains(concat(" ", normalize-space(@class), " "), " {} ")'.format(name)

INFO_SCREEN = './/*[{}]'.format(has_class('ilInfoScreenSec'))
INFO_SCREEN_HEADER = './/*[{}]'.format(has_class('ilHeader'))
PROPERTY_ROW = './/*[{}]'.format(has_class('form-group'))
PROPERTY_KEY = './/*[{}]'.format(has_class('il_InfoScreenProperty'))
PROPERTY_VALUE = './/*[{}]'.format(has_class('il_InfoScreenPropertyValue'))

def element_text(element):
    return ''.join(element.itertext()).strip()

def child_elements(element):
    return list(element.iterchildren(tag=etree.Element))

def first_child(element, what):
    children = child_elements(element)
    if len(children) == 0:
        raise StructuralMismatchError('找不到{}'.format(what))
    return children[0]

def required_attribute(element, name, what):
    value = element.get(name)
    if value is None:
        raise StructuralMismatchError('{}沒有 {} 屬性'.format(what, name))
    return value

class PropertyBlock:
    def __init__(self, name, element):
        self.name = name
        self.element = element

    def __repr__(self):
        return 'PropertyBlock({!r})'.format(self.name)

    def rows(self):
        return self.element.xpath(PROPERTY_ROW)

    def value_element(self, keys):
        for row in self.rows():
            key_elements = row.xpath(PROPERTY_KEY)
            # 沒有標籤的列不是鍵值對
            if len(key_elements) == 0:
                continue
            if element_text(key_elements[0]) not in keys:
                continue
            value_elements = row.xpath(PROPERTY_VALUE)
            if len(value_elements) == 0:
                raise StructuralMismatchError('{} 區塊的 {} 欄位沒有內容'.format(
                    self.name, element_text(key_elements[0])))
            return value_elements[0]
        raise LocalizationMismatchError(keys, where=self.name)

    def value(self, keys):
        return element_text(self.value_element(keys))

class Extractor:
    def __init__(self, labels=DEFAULT):
        self.logger = logging.getLogger(__name__)
        self.labels = labels

    def blocks(self, element):
        blocks = []
        for screen in element.xpath(INFO_SCREEN):
            headers = screen.xpath(INFO_SCREEN_HEADER)
            if len(headers) == 0:
                raise StructuralMismatchError('資訊區塊沒有標題')
            blocks.append(PropertyBlock(element_text(headers[0]), screen))
        self.logger.debug('找到資訊區塊：{}'.format(
            ', '.join(map(lambda x: x.name, blocks))))
        return blocks

    def find_block(self, blocks, block):
        names = self.labels[block]
        for candidate in blocks:
            if candidate.name in names:
                return candidate
        return None

    def require_block(self, blocks, block):
        found = self.find_block(blocks, block)
        if found is None:
            raise StructuralMismatchError('找不到 {} 區塊'.format(
                ' / '.join(self.labels[block])))
        return found

    # 區塊不存在時選填欄位是 None，區塊存在卻找不到欄位一律是錯誤

    def scalar_element(self, blocks, block, key, optional=False):
        if optional:
            found = self.find_block(blocks, block)
            if found is None:
                return None
        else:
            found = self.require_block(blocks, block)
        return found.value_element(self.labels[key])

    def scalar(self, blocks, block, key, optional=False):
        value_element = self.scalar_element(blocks, block, key, optional=optional)
        if value_element is None:
            return None
        return element_text(value_element)

# 沒有標題列的表格只能照欄位順序讀取，欄位不夠的列當作分隔線跳過

ATTACHMENT_MIN_COLUMNS = 2
SUBMISSION_MIN_COLUMNS = 4
SUBMISSION_DATE_COLUMNS = 3

def table_rows(element, path, min_columns):
    rows = []
    for row in element.xpath(path):
        if len(child_elements(row)) < min_columns:
            continue
        rows.append(row)
    return rows

# 檔名 | 下載按鈕
def read_attachment_row(columns):
    name = element_text(columns[0])
    link = first_child(columns[1], '下載連結')
    return name, required_attribute(link, 'href', '下載連結')

# 勾選框 | 檔名 | 日期（可能有好幾欄）| ... | 下載連結
def read_submission_row(columns):
    checkbox = first_child(columns[0], '勾選框')
    file_id = required_attribute(checkbox, 'value', '勾選框')
    name = element_text(columns[1])

    date = None
    for column in columns[2:-1][:SUBMISSION_DATE_COLUMNS]:
        try:
            date = parse_date(element_text(column))
            break
        except DateGrammarError as err:
            last_error = err
    if date is None:
        raise DateGrammarError('檔案 {} 沒有可辨識的上傳日期：{}'.format(
            name, last_error))

    link = first_child(columns[-1], '下載連結')
    return file_id, name, date, required_attribute(link, 'href', '下載連結')

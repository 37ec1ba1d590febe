# License: LGPL3+

import logging
import os
import pathlib

from pathvalidate import sanitize_filename

from ilias_dl import CallerContractError, Error, StructuralMismatchError
from ilias_dl.element import IliasElement, CLIENT_ID
from ilias_dl.extract import read_attachment_row, read_submission_row, \
    child_elements, ATTACHMENT_MIN_COLUMNS, SUBMISSION_MIN_COLUMNS

class File(IliasElement):
    type_identifier = 'file'

    def __init__(self, name, id=None, download_querypath=None, date=None,
        description=''):
        self.name = name
        self.id = id
        self.download_querypath = download_querypath
        self.date = date
        self.description = description

    def __repr__(self):
        return 'File(name={!r}, id={!r}, download_querypath={!r}, date={!r})' \
            .format(self.name, self.id, self.download_querypath, self.date)

    def __eq__(self, other):
        if not isinstance(other, File):
            return NotImplemented
        return (self.name, self.id, self.download_querypath, self.date,
            self.description) == (other.name, other.id,
            other.download_querypath, other.date, other.description)

    @classmethod
    def querypath_from_id(cls, id, client_id=CLIENT_ID):
        return 'goto.php?target={}_{}_download&client_id={}'.format(
            cls.type_identifier, id, client_id)

    # 作業附件是唯讀的，沒有 id
    @classmethod
    def parse(cls, element, request=None):
        columns = child_elements(element)
        if len(columns) < ATTACHMENT_MIN_COLUMNS:
            raise StructuralMismatchError('附件列只有 {} 欄'.format(len(columns)))
        name, download_querypath = read_attachment_row(columns)
        return cls(name, download_querypath=download_querypath)

    # 已上傳的檔案可以刪除，所以一定有 id
    @classmethod
    def parse_submission_row(cls, element):
        columns = child_elements(element)
        if len(columns) < SUBMISSION_MIN_COLUMNS:
            raise StructuralMismatchError('上傳檔案列只有 {} 欄'.format(len(columns)))
        file_id, name, date, download_querypath = read_submission_row(columns)
        return cls(name, id=file_id, download_querypath=download_querypath,
            date=date)

    def download(self, request, output, progress_callback=lambda *x: None):
        if self.download_querypath is None:
            raise CallerContractError('檔案 {} 沒有下載連結'.format(self.name))
        request.file(self.download_querypath, output,
            progress_callback=progress_callback)

    def save(self, request, directory, progress_callback=lambda *x: None):
        if self.download_querypath is None:
            raise CallerContractError('檔案 {} 沒有下載連結'.format(self.name))
        logger = logging.getLogger(__name__)
        disk_path_object = pathlib.Path(directory) / sanitize_filename(self.name)
        logger.info('準備下載檔案 {} 至 {}'.format(self.name, disk_path_object))
        try:
            with disk_path_object.open('wb') as disk_file:
                self.download(request, disk_file,
                    progress_callback=progress_callback)
        except Error:
            # 不留下下載到一半的檔案
            disk_path_object.unlink()
            raise
        return disk_path_object

class LocalFile:
    def __init__(self, name, path):
        self.name = name
        self.path = path

    def __repr__(self):
        return 'LocalFile(name={!r}, path={!r})'.format(self.name, self.path)

    @classmethod
    def from_path(cls, path):
        return cls(os.path.basename(path), path)

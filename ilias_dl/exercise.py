# License: LGPL3+

from datetime import datetime
import logging

from ilias_dl import StructuralMismatchError, CallerContractError
from ilias_dl.date import parse_date
from ilias_dl.element import IliasElement, Reference
from ilias_dl.extract import Extractor, PROPERTY_ROW, PROPERTY_VALUE, \
    ATTACHMENT_MIN_COLUMNS, SUBMISSION_MIN_COLUMNS, \
    element_text, has_class, required_attribute, table_rows
from ilias_dl.file import File

ASSIGNMENT_NAME = './/*[{}]'.format(has_class('ilAssignmentHeader'))
SUBMISSION_LINK = './/a'
FILE_ROW = './/form//tbody/tr'
CONTENT_FORM = './/div[@id="ilContentContainer"]//form'
UPLOAD_BUTTON = './/nav//div[{}]//button'.format(has_class('navbar-header'))

class Assignment(IliasElement):
    type_identifier = 'ass'

    def __init__(self, name, instructions, submission_start_date,
        submission_end_date, attachments, submission):
        self.name = name
        self.instructions = instructions
        self.submission_start_date = submission_start_date
        self.submission_end_date = submission_end_date
        self.attachments = attachments
        self._submission = submission

    def __repr__(self):
        return 'Assignment(name={!r}, start={}, end={}, submission={!r})'.format(
            self.name, self.submission_start_date, self.submission_end_date,
            self._submission)

    @classmethod
    def parse(cls, element, request=None, extractor=None):
        if extractor is None:
            extractor = Extractor()

        name_elements = element.xpath(ASSIGNMENT_NAME)
        if len(name_elements) == 0:
            raise StructuralMismatchError('找不到作業名稱')
        name = element_text(name_elements[0])

        blocks = extractor.blocks(element)

        # 作業說明
        instruction_block = extractor.find_block(blocks, 'block_instructions')
        if instruction_block is None:
            instructions = None
        else:
            value_elements = instruction_block.element.xpath(PROPERTY_VALUE)
            if len(value_elements) == 0:
                raise StructuralMismatchError('{} 區塊沒有內容'.format(
                    instruction_block.name))
            instructions = element_text(value_elements[0])

        # 繳交期限
        submission_start_date = parse_date(extractor.scalar(
            blocks, 'block_schedule', 'key_start_time'))
        submission_end_date = parse_date(extractor.scalar(
            blocks, 'block_schedule', 'key_end_time'))

        # 相關檔案
        attachment_block = extractor.find_block(blocks, 'block_files')
        if attachment_block is None:
            attachments = None
        else:
            if len(attachment_block.rows()) == 0:
                raise StructuralMismatchError('{} 區塊沒有任何檔案'.format(
                    attachment_block.name))
            attachments = list(map(File.parse,
                table_rows(attachment_block.element, PROPERTY_ROW,
                    ATTACHMENT_MIN_COLUMNS)))

        # 已上傳檔案的頁面，沒有連結就不能繳交
        submission_value = extractor.scalar_element(blocks,
            'block_submission', 'key_submitted_files', optional=True)
        submission_querypath = None
        if submission_value is not None:
            links = submission_value.xpath(SUBMISSION_LINK)
            if len(links) > 0:
                submission_querypath = required_attribute(
                    links[0], 'href', '已上傳檔案連結')

        return cls(name, instructions, submission_start_date,
            submission_end_date, attachments,
            Reference.from_optional_querypath(
                AssignmentSubmission, submission_querypath))

    @property
    def submission(self):
        return self._submission

    def is_active(self, now=None):
        if now is None:
            now = datetime.now().astimezone()
        elif now.tzinfo is None:
            now = now.astimezone()
        return self.submission_start_date <= now <= self.submission_end_date

    def get_submission(self, request):
        if self._submission.state == Reference.UNAVAILABLE:
            return None
        return self._submission.resolve(request)

class AssignmentSubmission(IliasElement):

    def __init__(self, submissions, delete_querypath, upload_querypath):
        self.logger = logging.getLogger(__name__)
        self.submissions = submissions
        self.delete_querypath = delete_querypath
        self.upload_querypath = upload_querypath

    def __repr__(self):
        return 'AssignmentSubmission(submissions={!r})'.format(self.submissions)

    @staticmethod
    def _form_action(page, what):
        forms = page.xpath(CONTENT_FORM)
        if len(forms) == 0:
            raise StructuralMismatchError('找不到{}表單'.format(what))
        return required_attribute(forms[0], 'action', '{}表單'.format(what))

    @classmethod
    def parse(cls, element, request):
        submissions = list(map(File.parse_submission_row,
            table_rows(element, FILE_ROW, SUBMISSION_MIN_COLUMNS)))

        delete_querypath = cls._form_action(element, '刪除檔案')

        upload_buttons = element.xpath(UPLOAD_BUTTON)
        if len(upload_buttons) == 0:
            raise StructuralMismatchError('找不到上傳按鈕')
        upload_form_querypath = required_attribute(
            upload_buttons[0], 'data-action', '上傳按鈕')
        upload_page = request.web(upload_form_querypath)
        upload_querypath = cls._form_action(upload_page.getroot(), '上傳檔案')

        return cls(submissions, delete_querypath, upload_querypath)

    def delete_files(self, request, files):
        form_args = []
        for deleted in files:
            if deleted.id is None:
                raise CallerContractError(
                    '要刪除的檔案 {} 沒有 id'.format(deleted.name))
            form_args.append(('delivered[]', deleted.id))
        form_args.append(('cmd[deleteDelivered]', 'Löschen'))

        self.logger.info('準備刪除 {} 個檔案'.format(len(files)))
        request.post_form(self.delete_querypath, form_args)

    def upload_files(self, request, files):
        parts = []
        for index, local_file in enumerate(files):
            parts.append(('deliver[{}]'.format(index), local_file.name,
                request.file_part(local_file.path)))
        parts.append(('cmd[uploadFile]', None, 'Hochladen'))
        parts.append(('ilfilehash', None, 'aaaa'))

        self.logger.info('準備上傳 {} 個檔案'.format(len(files)))
        request.post_multipart(self.upload_querypath, parts)

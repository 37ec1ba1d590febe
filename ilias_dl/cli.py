# License: LGPL3+

import argparse
import logging
import os
import sys

from ilias_dl.config import Config

COOKIE_KEYS = [ 'PHPSESSID', 'ilClientId' ]

def fetch_assignment(request, config, assignment_id):
    from ilias_dl.exercise import Assignment
    from ilias_dl.extract import Extractor
    document = request.web(Assignment.querypath_from_id(
        assignment_id, client_id=config.client_id))
    return Assignment.parse(document.getroot(), request,
        extractor=Extractor(config.labels))

def fetch_submission(request, config, assignment_id, logger):
    assignment = fetch_assignment(request, config, assignment_id)
    submission = assignment.get_submission(request)
    if submission is None:
        logger.error('作業 {} 目前無法繳交'.format(assignment.name))
    return submission

def run_show(args, config):
    from ilias_dl import Request, Error
    logger = logging.getLogger('ilias-dl-show')

    request = Request(config.cookies, base_url=config.url)
    try:
        assignment = fetch_assignment(request, config, args.id)
        print('名稱       {}'.format(assignment.name))
        print('開始時間   {}'.format(assignment.submission_start_date))
        print('繳交期限   {}'.format(assignment.submission_end_date))
        print('可以繳交   {}'.format('是' if assignment.is_active() else '否'))
        if assignment.instructions:
            print('作業說明   {}'.format(assignment.instructions))
        for attachment in assignment.attachments or []:
            print('相關檔案   {}'.format(attachment.name))
        submission = assignment.get_submission(request)
        if submission:
            for submitted in submission.submissions:
                print('已上傳檔案 {} ({})'.format(submitted.name, submitted.date))
    except Error as err:
        logger.error(err)
        return False
    return True

def run_get(args, config):
    from ilias_dl import Request, Error
    logger = logging.getLogger('ilias-dl-get')

    request = Request(config.cookies, base_url=config.url)
    try:
        assignment = fetch_assignment(request, config, args.id)
        files = list(assignment.attachments or [])
        submission = assignment.get_submission(request)
        if submission:
            files.extend(submission.submissions)
    except Error as err:
        logger.error(err)
        return False

    os.makedirs(args.directory, exist_ok=True)
    succeeded = True
    for remote_file in files:
        try:
            remote_file.save(request, args.directory)
        except (Error, IOError) as err:
            succeeded = False
            logger.error(err)
    return succeeded

def run_upload(args, config):
    from ilias_dl import Request, Error
    from ilias_dl.file import LocalFile
    logger = logging.getLogger('ilias-dl-upload')

    request = Request(config.cookies, base_url=config.url)
    try:
        submission = fetch_submission(request, config, args.id, logger)
        if submission is None:
            return False
        submission.upload_files(request,
            list(map(LocalFile.from_path, args.file)))
    except (Error, IOError) as err:
        logger.error(err)
        return False
    return True

def run_delete(args, config):
    from ilias_dl import Request, Error
    logger = logging.getLogger('ilias-dl-delete')

    request = Request(config.cookies, base_url=config.url)
    try:
        submission = fetch_submission(request, config, args.id, logger)
        if submission is None:
            return False
        files = []
        for name in args.name:
            matched = [ x for x in submission.submissions if x.name == name ]
            if len(matched) == 0:
                logger.error('找不到已上傳的檔案 {}'.format(name))
                return False
            files.extend(matched)
        submission.delete_files(request, files)
    except Error as err:
        logger.error(err)
        return False
    return True

def run_login(args, config):
    logger = logging.getLogger('ilias-dl-login')
    print('請使用網址 {} 登入 ILIAS 後輸入 cookie 的值'.format(config.url))
    cookies = dict()
    for cn in COOKIE_KEYS:
        try:
            cookies[cn] = input('{}: '.format(cn))
        except EOFError:
            logger.error('沒有輸入 {} 的值'.format(cn))
            return False
    config.cookies = cookies
    if args.dry_run:
        return True
    return config.store()

def main(argv=None):
    app = argparse.ArgumentParser(add_help=False,
        description='KIT ILIAS 作業繳交工具')
    sub = app.add_subparsers(title='可用的子指令')
    cmd_show = sub.add_parser('show', help='顯示作業內容')
    cmd_show.set_defaults(func=run_show)
    cmd_show.add_argument('id', type=str, help='作業的 ILIAS 編號')
    cmd_get = sub.add_parser('get', help='下載作業的相關檔案和已上傳檔案')
    cmd_get.set_defaults(func=run_get)
    cmd_get.add_argument('-d', '--directory', type=str, default='.',
        help='要存放檔案的資料夾')
    cmd_get.add_argument('id', type=str, help='作業的 ILIAS 編號')
    cmd_upload = sub.add_parser('upload', help='上傳檔案')
    cmd_upload.set_defaults(func=run_upload)
    cmd_upload.add_argument('id', type=str, help='作業的 ILIAS 編號')
    cmd_upload.add_argument('file', nargs='+', type=str,
        help='要上傳的檔案')
    cmd_delete = sub.add_parser('delete', help='刪除已上傳的檔案')
    cmd_delete.set_defaults(func=run_delete)
    cmd_delete.add_argument('id', type=str, help='作業的 ILIAS 編號')
    cmd_delete.add_argument('name', nargs='+', type=str,
        help='要刪除的檔案名稱')
    cmd_login = sub.add_parser('login', help='登入網站')
    cmd_login.set_defaults(func=run_login)
    cmd_login.add_argument('-n', '--dry-run', action='store_true',
        help='測試模式：不要將取得的登入資訊寫入設定檔')
    opt = app.add_argument_group(title='可用的選項')
    opt.add_argument('--help', action='help',
        help='顯示說明訊息並離開')
    opt.add_argument('--log-level', action='store', metavar='層級',
        choices=['CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG'],
        help='要記錄的訊息層級', default='WARNING')
    opt.add_argument('--log-time', action='store_true',
        help='記錄訊息產生的時間')
    opt.add_argument('-p', '--profile', action='store', metavar='設定檔',
        help='選擇要使用的設定檔', default='default')
    opt.add_argument('-v', '--verbose', action='store_true',
        help='顯示各項操作詳細資訊')
    args = app.parse_args(sys.argv[1:] if argv is None else argv)

    # -v 最多只會把層級降到 INFO
    log_level = getattr(logging, args.log_level)
    if args.verbose:
        log_level = min(log_level, logging.INFO)
    log_format = '%(name)s: <%(levelname)s> %(message)s'
    logging.basicConfig(level=log_level,
        format=('%(asctime)s ' if args.log_time else '') + log_format)

    if not hasattr(args, 'func'):
        logging.error('沒有指定子指令')
        return 1

    config = Config(profile=args.profile)
    if not config.load():
        return 1

    return 0 if args.func(args, config) else 1

if __name__ == '__main__':
    sys.exit(main())

# License: LGPL3+

from tempfile import NamedTemporaryFile
import ast
import configparser
import logging
import os
import shutil
import xdg.BaseDirectory

from ilias_dl import ILIAS_URL
from ilias_dl.element import CLIENT_ID
from ilias_dl.extract import DEFAULT_LABELS, Labels

# labels 區段的值是 Python 的 list，例如 block_files = ['Dateien', 'Files']

class Config:

    defaults = {
        'cookies': { },
        'portal': {
            'url': ILIAS_URL,
            'client_id': CLIENT_ID
        },
        'labels': dict((key, repr(list(value)))
            for key, value in DEFAULT_LABELS.items())
    }

    def __init__(self, name='ilias-dl', profile='default'):
        self._logger = logging.getLogger(__name__)
        self._config = configparser.ConfigParser(interpolation=None)
        # cookie 名稱有大小寫之分
        self._config.optionxform = str
        self._config.read_dict(Config.defaults)
        self.name = name
        self.profile = profile

    def load(self):
        conf_path = xdg.BaseDirectory.load_first_config(self.name, self.profile)
        if not conf_path:
            return True

        try:
            with open(conf_path, 'r') as conf_file:
                self._config.read_file(conf_file)
        except (IOError, configparser.Error) as err:
            self._logger.error('無法載入設定檔 {}：{}'.format(conf_path, err))
            return False

        self._logger.info('設定值已載入自 {}'.format(conf_path))
        return self.validate()

    def store(self):
        conf_dir = xdg.BaseDirectory.save_config_path(self.name)
        conf_path = os.path.join(conf_dir, self.profile)

        backup_path = None
        if os.path.exists(conf_path):
            with open(conf_path, 'r') as conf_file, \
                NamedTemporaryFile(mode='w', dir=conf_dir,
                    delete=False) as backup_file:
                backup_path = backup_file.name
                shutil.copyfileobj(conf_file, backup_file)

        try:
            with open(conf_path, 'w') as conf_file:
                self._config.write(conf_file)
        except IOError as err:
            self._logger.error('無法寫入設定檔，舊的設定檔備份在 {}：{}'.format(
                backup_path, err))
            return False

        self._logger.info('設定值已儲存至 {}'.format(conf_path))
        if backup_path:
            os.unlink(backup_path)
        return True

    def validate(self):
        for section in self._config.sections():
            known = Config.defaults.get(section)
            if known is None:
                self._logger.warning('設定檔中有不明的區段 {}'.format(section))
            elif section != 'cookies':
                for key in self._config[section]:
                    if key not in known:
                        self._logger.warning(
                            '設定檔 {} 區段中有不明的名稱 {}'.format(section, key))
        try:
            self.labels
        except (ValueError, SyntaxError, TypeError) as err:
            self._logger.error('設定檔 labels 區段的格式錯誤：{}'.format(err))
            return False
        return True

    @property
    def cookies(self):
        return dict(self._config['cookies'])

    @cookies.setter
    def cookies(self, value):
        self._config['cookies'] = value

    @property
    def url(self):
        return self._config['portal']['url']

    @property
    def client_id(self):
        return self._config['portal']['client_id']

    @property
    def labels(self):
        return Labels(dict((key, ast.literal_eval(value))
            for key, value in self._config['labels'].items()
            if key in DEFAULT_LABELS))

# License: LGPL3+

from datetime import datetime, timedelta
import re

from ilias_dl import DateGrammarError

RELATIVE_DAYS = (
    (('Gestern', 'Yesterday'), -1),
    (('Heute', 'Today'), 0),
    (('Morgen', 'Tomorrow'), 1),
)

# 德文和英文的月份縮寫
MONTHS = (
    ('Jan',),
    ('Feb',),
    ('Mär', 'Mar'),
    ('Apr',),
    ('Mai', 'May'),
    ('Jun',),
    ('Jul',),
    ('Aug',),
    ('Sep',),
    ('Okt', 'Oct'),
    ('Nov',),
    ('Dez', 'Dec'),
)

DATE_PATTERN = re.compile(r'^(?P<day>\d+)\. (?P<month>\w+)\.? (?P<year>\d+)$')

def parse_month(name):
    for index, names in enumerate(MONTHS):
        if name in names:
            return index + 1
    raise DateGrammarError('無法辨識的月份 {}'.format(name))

def parse_day(date, now):
    for names, offset in RELATIVE_DAYS:
        if date in names:
            return (now + timedelta(days=offset)).date()

    match = DATE_PATTERN.match(date)
    if not match:
        raise DateGrammarError('無法辨識的日期 {}'.format(date))
    month = parse_month(match.group('month'))
    try:
        return datetime(int(match.group('year')), month,
            int(match.group('day'))).date()
    except ValueError as err:
        raise DateGrammarError('日期 {} 不存在：{}'.format(date, err))

def localize(naive, tzinfo):
    # 日光節約時間造成重複的時刻時取較早的那個 (fold=0)
    if tzinfo is None:
        return naive.replace(fold=0).astimezone()
    return naive.replace(tzinfo=tzinfo, fold=0)

def parse_date(text, now=None):
    if now is None:
        now = datetime.now()

    # 網頁上常有多餘的空白和換行
    text = ' '.join(text.split())
    if ',' not in text:
        raise DateGrammarError('無法分開 {} 的日期和時間'.format(text))
    date, time = text.split(',', maxsplit=1)
    date = date.strip()
    time = time.strip()

    try:
        time = datetime.strptime(time, '%H:%M').time()
    except ValueError:
        raise DateGrammarError('無法辨識的時間 {}'.format(time))

    day = parse_day(date, now)
    return localize(datetime.combine(day, time), now.tzinfo)

from datetime import datetime, timedelta, timezone

import pytest

from ilias_dl import DateGrammarError, ExtractionError
from ilias_dl.date import parse_date, parse_month

NOW = datetime(2024, 3, 15, 12, 0)

def naive(value):
    assert value.tzinfo is not None
    return value.replace(tzinfo=None)

@pytest.mark.parametrize('text', ['Yesterday, 14:05', 'Gestern, 14:05'])
def test_yesterday(text):
    assert naive(parse_date(text, now=NOW)) == datetime(2024, 3, 14, 14, 5)

@pytest.mark.parametrize('text', ['Today, 23:59', 'Heute, 23:59'])
def test_today(text):
    assert naive(parse_date(text, now=NOW)) == datetime(2024, 3, 15, 23, 59)

def test_tomorrow_crosses_month():
    now = datetime(2024, 2, 29, 22, 0)
    assert naive(parse_date('Morgen, 00:30', now=now)) == datetime(2024, 3, 1, 0, 30)

def test_today_without_fixed_clock():
    assert parse_date('Today, 23:59').tzinfo is not None

@pytest.mark.parametrize('text', ['14. Mär 2024, 09:00', '14. Mar 2024, 09:00'])
def test_absolute_date(text):
    assert naive(parse_date(text, now=NOW)) == datetime(2024, 3, 14, 9, 0)

def test_abbreviation_dot_and_whitespace():
    assert naive(parse_date(' 20. Apr. 2020,\n   10:00 ')) == datetime(2020, 4, 20, 10, 0)

@pytest.mark.parametrize('german,english,month', [
    ('Mai', 'May', 5), ('Okt', 'Oct', 10), ('Dez', 'Dec', 12)])
def test_localized_months(german, english, month):
    assert parse_month(german) == month
    assert parse_month(english) == month

def test_aware_clock_keeps_its_zone():
    zone = timezone(timedelta(hours=1))
    parsed = parse_date('Gestern, 08:00', now=datetime(2024, 3, 15, 12, 0, tzinfo=zone))
    assert parsed == datetime(2024, 3, 14, 8, 0, tzinfo=zone)

def test_ambiguous_local_time_picks_earliest():
    zoneinfo = pytest.importorskip('zoneinfo')
    try:
        berlin = zoneinfo.ZoneInfo('Europe/Berlin')
    except zoneinfo.ZoneInfoNotFoundError:
        pytest.skip('no time zone database')
    now = datetime(2024, 10, 28, 12, 0, tzinfo=berlin)
    parsed = parse_date('Yesterday, 02:30', now=now)
    assert parsed.utcoffset() == timedelta(hours=2)

@pytest.mark.parametrize('text', [
    'Heute 14:05',
    'Heute, 25:00',
    'Heute, noon',
    'Irgendwann, 10:00',
    '14. Foo 2024, 10:00',
    '31. Feb 2024, 10:00',
    '2024-03-14, 10:00',
])
def test_malformed_dates(text):
    with pytest.raises(DateGrammarError):
        parse_date(text, now=NOW)

def test_date_errors_are_extraction_errors():
    with pytest.raises(ExtractionError) as excinfo:
        parse_date('14. Foo 2024, 10:00')
    assert 'Foo' in str(excinfo.value)

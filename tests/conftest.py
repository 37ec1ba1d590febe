import io

import pytest
import xdg.BaseDirectory
from lxml import etree

ASSIGNMENT_PAGE = '''<!DOCTYPE html>
<html><body>
<div id="ilContentContainer">
  <h1 class="ilAssignmentHeader"> Übungsblatt 1 </h1>
  <div class="ilInfoScreenSec form-horizontal">
    <h2 class="ilHeader">Arbeitsanweisung</h2>
    <div class="form-group">
      <div class="col-xs-9 il_InfoScreenPropertyValue">Lösen Sie alle Aufgaben.</div>
    </div>
  </div>
  <div class="ilInfoScreenSec form-horizontal">
    <h2 class="ilHeader">Terminplan</h2>
    <div class="form-group">
      <div class="il_InfoScreenProperty control-label col-xs-3">Startzeit</div>
      <div class="col-xs-9 il_InfoScreenPropertyValue">14. Mär 2024, 09:00</div>
    </div>
    <div class="form-group">
      <div class="il_InfoScreenProperty control-label col-xs-3">Abgabetermin</div>
      <div class="col-xs-9 il_InfoScreenPropertyValue">28. Mär 2024, 23:59</div>
    </div>
  </div>
  <div class="ilInfoScreenSec form-horizontal">
    <h2 class="ilHeader">Dateien</h2>
    <div class="form-group">
      <div class="il_InfoScreenProperty control-label col-xs-3">a.txt</div>
      <div class="col-xs-9 il_InfoScreenPropertyValue"><a href="/download?x">Herunterladen</a></div>
    </div>
    <div class="form-group"><hr/></div>
    <div class="form-group">
      <div class="il_InfoScreenProperty control-label col-xs-3">blatt01.pdf</div>
      <div class="col-xs-9 il_InfoScreenPropertyValue"><a href="ilias.php?ref_id=42&amp;cmd=downloadFile&amp;file=YmxhdHQwMS5wZGY%3D">Herunterladen</a></div>
    </div>
  </div>
  <div class="ilInfoScreenSec form-horizontal">
    <h2 class="ilHeader">Ihre Einreichung</h2>
    <div class="form-group">
      <div class="il_InfoScreenProperty control-label col-xs-3">Abgegebene Dateien</div>
      <div class="col-xs-9 il_InfoScreenPropertyValue">1 Datei <a href="ilias.php?ref_id=42&amp;ass_id=7&amp;cmd=submissionScreen">Abgabe</a></div>
    </div>
  </div>
</div>
</body></html>
'''

ENGLISH_ASSIGNMENT_PAGE = '''<!DOCTYPE html>
<html><body>
<div class="ilAssignmentHeader">Exercise Sheet 2</div>
<div class="ilInfoScreenSec">
  <div class="ilHeader">Schedule</div>
  <div class="form-group">
    <div class="il_InfoScreenProperty">Start Time</div>
    <div class="il_InfoScreenPropertyValue">1. Oct 2024, 08:00</div>
  </div>
  <div class="form-group">
    <div class="il_InfoScreenProperty">Edit Until</div>
    <div class="il_InfoScreenPropertyValue">15. Oct 2024, 12:00</div>
  </div>
</div>
<div class="ilInfoScreenSec">
  <div class="ilHeader">Your Submission</div>
  <div class="form-group">
    <div class="il_InfoScreenProperty">Submitted Files</div>
    <div class="il_InfoScreenPropertyValue">No files</div>
  </div>
</div>
</body></html>
'''

SUBMISSION_QUERYPATH = 'ilias.php?ref_id=42&ass_id=7&cmd=submissionScreen'
UPLOAD_FORM_QUERYPATH = 'ilias.php?ref_id=42&ass_id=7&cmd=uploadForm'
DELETE_QUERYPATH = 'ilias.php?ref_id=42&ass_id=7&cmd=post&fallbackCmd=deleteDelivered'
UPLOAD_QUERYPATH = 'ilias.php?ref_id=42&ass_id=7&cmd=post&fallbackCmd=uploadFile&rtoken=abc'

SUBMISSION_PAGE = '''<!DOCTYPE html>
<html><body>
<nav class="navbar"><div class="navbar-header">
  <button class="btn btn-default" data-action="ilias.php?ref_id=42&amp;ass_id=7&amp;cmd=uploadForm">Datei hochladen</button>
</div></nav>
<div id="ilContentContainer">
  <form action="ilias.php?ref_id=42&amp;ass_id=7&amp;cmd=post&amp;fallbackCmd=deleteDelivered" method="post">
    <table>
      <thead><tr><th></th><th>Dateiname</th><th>Abgabedatum</th><th></th></tr></thead>
      <tbody>
        <tr>
          <td><input type="checkbox" name="delivered[]" value="101"/></td>
          <td>loesung.pdf</td>
          <td>16. Mär 2024, 10:15</td>
          <td><a href="ilias.php?ref_id=42&amp;cmd=download&amp;delivered=101">Herunterladen</a></td>
        </tr>
        <tr><td colspan="4"></td></tr>
        <tr>
          <td><input type="checkbox" name="delivered[]" value="102"/></td>
          <td>code.zip</td>
          <td>Max Mustermann</td>
          <td>17. Mär 2024, 18:30</td>
          <td><a href="ilias.php?ref_id=42&amp;cmd=download&amp;delivered=102">Herunterladen</a></td>
        </tr>
      </tbody>
    </table>
  </form>
</div>
</body></html>
'''

UPLOAD_PAGE = '''<!DOCTYPE html>
<html><body>
<div id="ilContentContainer">
  <form action="ilias.php?ref_id=42&amp;ass_id=7&amp;cmd=post&amp;fallbackCmd=uploadFile&amp;rtoken=abc" method="post" enctype="multipart/form-data">
    <input type="file" name="deliver[0]"/>
  </form>
</div>
</body></html>
'''

def parse_html(text):
    return etree.parse(io.StringIO(text), etree.HTMLParser())

class StubRequest:
    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.fetched = []
        self.downloads = []
        self.forms = []
        self.multiparts = []

    def web(self, querypath, encoding=None):
        self.fetched.append(querypath)
        return parse_html(self.pages[querypath])

    def file(self, querypath, output, progress_callback=lambda *x: None):
        self.downloads.append(querypath)
        output.write(b'content of ' + querypath.encode())

    def file_part(self, path):
        return 'content of {}'.format(path).encode()

    def post_form(self, querypath, fields):
        self.forms.append((querypath, list(fields)))

    def post_multipart(self, querypath, parts):
        self.multiparts.append((querypath, list(parts)))

    @property
    def calls(self):
        return len(self.fetched) + len(self.downloads) + len(self.forms) + \
            len(self.multiparts)

@pytest.fixture
def request_stub():
    return StubRequest({
        SUBMISSION_QUERYPATH: SUBMISSION_PAGE,
        UPLOAD_FORM_QUERYPATH: UPLOAD_PAGE,
    })

@pytest.fixture
def assignment_root():
    return parse_html(ASSIGNMENT_PAGE).getroot()

@pytest.fixture
def config_home(tmp_path, monkeypatch):
    monkeypatch.setattr(xdg.BaseDirectory, 'xdg_config_home', str(tmp_path))
    monkeypatch.setattr(xdg.BaseDirectory, 'xdg_config_dirs', [str(tmp_path)])
    return tmp_path

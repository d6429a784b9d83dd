"""
Unit tests for the extension probers.
"""
import os
import sys

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from portal.errors import ProbeFailure
from portal.probers import (
    FileSystemProber,
    HttpProber,
    Prober,
    candidate_urls,
    get_prober,
    has_extension,
)

LOGO = 'http://localhost:8080/Plone/++theme++mytheme/logo.png'


class RecordingProber(Prober):
    """Prober answering from a fixed set of URLs, recording every check."""

    def __init__(self, existing=()):
        self.existing = set(existing)
        self.tried = []

    def exists(self, url):
        self.tried.append(url)
        return url in self.existing


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code
        self.closed = False

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session: answers with statuses or raises."""

    def __init__(self, head=200, get=200):
        self.head_answer = head
        self.get_answer = get
        self.calls = []

    def _answer(self, answer):
        if isinstance(answer, Exception):
            raise answer
        return FakeResponse(answer)

    def head(self, url, **kwargs):
        self.calls.append(('HEAD', url, kwargs))
        return self._answer(self.head_answer)

    def get(self, url, **kwargs):
        self.calls.append(('GET', url, kwargs))
        return self._answer(self.get_answer)


class TestCandidates:
    """Tests for candidate URL ordering."""

    def test_literal_first_when_extension_present(self):
        assert candidate_urls(LOGO, ['.js', '']) == [LOGO, LOGO + '.js']

    def test_extensions_in_order(self):
        url = 'http://localhost:8080/Plone/mockup'
        assert candidate_urls(url, ['.js', '']) == [url + '.js', url]

    def test_has_extension(self):
        assert has_extension(LOGO)
        assert not has_extension('http://localhost:8080/Plone/++resource++plone-app-jquerytools-js')
        assert not has_extension('http://localhost:8080')


class TestProbe:
    """Tests for Prober.probe()."""

    def test_literal_tried_before_extensions(self):
        prober = RecordingProber(existing=[LOGO, LOGO + '.js'])
        location = prober.probe(LOGO, ['.js', ''])
        assert location.path == LOGO
        assert prober.tried == [LOGO]

    def test_first_existing_extension(self):
        url = 'http://localhost:8080/Plone/mockup'
        prober = RecordingProber(existing=[url])
        location = prober.probe(url, ['.js', ''])
        assert location.path == url
        assert prober.tried == [url + '.js', url]

    def test_not_found(self):
        prober = RecordingProber()
        assert prober.probe(LOGO, ['.js', '']) is None

    def test_location_carries_resource(self):
        location = RecordingProber(existing=[LOGO]).probe(LOGO, [''])
        assert location.remote is True
        assert location.resource == '++theme++mytheme'

    def test_debug_logs_candidates(self, capsys):
        RecordingProber().probe(LOGO, ['.js'], debug=True)
        err = capsys.readouterr().err
        assert 'Probing ' + LOGO in err
        assert 'Probing ' + LOGO + '.js' in err

    def test_quiet_without_debug(self, capsys):
        RecordingProber().probe(LOGO, ['.js'])
        assert capsys.readouterr().err == ''


class TestHttpProber:
    """Tests for HttpProber with a fake session."""

    def test_found(self):
        session = FakeSession(head=200)
        assert HttpProber(session=session, timeout=3).exists(LOGO)
        method, url, kwargs = session.calls[0]
        assert (method, url) == ('HEAD', LOGO)
        assert kwargs['timeout'] == 3
        assert kwargs['allow_redirects'] is True

    def test_not_found(self):
        assert not HttpProber(session=FakeSession(head=404)).exists(LOGO)

    def test_head_not_allowed_falls_back_to_get(self):
        session = FakeSession(head=405, get=200)
        assert HttpProber(session=session).exists(LOGO)
        assert [call[0] for call in session.calls] == ['HEAD', 'GET']

    def test_server_error(self):
        with pytest.raises(ProbeFailure):
            HttpProber(session=FakeSession(head=503)).exists(LOGO)

    def test_connection_error(self):
        session = FakeSession(head=requests.exceptions.ConnectionError('refused'))
        with pytest.raises(ProbeFailure) as exc_info:
            HttpProber(session=session).exists(LOGO)
        assert exc_info.value.url == LOGO

    def test_timeout(self):
        session = FakeSession(head=requests.exceptions.Timeout())
        with pytest.raises(ProbeFailure) as exc_info:
            HttpProber(session=session, timeout=1.5).exists(LOGO)
        assert '1.5' in exc_info.value.message

    def test_probe_stops_at_failure(self):
        """A transport error is raised, not turned into 'not found'."""
        session = FakeSession(head=requests.exceptions.ConnectionError('refused'))
        with pytest.raises(ProbeFailure):
            HttpProber(session=session).probe(LOGO, ['.js', ''])


class TestFileSystemProber:
    """Tests for FileSystemProber against a mirror directory."""

    @pytest.fixture
    def mirror(self, tmp_path):
        theme = tmp_path / '++theme++mytheme'
        theme.mkdir()
        (theme / 'logo.png').write_bytes(b'png')
        (theme / 'my file.css').write_text('body {}')
        return tmp_path

    def test_found_below_portal_path(self, mirror):
        prober = FileSystemProber(str(mirror), '/Plone')
        assert prober.exists(LOGO)
        assert prober.local_path(LOGO) == os.path.join(str(mirror), '++theme++mytheme', 'logo.png')

    def test_missing(self, mirror):
        assert not FileSystemProber(str(mirror), '/Plone').exists(LOGO + '.js')

    def test_quoted_url(self, mirror):
        url = 'http://localhost:8080/Plone/++theme++mytheme/my%20file.css'
        assert FileSystemProber(str(mirror), '/Plone').exists(url)

    def test_probe(self, mirror):
        location = FileSystemProber(str(mirror), '/Plone').probe(
            'http://localhost:8080/Plone/++theme++mytheme/logo', ['.js', '.png'])
        assert location.path == LOGO

    def test_missing_root(self, tmp_path):
        with pytest.raises(ProbeFailure):
            FileSystemProber(str(tmp_path / 'nowhere'), '/Plone').exists(LOGO)


class TestGetProber:
    """Tests for the prober factory."""

    def test_http(self):
        prober = get_prober('http', timeout=2.0)
        assert isinstance(prober, HttpProber)
        assert prober.timeout == 2.0

    def test_filesystem(self, tmp_path):
        prober = get_prober('filesystem', root=str(tmp_path), portal_path='/Plone')
        assert isinstance(prober, FileSystemProber)

    def test_filesystem_needs_root(self):
        with pytest.raises(ValueError):
            get_prober('filesystem')

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_prober('ftp')

"""
Tests for the plonepack command line.
"""
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from plonepack import main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory and home, so no options file is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('HOME', str(tmp_path / 'home'))
    return tmp_path


@pytest.fixture
def mirror(workdir):
    """Local mirror of the portal resources for the filesystem prober."""
    root = workdir / 'mirror'
    (root / '++theme++mytheme').mkdir(parents=True)
    (root / '++theme++mytheme' / 'logo.png').write_bytes(b'png')
    (root / 'mockup-patterns-structure.js').write_text('define([], function() {});')
    return root


def fs_args(mirror):
    return ['--prober', 'filesystem', '--prober-root', str(mirror)]


class TestCommands:
    """Tests for the individual subcommands."""

    def test_defaults(self, workdir, capsys):
        main(['defaults'])
        data = json.loads(capsys.readouterr().out)
        assert data['portalUrl'] == 'http://localhost:8080/Plone'
        assert data['resolveExtensions'] == ['.js', '']

    def test_classify(self, workdir, capsys):
        main(['classify', './++theme++x/a.png', '--context', '/site/src'])
        out = capsys.readouterr().out
        assert out.strip() == 'plus-plus\thttp://localhost:8080/Plone/++theme++x/a.png'

    def test_classify_module(self, workdir, capsys):
        main(['classify', 'events', '--kind', 'module'])
        assert capsys.readouterr().out.strip() == 'pass-through'

    def test_resolve(self, mirror, capsys):
        main(fs_args(mirror) + ['resolve', './++theme++mytheme/logo.png', '--context', '/site/src', '--query', '?v=1'])
        assert capsys.readouterr().out.strip() == 'http://localhost:8080/Plone/++theme++mytheme/logo.png?v=1'

    def test_resolve_json(self, mirror, capsys):
        main(fs_args(mirror) + ['resolve', 'mockup-patterns-structure', '--kind', 'module', '--json'])
        data = json.loads(capsys.readouterr().out)
        assert data['path'] == 'http://localhost:8080/Plone/mockup-patterns-structure.js'
        assert data['remote'] is True

    def test_resolve_not_found(self, mirror, capsys):
        main(fs_args(mirror) + ['resolve', './++theme++mytheme/missing.png', '--context', '/site/src'])
        captured = capsys.readouterr()
        assert captured.out == ''
        assert 'default chain' in captured.err

    def test_resolve_probe_failure(self, workdir, capsys):
        args = ['--prober', 'filesystem', '--prober-root', str(workdir / 'nowhere')]
        with pytest.raises(SystemExit) as exc_info:
            main(args + ['resolve', 'jquery', '--kind', 'module'])
        assert exc_info.value.code == 2
        assert 'ProbeFailure' in capsys.readouterr().err

    def test_portal_url_flag(self, workdir, capsys):
        main(['--portal-url', 'https://example.com/site', 'classify', 'jquery', '--kind', 'module'])
        assert capsys.readouterr().out.strip() == 'remote-module\thttps://example.com/site/jquery'

    def test_bad_portal_url(self, workdir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(['--portal-url', 'localhost', 'classify', 'jquery'])
        assert exc_info.value.code == 1
        assert 'Invalid configuration' in capsys.readouterr().err


class TestBatch:
    """Tests for `plonepack batch`."""

    def test_batch_file(self, mirror, capsys):
        requests_file = mirror.parent / 'requests.json'
        requests_file.write_text(json.dumps([
            {'request': './++theme++mytheme/logo.png', 'path': '/site/src'},
            {'request': 'events', 'kind': 'module'},
            {'request': 'mockup-patterns-structure', 'kind': 'module'},
        ]))
        main(fs_args(mirror) + ['batch', str(requests_file)])
        report = json.loads(capsys.readouterr().out)
        assert [entry['request'] for entry in report] == [
            './++theme++mytheme/logo.png', 'events', 'mockup-patterns-structure']
        assert report[0]['location']['resource'] == '++theme++mytheme'
        assert report[1]['location'] is None
        assert report[2]['location']['path'].endswith('mockup-patterns-structure.js')

    def test_batch_missing_file(self, workdir):
        with pytest.raises(SystemExit) as exc_info:
            main(['batch', 'missing.json'])
        assert exc_info.value.code == 1


class TestInit:
    """Tests for `plonepack init` and options files."""

    def test_init_writes_options(self, workdir):
        main(['init'])
        with open('plonepack.json') as f:
            assert json.load(f)['portalUrl'] == 'http://localhost:8080/Plone'

    def test_init_refuses_overwrite(self, workdir):
        main(['init'])
        with pytest.raises(SystemExit):
            main(['init'])
        main(['init', '--force'])

    def test_options_file_used(self, workdir, capsys):
        (workdir / 'plonepack.json').write_text(json.dumps({'portalUrl': 'http://cms.example.com/Plone'}))
        main(['classify', 'jquery', '--kind', 'module'])
        assert capsys.readouterr().out.strip() == 'remote-module\thttp://cms.example.com/Plone/jquery'

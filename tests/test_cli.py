import logging

import httpretty
import pytest

from ldpwalker.cli import main


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # main() configures handlers bound to the captured streams of each test
    for name in ('__main__', 'ldpwalker'):
        configured_logger = logging.getLogger(name)
        for handler in list(configured_logger.handlers):
            configured_logger.removeHandler(handler)
            handler.close()
        configured_logger.propagate = True


@httpretty.activate
def test_main_prints_count(capsys, base_url, register_container, register_binary):
    register_container(base_url, children=[f'{base_url}/a', f'{base_url}/b'])
    register_container(f'{base_url}/a')
    register_binary(f'{base_url}/b')

    main(['-b', base_url, '-u', 'fedoraAdmin', '-p', 'secret'])

    captured = capsys.readouterr()
    assert captured.out.strip() == '3'
    assert f'0 - Get: {base_url}' in captured.err
    assert 'Walk complete: 3 resource(s) visited' in captured.err


@httpretty.activate
def test_main_missing_base_url(capsys):
    with pytest.raises(SystemExit) as e:
        main([])

    assert e.value.code == 1
    captured = capsys.readouterr()
    assert "Arg 'baseUrl' must not be null" in captured.out
    assert 'usage: ldpwalker' in captured.out
    assert httpretty.latest_requests() == []


def test_main_bad_argument(capsys):
    with pytest.raises(SystemExit) as e:
        main(['--bogus'])

    assert e.value.code == 1
    assert 'Error parsing args' in capsys.readouterr().out


@httpretty.activate
def test_main_unexpected_status(capsys, base_url, register_container):
    register_container(base_url, children=[f'{base_url}/missing'])
    register_container(f'{base_url}/missing', head_status=404)

    with pytest.raises(SystemExit) as e:
        main(['-b', base_url])

    assert e.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert '404 Not Found' in captured.err
    assert 'Walk aborted after visiting 2 resource(s)' in captured.err


@httpretty.activate
def test_main_quiet(capsys, base_url, register_container):
    register_container(base_url)

    main(['-q', '-b', base_url])

    captured = capsys.readouterr()
    assert captured.out.strip() == '1'
    assert 'Get:' not in captured.err


@httpretty.activate
def test_main_verbose(capsys, base_url, register_container):
    register_container(base_url)

    main(['-v', '-b', base_url])

    captured = capsys.readouterr()
    assert captured.out.strip() == '1'
    assert f'Get triples for: {base_url}' in captured.err


@httpretty.activate
def test_main_log_dir(tmp_path, capsys, base_url, register_container):
    log_dir = tmp_path / 'logs'
    config_path = tmp_path / 'ldpwalker.yml'
    config_path.write_text(f'REPOSITORY:\n  REST_ENDPOINT: {base_url}\n  LOG_DIR: {log_dir}\n')
    register_container(base_url)

    main(['-c', str(config_path)])

    assert capsys.readouterr().out.strip() == '1'
    log_files = list(log_dir.glob('ldpwalker.*.log'))
    assert len(log_files) == 1
    assert f'Get: {base_url}' in log_files[0].read_text()

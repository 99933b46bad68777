import os
from pathlib import Path

import pytest

import pyiniconf
from pyiniconf import IniContractViolation, IniStore


def test_read_existing_int(make_ini):
    path = make_ini('[Example]\nfoo=42\n')
    ini = pyiniconf.open(path)
    assert ini.get_int('Example', 'foo', -1) == 42
    assert ini.get_int('Example', 'missing', -1) == -1
    ini.close()


def test_missing_file_returns_default(tmp_path: Path):
    with IniStore(tmp_path / 'absent.ini') as ini:
        assert ini.get_string('S', 'K', 'fallback') == 'fallback'
        assert ini.get_string('S', 'K', None) == ''
        assert ini.get_long('S', 'K', 7) == 7
        assert ini.get_double('S', 'K', 2.5) == 2.5
        assert ini.get_bool('S', 'K', True) is True
        assert ini.get_section(0) == ''
        assert ini.get_key('S', 0) == ''
    assert not (tmp_path / 'absent.ini').exists()


def test_trailing_space_is_quoted(tmp_path: Path):
    path = tmp_path / 'cfg.ini'
    with IniStore(path) as ini:
        assert ini.put_string('S', 'K', 'hello world ')
        assert 'K="hello world "' in path.read_text()
        assert ini.get_string('S', 'K', '') == 'hello world '


@pytest.mark.parametrize('value', ['plain', '', ' both ', 'a ; b', '"q"',
                                   'x # y', 'say "hi" ;now', 'naïve'])
def test_string_round_trip(tmp_path: Path, value):
    with IniStore(tmp_path / 'cfg.ini') as ini:
        assert ini.put_string('S', 'K', value)
        assert ini.get_string('S', 'K', 'default') == value


def test_numeric_round_trip(tmp_path: Path):
    with IniStore(tmp_path / 'cfg.ini') as ini:
        assert ini.put_long('N', 'long', -1234567890123)
        assert ini.put_int('N', 'int', 42)
        assert ini.put_double('N', 'double', 0.25)
        assert ini.put_double('N', 'big', -1.5e10)
        assert ini.get_long('N', 'long', 0) == -1234567890123
        assert ini.get_int('N', 'int', 0) == 42
        assert ini.get_double('N', 'double', 0.0) == 0.25
        assert ini.get_double('N', 'big', 0.0) == -1.5e10
    text = (tmp_path / 'cfg.ini').read_text()
    assert 'double=2.500000e-01' in text


def test_malformed_numbers_parse_prefix(make_ini):
    path = make_ini(
        '[N]\nword=abc\nunit=12abc\nweight=3.5kg\nhex=0x1F\n'
        'neg=-0x10\nbare=Ax5\n'
        'empty=\nexp=1e3\n')
    with IniStore(path) as ini:
        assert ini.get_int('N', 'word', -1) == 0
        assert ini.get_int('N', 'unit', -1) == 12
        assert ini.get_double('N', 'weight', -1.0) == 3.5
        assert ini.get_double('N', 'word', -1.0) == 0.0
        assert ini.get_long('N', 'hex', -1) == 31
        assert ini.get_long('N', 'neg', -1) == 0
        assert ini.get_long('N', 'bare', -1) == 10
        assert ini.get_int('N', 'hex', -1) == 0
        assert ini.get_int('N', 'empty', -1) == -1
        assert ini.get_double('N', 'exp', 0.0) == 1000.0


def test_get_bool(make_ini):
    path = make_ini('[B]\na=yes\nb=False\nc=1\nd=maybe\ne=T\n')
    with IniStore(path) as ini:
        assert ini.get_bool('B', 'a') is True
        assert ini.get_bool('B', 'b', True) is False
        assert ini.get_bool('B', 'c') is True
        assert ini.get_bool('B', 'd', True) is True
        assert ini.get_bool('B', 'd', False) is False
        assert ini.get_bool('B', 'e') is True


def test_sections_are_case_sensitive(make_ini):
    path = make_ini('[Example]\nfoo=42\n')
    with IniStore(path) as ini:
        assert ini.get_int('example', 'foo', -1) == -1
        assert ini.get_int('Example', 'FOO', -1) == -1


def test_top_level_scope(make_ini):
    path = make_ini('a=1\nb=2\n[S]\na=3\n')
    with IniStore(path) as ini:
        assert ini.get_string(None, 'a') == '1'
        assert ini.get_string('', 'b') == '2'
        assert ini.get_string('S', 'a') == '3'
        assert ini.get_string('S', 'b', 'none') == 'none'
        assert ini.get_key('', 0) == 'a'
        assert ini.get_key(None, 1) == 'b'
        assert ini.get_key(None, 2) == ''


def test_first_match_wins(make_ini):
    path = make_ini('[S]\nk=first\n[T]\nk=other\n[S]\nk=second\n')
    with IniStore(path) as ini:
        assert ini.get_string('S', 'k') == 'first'
        assert ini.put_string('S', 'k', 'changed')
        assert ini.get_string('S', 'k') == 'changed'
    assert path.read_text() == \
        '[S]\nk=changed\n[T]\nk=other\n[S]\nk=second\n'


def test_enumeration(make_ini):
    path = make_ini('[A]\nx=1\ny=2\nx=3\n[B]\n[A]\nz=4\n')
    with IniStore(path) as ini:
        assert list(ini.sections()) == ['A', 'B']
        assert ini.get_section(0) == ini.get_section(0) == 'A'
        assert ini.get_section(2) == ''
        assert list(ini.keys('A')) == ['x', 'y', 'z']
        assert ini.get_key('A', 3) == ''
        assert list(ini.keys('B')) == []
        assert ini.get_key('missing', 0) == ''


def test_enumeration_sees_fresh_file(make_ini):
    path = make_ini('[A]\n')
    with IniStore(path) as ini:
        assert ini.get_section(1) == ''
        path.write_text('[A]\n[B]\n')
        assert ini.get_section(1) == 'B'


def test_browse(make_ini):
    path = make_ini('top=0\n[A]\nx=1\n[B]\ny=2\nz=3\n')
    seen = []
    with IniStore(path) as ini:
        assert ini.browse(lambda s, k, v: seen.append((s, k, v)) or True)
        assert seen == [('', 'top', '0'), ('A', 'x', '1'),
                        ('B', 'y', '2'), ('B', 'z', '3')]

        seen.clear()
        assert ini.browse(lambda s, k, v: seen.append(k) or k != 'x')
        assert seen == ['top', 'x']


def test_remove_key(tmp_path: Path):
    with IniStore(tmp_path / 'cfg.ini') as ini:
        assert ini.put_string('S', 'K', 'v')
        assert ini.put_string('S', 'L', 'w')
        ini.remove_key('S', 'K')
        assert ini.get_string('S', 'K', 'gone') == 'gone'
        assert ini.get_string('S', 'L') == 'w'
        ini.remove_key('S', 'nothing')


def test_empty_key_erases_section(make_ini):
    path = make_ini('[A]\nx=1\n[B]\ny=2\n')
    with IniStore(path) as ini:
        assert ini.put_string('A', None, None)
        assert list(ini.sections()) == ['B']
        ini.remove_key('B', '')
    assert path.read_text() == ''


def test_preserves_comments_and_order(make_ini):
    text = '; keep me\n[A]\n# and me\nx = 1 ; note\ny=2\n\n[B]\nz=3\n'
    path = make_ini(text)
    with IniStore(path) as ini:
        assert ini.put_long('A', 'x', 10)
        assert ini.put_string('A', 'new', 'n')
    assert path.read_text() == (
        '; keep me\n[A]\n# and me\nx = 10\ny=2\nnew=n\n\n[B]\nz=3\n')


def test_unchanged_value_skips_rewrite(make_ini):
    path = make_ini('[A]\nx=1\n')
    before = os.stat(path).st_ino
    with IniStore(path) as ini:
        assert ini.put_string('A', 'x', '1')
        ini.remove_key('A', 'missing')
    assert os.stat(path).st_ino == before


def test_failed_rewrite_leaves_file_alone(make_ini, tmp_path: Path):
    path = make_ini('[A]\nx=1\n')
    original = path.read_bytes()
    # something already sits where the temp file should go.
    (tmp_path / '~Example.ini').mkdir()
    with IniStore(path) as ini:
        assert not ini.put_string('A', 'x', '2')
        assert not ini.put_double('A', 'y', 1.0)
        assert ini.get_string('A', 'x') == '1'
    assert path.read_bytes() == original


def test_unreadable_source(tmp_path: Path):
    path = tmp_path / 'dir.ini'
    path.mkdir()
    with IniStore(path) as ini:
        assert ini.get_string('A', 'x', 'dflt') == 'dflt'
        assert not ini.put_string('A', 'x', '1')
        assert not ini.browse(lambda *_: True)
    assert path.is_dir()


def test_long_value_is_truncated(make_ini):
    path = make_ini('[A]\nlong=abcdefghij\n')
    with IniStore(path, bufsize=8) as ini:
        with pytest.warns(UserWarning):
            assert ini.get_string('A', 'long') == 'abcdefg'
        assert ini.get_string('A', 'long', bufsize=11) == 'abcdefghij'


def test_close_and_contract_violations(tmp_path: Path):
    ini = IniStore(tmp_path / 'cfg.ini')
    with pytest.raises(IniContractViolation):
        ini.get_string('S', None)
    with pytest.raises(IniContractViolation):
        ini.get_string('S', 'K', bufsize=0)
    with pytest.raises(IniContractViolation):
        ini.get_section(-1)
    with pytest.raises(IniContractViolation):
        ini.get_key('S', -1)
    with pytest.raises(IniContractViolation):
        ini.put_string('S', 'K', 'two\nlines')
    with pytest.raises(IniContractViolation):
        ini.put_string('S]', 'K', 'v')

    ini.close()
    assert ini.closed
    with pytest.raises(IniContractViolation):
        ini.get_int('S', 'K', 0)
    with pytest.raises(IniContractViolation):
        ini.put_string('S', 'K', 'v')
    with pytest.raises(IniContractViolation):
        ini.close()
    with pytest.raises(IniContractViolation):
        IniStore(tmp_path / 'cfg.ini', bufsize=0)


def test_context_manager_closes_on_error(tmp_path: Path):
    with pytest.raises(RuntimeError):
        with IniStore(tmp_path / 'cfg.ini') as ini:
            raise RuntimeError('boom')
    assert ini.closed
    with pytest.raises(IniContractViolation):
        with ini:
            pass


def test_non_utf8_file_is_written_back_in_its_codec(tmp_path: Path):
    path = tmp_path / 'legacy.ini'
    path.write_bytes(b'[Menu]\nname=caf\xe9\n')
    with IniStore(path) as ini:
        assert ini.put_string('Menu', 'price', '3')
    raw = path.read_bytes()
    assert raw.startswith(b'[Menu]\nname=caf\xe9\nprice=3')


def test_replace_on_spaced_line_keeps_comment_marks(make_ini):
    path = make_ini('[S]\ncolor = red\nk = 1\n')
    with IniStore(path) as ini:
        assert ini.put_string('S', 'color', '#fff')
        assert ini.put_string('S', 'k', ';x')
        assert ini.get_string('S', 'color') == '#fff'
        assert ini.get_string('S', 'k') == ';x'
    assert path.read_text() == '[S]\ncolor = "#fff"\nk = ";x"\n'


def test_key_with_trailing_backslash(tmp_path: Path):
    path = tmp_path / 'cfg.ini'
    with IniStore(path) as ini:
        assert ini.put_string('S', 'a\\', 'v')
        assert ini.put_string('S', 'a\\', 'w')
        assert ini.get_string('S', 'a\\', 'D') == 'w'
        assert list(ini.keys('S')) == ['a\\']
    assert path.read_text() == '[S]\na\\\\=w\n'


def test_failed_rename_drops_temp_file(make_ini, tmp_path, monkeypatch):
    path = make_ini('[A]\nx=1\n')
    original = path.read_bytes()

    def refuse(src, dst):
        raise OSError('rename refused')

    monkeypatch.setattr('pyiniconf.parser.os.replace', refuse)
    with IniStore(path) as ini:
        assert not ini.put_string('A', 'x', '2')
    assert not (tmp_path / '~Example.ini').exists()
    assert path.read_bytes() == original


def test_section_with_carriage_return_is_rejected(tmp_path: Path):
    with IniStore(tmp_path / 'cfg.ini') as ini:
        with pytest.raises(IniContractViolation):
            ini.put_string('a\rb', 'k', 'v')
    assert not (tmp_path / 'cfg.ini').exists()

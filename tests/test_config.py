import pytest
import structlog
from selfmap import KeyedCollection
from selfmap import config as config_module
from selfmap.config import Config, load_config, close_log_file
from testdata import Person


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    close_log_file()
    structlog.reset_defaults()


def test_config_defaults():
    config = Config()
    assert config.log_level == "info"
    assert config.log_file == "STDOUT"
    assert config.log_format == "text"


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("SELFMAP_LOG_LEVEL", "warning")
    monkeypatch.setenv("SELFMAP_LOG_FORMAT", "json")
    config = Config()
    assert config.log_level == "warning"
    assert config.log_format == "json"


def test_load_config_overrides():
    config = load_config(log_level="debug", log_format="json")
    assert config.log_level == "debug"
    assert config.log_format == "json"


def test_load_config_bad_level():
    with pytest.raises(ValueError):
        load_config(log_level="chatty")


def test_load_config_log_file(tmp_path):
    log_file = tmp_path / "selfmap.log"
    load_config(log_level="debug", log_format="json", log_file=str(log_file))
    coll = KeyedCollection([Person(id=1, name="a")], "id")
    coll.add(Person(id=1, name="b"))
    assert '"event": "record replaced"' in log_file.read_text()


def test_load_config_filters_level(capsys):
    load_config(log_level="info")
    coll = KeyedCollection([Person(id=1, name="a")], "id")
    coll.add(Person(id=1, name="b"))
    assert capsys.readouterr().out == ""


def test_load_config_closes_previous_log_file(tmp_path):
    load_config(log_file=str(tmp_path / "first.log"))
    first = config_module._log_file
    load_config(log_file=str(tmp_path / "second.log"))
    assert first.closed
    assert not config_module._log_file.closed
    load_config()
    assert config_module._log_file is None


def test_close_log_file(tmp_path):
    load_config(log_file=str(tmp_path / "selfmap.log"))
    handle = config_module._log_file
    close_log_file()
    assert handle.closed
    # closing twice is harmless
    close_log_file()

#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
from pathlib import Path

import pytest
from pydantic import ValidationError

from wxf.conf import DEFAULT_SETTINGS_FILEPATH, UNITTESTS_SETTINGS_FILEPATH
from wxf.conf.get_settings import (
    CONFIG_YAML_ENV_VAR,
    _reset_global_settings,
    get_global_settings,
    get_settings_source,
)
from wxf.conf.settings import CodecSettings

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


@pytest.fixture
def fresh_settings():
    _reset_global_settings()
    yield
    _reset_global_settings()


def test_valid_settings_from_yaml():
    settings = CodecSettings.from_yaml(filepath=FIXTURES_DIR / 'valid_settings_fixture.yml')
    assert settings == CodecSettings(MAX_INPUT_BYTES=1024, MAX_DEPTH=16, INCLUDE_HEADER=False)


def test_partial_settings_from_yaml():
    settings = CodecSettings.from_yaml(filepath=FIXTURES_DIR / 'partial_settings_fixture.yml')
    assert settings.MAX_DEPTH == 4
    assert settings.MAX_INPUT_BYTES is None
    assert settings.INCLUDE_HEADER is True


@pytest.mark.parametrize('filename, error', [
    ('invalid_depth_settings_fixture.yml', 'greater than or equal to 1'),
    ('unknown_field_settings_fixture.yml', 'Extra inputs are not permitted'),
])
def test_invalid_settings_from_yaml(filename, error):
    with pytest.raises(ValidationError) as exc_info:
        CodecSettings.from_yaml(filepath=FIXTURES_DIR / filename)
    assert error in str(exc_info.value)


def test_settings_file_must_be_a_mapping():
    with pytest.raises(ValueError, match='cannot be parsed as a dictionary'):
        CodecSettings.from_yaml(filepath=FIXTURES_DIR / 'list_settings_fixture.yml')
    with pytest.raises(ValueError, match='is not a file'):
        CodecSettings.from_yaml(filepath=FIXTURES_DIR / 'missing.yml')


def test_settings_are_frozen():
    settings = CodecSettings()
    with pytest.raises(ValidationError):
        settings.MAX_DEPTH = 3  # type: ignore[misc]


def test_packaged_files():
    default = CodecSettings.from_yaml(filepath=DEFAULT_SETTINGS_FILEPATH)
    assert default == CodecSettings()
    unittests = CodecSettings.from_yaml(filepath=UNITTESTS_SETTINGS_FILEPATH)
    assert unittests.MAX_DEPTH is not None
    assert unittests.MAX_INPUT_BYTES is not None


def test_global_settings_from_env(fresh_settings, monkeypatch):
    filepath = str(FIXTURES_DIR / 'valid_settings_fixture.yml')
    monkeypatch.setenv(CONFIG_YAML_ENV_VAR, filepath)
    settings = get_global_settings()
    assert settings.MAX_DEPTH == 16
    assert get_global_settings() is settings
    assert get_settings_source() == filepath

    # loading from another file in the same process is an error
    monkeypatch.setenv(CONFIG_YAML_ENV_VAR, UNITTESTS_SETTINGS_FILEPATH)
    with pytest.raises(Exception, match='different file'):
        get_global_settings()


def test_global_settings_default(fresh_settings, monkeypatch):
    monkeypatch.delenv(CONFIG_YAML_ENV_VAR, raising=False)
    assert get_global_settings() == CodecSettings()
    assert get_settings_source() == DEFAULT_SETTINGS_FILEPATH

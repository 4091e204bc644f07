# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for option resolution.
"""
import datetime
from pathlib import Path
import pytest
from lxctb.errors import ConfigurationError
from lxctb.MODELS.host_settings import HostSettings
from lxctb.MANAGERS.option_resolver import OptionResolver, normalize_output_name

TODAY = datetime.date(2025, 3, 7)


@pytest.fixture
def settings(tmp_path):
    default = tmp_path / "default"
    default.mkdir()
    resolv = tmp_path / "resolv.conf"
    resolv.write_text("nameserver 127.0.0.53\nnameserver 10.9.8.7\n")
    return HostSettings(
        base_cache=str(default),
        shared_cache=str(tmp_path / "shared"),
        default_cache=str(default),
        resolv_conf=str(resolv),
    )


class TestNormalizeOutputName:
    """Tests for output file name suffix handling."""

    def test_other_suffix_substituted(self):
        assert normalize_output_name("foo.tar.xz", ".tar.zst") == "foo.tar.zst"
        assert normalize_output_name("foo.tar.zst", ".tar.xz") == "foo.tar.xz"

    def test_missing_suffix_appended(self):
        assert normalize_output_name("foo", ".tar.zst") == "foo.tar.zst"
        assert normalize_output_name("foo.tar", ".tar.xz") == "foo.tar.tar.xz"

    def test_expected_suffix_kept(self):
        assert normalize_output_name("foo.tar.zst", ".tar.zst") == "foo.tar.zst"


class TestOptionResolver:
    """Tests for OptionResolver."""

    def test_defaults(self, ubuntu_profile, settings):
        config = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve({})
        assert config.release == "24.04"
        assert config.template_label == "cloud"
        assert config.output_filename == "ubuntu-24.04-cloud_20250307_amd64.tar.zst"
        assert config.cache_dir == Path(settings.default_cache)
        assert config.output_path == Path(settings.default_cache) / config.output_filename
        assert config.ssh_key == ""
        assert config.nameserver == "10.9.8.7"

    def test_fedora_defaults(self, fedora_profile, settings):
        config = OptionResolver(fedora_profile, settings, environ={}, today=TODAY).resolve({})
        assert config.output_filename == "fedora-42-cloud_20250307_amd64.tar.xz"

    def test_overrides(self, ubuntu_profile, settings, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        config = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve({
            "release": "22.04",
            "template": "minimal",
            "output": "custom.tar.xz",
            "ssh_key": "ssh-ed25519 AAAA test",
            "nameserver": "192.0.2.1",
            "cache_dir": str(target),
        })
        assert config.release == "22.04"
        assert config.template_label == "minimal"
        assert config.output_filename == "custom.tar.zst"
        assert config.ssh_key == "ssh-ed25519 AAAA test"
        assert config.nameserver == "192.0.2.1"
        assert config.cache_dir == target

    def test_label_in_generated_name(self, ubuntu_profile, settings):
        config = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve(
            {"release": "22.04", "template": "sssd"})
        assert config.output_filename == "ubuntu-22.04-sssd_20250307_amd64.tar.zst"

    def test_auth_key_from_environment(self, ubuntu_profile, settings):
        resolver = OptionResolver(ubuntu_profile, settings, environ={"AUTH_KEY": "env-key"}, today=TODAY)
        assert resolver.resolve({}).ssh_key == "env-key"
        assert resolver.resolve({"ssh_key": "flag-key"}).ssh_key == "flag-key"

    def test_shared_cache_preferred(self, ubuntu_profile, settings):
        Path(settings.shared_cache).mkdir()
        config = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve({})
        assert config.cache_dir == Path(settings.shared_cache)

    def test_missing_cache_dir_fails(self, ubuntu_profile, settings, tmp_path):
        resolver = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY)
        with pytest.raises(ConfigurationError, match="not found"):
            resolver.resolve({"cache_dir": str(tmp_path / "missing")})

    def test_missing_default_cache_fails(self, ubuntu_profile, tmp_path):
        settings = HostSettings(shared_cache=str(tmp_path / "a"), default_cache=str(tmp_path / "b"))
        with pytest.raises(ConfigurationError):
            OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve({})

    def test_config_is_immutable(self, ubuntu_profile, settings):
        config = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve({})
        with pytest.raises(Exception):
            config.release = "20.04"

    def test_explicit_empty_key_overrides_environment(self, ubuntu_profile, settings):
        resolver = OptionResolver(ubuntu_profile, settings, environ={"AUTH_KEY": "env-key"}, today=TODAY)
        assert resolver.resolve({"ssh_key": ""}).ssh_key == ""
        assert resolver.resolve({"ssh_key": None}).ssh_key == "env-key"

    def test_output_with_directory_rejected(self, ubuntu_profile, settings, tmp_path):
        resolver = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY)
        with pytest.raises(ConfigurationError, match="plain file name"):
            resolver.resolve({"output": str(tmp_path / "elsewhere" / "foo")})
        with pytest.raises(ConfigurationError):
            resolver.resolve({"output": "sub/foo.tar.zst"})

    def test_output_lands_in_cache_dir(self, ubuntu_profile, settings):
        config = OptionResolver(ubuntu_profile, settings, environ={}, today=TODAY).resolve({"output": "foo"})
        assert config.output_path == config.cache_dir / "foo.tar.zst"

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
Resolution of command line options into an immutable BuildConfig.
"""
import datetime
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from ..errors import ConfigurationError
from ..MODELS.build_config import BuildConfig
from ..MODELS.distro_profile import ARCHIVE_SUFFIXES, DistroProfile
from ..MODELS.host_settings import HostSettings
from ..PARSERS.resolv_conf import choose_nameserver

logger = logging.getLogger(__name__)

SSH_KEY_VAR = "AUTH_KEY"
DEFAULT_TEMPLATE_LABEL = "cloud"


def normalize_output_name(filename: str, suffix: str) -> str:
    """
    Forces the expected archive suffix onto a user supplied file name.

    A different known archive suffix is replaced, a missing one appended:
    `foo.tar.xz` becomes `foo.tar.zst` for a zstd profile, `foo` becomes
    `foo.tar.zst`.
    """
    if filename.endswith(suffix):
        return filename
    for other in ARCHIVE_SUFFIXES:
        if filename.endswith(other):
            return filename[: -len(other)] + suffix
    return filename + suffix


def default_output_name(profile: DistroProfile, release: str, label: str, datestamp: str) -> str:
    return f"{profile.name}-{release}-{label}_{datestamp}_amd64{profile.output_suffix}"


class OptionResolver:
    """
    Turns the raw option mapping of one invocation into a BuildConfig.
    """
    def __init__(self,
                 profile: DistroProfile,
                 settings: Optional[HostSettings] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 today: Optional[datetime.date] = None):
        """
        :param profile: Distro variant being built.
        :param settings: Host settings (cache locations, fallbacks).
        :param environ: Environment used for AUTH_KEY (defaults to os.environ).
        :param today: Date used in generated file names.
        """
        self.profile = profile
        self.settings = settings or HostSettings()
        self.environ = os.environ if environ is None else environ
        self.today = today or datetime.date.today()

    def resolve_cache_dir(self, explicit: Optional[str]) -> Path:
        """
        :param explicit: Directory passed with --cache-dir, if any.
        :return: The target cache directory.
        :raises ConfigurationError: If the resolved directory does not exist.
        """
        if explicit:
            cache_dir = explicit
        elif os.path.isdir(self.settings.shared_cache):
            cache_dir = self.settings.shared_cache
        else:
            cache_dir = self.settings.default_cache

        if not os.path.isdir(cache_dir):
            raise ConfigurationError(f"Target cache '{cache_dir}' not found.")
        return Path(cache_dir)

    def resolve(self, options: Mapping[str, Optional[str]]) -> BuildConfig:
        """
        Resolves options in a fixed order: cache dir, output name, SSH key,
        nameserver. Unset or empty options fall back to their defaults, except
        an explicit empty ssh_key, which disables key injection.

        :param options: Mapping with keys release, template, output, ssh_key,
            nameserver and cache_dir.
        :return: The immutable build configuration.
        """
        # An explicit empty ssh_key disables injection, so only it keeps ""
        opts: Dict[str, Optional[str]] = {
            k: (v if k == "ssh_key" else (v or None)) for k, v in options.items()
        }
        release = opts.get("release") or self.profile.default_release
        label = opts.get("template") or DEFAULT_TEMPLATE_LABEL
        datestamp = self.today.strftime("%Y%m%d")

        cache_dir = self.resolve_cache_dir(opts.get("cache_dir"))

        output = opts.get("output")
        if output and os.sep in output:
            raise ConfigurationError(
                f"Output filename '{output}' must be a plain file name; use --cache-dir for the directory."
            )
        if output:
            output = normalize_output_name(output, self.profile.output_suffix)
        else:
            output = default_output_name(self.profile, release, label, datestamp)

        ssh_key = opts.get("ssh_key")
        if ssh_key is None:
            ssh_key = self.environ.get(SSH_KEY_VAR, "")
        if not ssh_key:
            logger.warning("No SSH key provided - skipping key injection.")

        nameserver = choose_nameserver(opts.get("nameserver"),
                                       resolv_conf=self.settings.resolv_conf,
                                       fallback=self.settings.fallback_nameserver)

        return BuildConfig(
            profile=self.profile,
            release=release,
            template_label=label,
            output_filename=output,
            cache_dir=cache_dir,
            base_cache=Path(self.settings.base_cache),
            storage=self.settings.storage,
            ssh_key=ssh_key,
            nameserver=nameserver,
            datestamp=datestamp,
        )

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
Host settings from an optional env-file and the process environment.
"""
import os
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..MODELS.host_settings import HostSettings

DEFAULT_SETTINGS_FILE = "/etc/lxctb/lxctb.env"
SETTINGS_FILE_VAR = "LXCTB_CONFIG"
PREFIX = "LXCTB_"


def _extract(values: Mapping[str, Optional[str]]) -> Dict[str, str]:
    fields = HostSettings.model_fields
    settings = {}
    for key, value in values.items():
        if not key.startswith(PREFIX) or value is None or value == "":
            continue
        name = key[len(PREFIX):].lower()
        if name in fields:
            settings[name] = value
    return settings


def load_host_settings(environ: Optional[Mapping[str, str]] = None,
                       path: Optional[str] = None) -> HostSettings:
    """
    Builds HostSettings. Later sources win: defaults, env-file, environment.

    :param environ: Process environment (defaults to os.environ).
    :param path: Env-file to read; defaults to $LXCTB_CONFIG or
        /etc/lxctb/lxctb.env. A missing default file is not an error.
    :return: The validated settings.
    """
    environ = os.environ if environ is None else environ
    explicit = path or environ.get(SETTINGS_FILE_VAR)
    settings_file = explicit or DEFAULT_SETTINGS_FILE

    values: Dict[str, str] = {}
    if os.path.isfile(settings_file):
        values.update(_extract(dotenv_values(settings_file)))
    elif explicit:
        raise ConfigurationError(f"Settings file '{settings_file}' not found.")
    values.update(_extract(environ))

    try:
        return HostSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid host settings: {e}") from e

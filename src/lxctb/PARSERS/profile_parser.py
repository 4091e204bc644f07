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
Loader for the distribution profiles shipped as YAML next to the package.
"""
import os
from typing import List, Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..MODELS.distro_profile import DistroProfile

PROFILES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "profiles")


class ProfileParser:
    """
    Parses distro profiles from YAML files or strings.
    """
    def __init__(self, profiles_dir: Optional[str] = None):
        """
        :param profiles_dir: Directory holding `<name>.yaml` profiles.
        """
        self.profiles_dir = profiles_dir or PROFILES_DIR

    def available(self) -> List[str]:
        """
        :return: Names of the profiles found in the profiles directory.
        """
        return sorted(
            os.path.splitext(f)[0]
            for f in os.listdir(self.profiles_dir)
            if f.endswith((".yaml", ".yml"))
        )

    def load(self, name: str) -> DistroProfile:
        """
        Loads a profile by name.

        :param name: Profile name, e.g. "ubuntu".
        :return: The validated profile.
        :raises ConfigurationError: If the profile is missing or invalid.
        """
        path = os.path.join(self.profiles_dir, f"{name}.yaml")
        if not os.path.exists(path):
            raise ConfigurationError(
                f"Unknown distro profile '{name}' (available: {', '.join(self.available())})"
            )
        with open(path, "r") as f:
            content = f.read()
        return self.parse_from_string(content, source=path)

    @staticmethod
    def parse_from_string(content: str, source: str = "<string>") -> DistroProfile:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse profile '{source}': {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Profile '{source}' must contain a mapping at the top level")

        try:
            return DistroProfile(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid profile '{source}': {e}") from e

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
Models for the resolved build configuration and the chosen base template.
"""
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict

from .distro_profile import Compression, DistroProfile


class BuildConfig(BaseModel):
    """
    Everything a build run needs, resolved once from defaults, host settings,
    environment and command line flags. Immutable once constructed.
    """
    model_config = ConfigDict(frozen=True)

    profile: DistroProfile
    release: str
    template_label: str = "cloud"
    output_filename: str
    cache_dir: Path
    base_cache: Path
    storage: str = "local"
    ssh_key: str = ""
    nameserver: str
    datestamp: str

    @property
    def distro(self) -> str:
        return self.profile.name

    @property
    def output_path(self) -> Path:
        return self.cache_dir / self.output_filename


class TemplateReference(BaseModel):
    """
    The upstream base template picked from the catalog.
    """
    model_config = ConfigDict(frozen=True)

    identifier: str
    path: Path
    compression: Optional[Compression] = None

    @property
    def basename(self) -> str:
        return self.identifier.rsplit("/", 1)[-1]

    @property
    def display_name(self) -> str:
        """Identifier without the trailing `_amd64.tar.*` part."""
        return self.identifier.rsplit("_", 1)[0]

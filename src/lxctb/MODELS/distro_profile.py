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
Models describing a distribution variant: where its base template comes
from, what the chroot customisation does, and how the result is packed.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class Compression(str, Enum):
    """
    Archive compression kinds understood by Proxmox templates.
    """
    XZ = "xz"
    ZSTD = "zstd"

    @property
    def suffix(self) -> str:
        return ".tar.xz" if self is Compression.XZ else ".tar.zst"

    @classmethod
    def from_path(cls, path: str) -> Optional["Compression"]:
        """The compression implied by a file name suffix, or None."""
        for compression in cls:
            if str(path).endswith(compression.suffix):
                return compression
        return None


ARCHIVE_SUFFIXES = tuple(c.suffix for c in Compression)


class PackageManager(str, Enum):
    APT = "apt"
    DNF = "dnf"


class NetworkPolicy(str, Enum):
    """
    What to do with the generated DHCP .network file inside the template.

    keep   - write it when no .network file exists
    remove - write it, then delete it again so the host's static config wins
    skip   - never write it
    """
    KEEP = "keep"
    REMOVE = "remove"
    SKIP = "skip"


class SshActivation(BaseModel):
    """
    The SSH service/socket pair switched to socket activation.
    """
    model_config = ConfigDict(frozen=True)

    service: str
    socket: str


class DistroProfile(BaseModel):
    """
    A distribution variant, loaded from one of the packaged YAML profiles.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    default_release: str
    catalog_pattern: str
    compression: Compression
    package_manager: PackageManager
    ostype: str
    trace: bool = False

    packages: List[str] = []
    enable_services: List[str] = []
    mask_services: List[str] = []
    disable_services: List[str] = []
    remove_links: List[str] = []
    preset_disable: List[str] = []

    ssh: Optional[SshActivation] = None
    network: NetworkPolicy = NetworkPolicy.SKIP
    issue_banner: Optional[str] = None

    @property
    def output_suffix(self) -> str:
        return self.compression.suffix

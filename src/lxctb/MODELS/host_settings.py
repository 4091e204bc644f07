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
Host-level settings: cache locations, pveam storage, DNS fallback, logging.
"""
from typing import Optional
from pydantic import BaseModel

PROXMOX_TEMPLATE_CACHE = "/var/lib/vz/template/cache"


class HostSettings(BaseModel):
    """
    Defaults for a Proxmox host, overridable through the env-file or the
    process environment (see PARSERS.settings_parser).
    """
    base_cache: str = PROXMOX_TEMPLATE_CACHE
    shared_cache: str = "/mnt/pve/shared/template/cache"
    default_cache: str = PROXMOX_TEMPLATE_CACHE
    storage: str = "local"
    fallback_nameserver: str = "8.8.8.8"
    resolv_conf: str = "/etc/resolv.conf"
    work_dir: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

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
Nameserver selection for the chroot. A loopback stub resolver on the host
(systemd-resolved on 127.0.0.53, dnsmasq on 127.0.0.1) is useless inside
the extracted template, so a routable address is picked instead.
"""
import ipaddress
import logging
import re
from typing import List, Optional

from ..UTILS.console import highlight

logger = logging.getLogger(__name__)

FALLBACK_NAMESERVER = "8.8.8.8"

_NAMESERVER_RE = re.compile(r"^nameserver[ \t]+(\S+)")


def parse_nameservers(content: str) -> List[str]:
    """
    Returns every nameserver entry of a resolv.conf, in file order.
    """
    servers = []
    for line in content.splitlines():
        match = _NAMESERVER_RE.match(line)
        if match:
            servers.append(match.group(1))
    return servers


def is_loopback(address: str) -> bool:
    """
    True for 127.0.0.0/8 and ::1 (bracketed or not).
    """
    candidate = address.strip()
    if candidate.startswith("[") and candidate.endswith("]"):
        candidate = candidate[1:-1]
    try:
        ip = ipaddress.ip_address(candidate)
    except ValueError:
        return candidate.startswith("127.")
    if ip.version == 4:
        return ip in ipaddress.ip_network("127.0.0.0/8")
    return ip == ipaddress.ip_address("::1")


def select_nameserver(servers: List[str], fallback: str = FALLBACK_NAMESERVER) -> str:
    """
    First non-loopback entry in file order. When every entry is loopback, or
    there is none, the fallback is used.
    """
    for server in servers:
        if not is_loopback(server):
            return server
    return fallback


def choose_nameserver(explicit: Optional[str] = None,
                      resolv_conf: str = "/etc/resolv.conf",
                      fallback: str = FALLBACK_NAMESERVER) -> str:
    """
    Resolves the nameserver written into the template for the chroot phase.

    :param explicit: Value given on the command line, used verbatim.
    :param resolv_conf: Host resolver configuration to read otherwise.
    :param fallback: Public resolver used when the host only has loopbacks.
    :return: The chosen address.
    """
    if explicit:
        chosen = explicit
    else:
        try:
            with open(resolv_conf, "r") as f:
                servers = parse_nameservers(f.read())
        except OSError:
            servers = []
        chosen = select_nameserver(servers, fallback)

    logger.info("Using nameserver: %s", highlight(chosen))
    return chosen

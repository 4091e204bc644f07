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
Rendering of the customisation script executed inside the template chroot.
"""
import shlex
from jinja2 import Environment, StrictUndefined

from ..MODELS.distro_profile import DistroProfile, PackageManager

SCRIPT_NAME = "update.sh"
STUB_RESOLV = "/run/systemd/resolve/stub-resolv.conf"
DEFAULT_NETWORK_FILE = "/etc/systemd/network/20-container-default.network"
PRESET_FILE = "/etc/systemd/system-preset/90-local.preset"

AUTHORIZED_KEYS_TEMPLATE = """\
KEY="${KEY:-}"
if [[ -n "${KEY}" ]]; then
  mkdir -p {{ ssh_dir | shquote }}
  chmod 700 {{ ssh_dir | shquote }}
  touch {{ keys_file | shquote }}
  chmod 600 {{ keys_file | shquote }}
  grep -qxF -- "${KEY}" {{ keys_file | shquote }} || printf '%s\\n' "${KEY}" >> {{ keys_file | shquote }}
fi
"""

PRESET_TEMPLATE = """\
{% for unit in units %}
disable {{ unit }}
{% endfor %}
"""

SCRIPT_TEMPLATE = """\
#!/usr/bin/env bash
set -{{ 'x' if profile.trace else '' }}Eeuo pipefail
{% if apt %}
export DEBIAN_FRONTEND=noninteractive
{% else %}

if command -v dnf5 >/dev/null 2>&1; then
  DNF="dnf5 -y"; SKIP=""
else
  DNF="dnf -y"; SKIP="--skip-broken"
fi
{% endif %}

# Use the concrete nameserver dropped in by the builder
if [[ -e {{ stub }} ]]; then
  mkdir -p /etc
  if [[ "$(readlink -f /etc/resolv.conf 2>/dev/null || true)" != {{ stub }} ]]; then
    if ! cmp -s {{ stub }} /etc/resolv.conf 2>/dev/null; then
      cp -f {{ stub }} /etc/resolv.conf
    fi
  fi
fi

{% if apt %}
apt-get update -y
apt-get dist-upgrade -y
{% if profile.packages %}
apt-get install -y --no-install-recommends {{ profile.packages | map('shquote') | join(' ') }}
{% endif %}
{% else %}
$DNF upgrade $SKIP
{% if profile.packages %}
$DNF install $SKIP {{ profile.packages | map('shquote') | join(' ') }}
{% endif %}
{% endif %}

{% for unit in profile.enable_services %}
systemctl enable {{ unit | shquote }} >/dev/null 2>&1 || true
{% endfor %}
{% if profile.network.value != 'skip' %}

# Minimal DHCP network if none exists
if ! ls /etc/systemd/network/*.network >/dev/null 2>&1; then
  mkdir -p /etc/systemd/network
  cat > {{ network_file }} <<'NET'
[Match]
Name=eth0

[Network]
DHCP=yes
NET
fi
{% endif %}

{{ authorized_keys }}
{% if profile.ssh %}

# Socket-activated sshd
systemctl disable {{ profile.ssh.service | shquote }} >/dev/null 2>&1 || true
systemctl enable {{ profile.ssh.socket | shquote }} >/dev/null 2>&1 || true
rm -f {{ ('/etc/systemd/system/multi-user.target.wants/' ~ profile.ssh.service) | shquote }}
{% endif %}
{% if profile.network.value == 'remove' %}

# The static network config injected by Proxmox must win
rm -f {{ network_file }}
{% endif %}
{% if profile.mask_services or profile.disable_services %}

{% for unit in profile.disable_services %}
systemctl disable {{ unit | shquote }} >/dev/null 2>&1 || true
{% endfor %}
{% for unit in profile.mask_services %}
systemctl mask {{ unit | shquote }} >/dev/null 2>&1 || true
{% endfor %}
{% endif %}
{% if profile.remove_links %}

{% for link in profile.remove_links %}
rm -f {{ link | shquote }}
{% endfor %}
{% endif %}
{% if preset %}

# Presets are re-applied at first boot; override them as well
mkdir -p {{ preset_dir }}
cat > {{ preset_file }} <<'PRESET'
{{ preset }}PRESET
{% endif %}
{% if profile.issue_banner %}

mkdir -p /etc/issue.d
cat > /etc/issue.d/22_clhm_eth0.issue <<'ISSUE'
{{ profile.issue_banner }}
ISSUE
{% endif %}

{% if apt %}
apt-get autoremove -y --purge
apt-get clean
rm -rf /var/lib/apt/lists/* /tmp/* /var/tmp/*
{% else %}
$DNF clean all
rm -rf /var/cache/dnf /var/cache/yum /tmp/* /var/tmp/*
{% endif %}
"""


def _environment() -> Environment:
    env = Environment(trim_blocks=True, lstrip_blocks=True,
                      keep_trailing_newline=True, undefined=StrictUndefined)
    env.filters["shquote"] = lambda value: shlex.quote(str(value))
    return env


class CustomizationScript:
    """
    Renders the per-distro customisation script from a profile.
    """

    def __init__(self, profile: DistroProfile):
        """
        :param profile: The distro profile driving package and service choices.
        """
        self.profile = profile
        self.env = _environment()

    def render_authorized_keys(self, ssh_dir: str = "/root/.ssh") -> str:
        """
        :param ssh_dir: Directory holding authorized_keys.
        :return: Shell snippet appending $KEY once to authorized_keys.
        """
        return self.env.from_string(AUTHORIZED_KEYS_TEMPLATE).render(
            ssh_dir=ssh_dir, keys_file=f"{ssh_dir.rstrip('/')}/authorized_keys"
        )

    def render_preset(self) -> str:
        if not self.profile.preset_disable:
            return ""
        return self.env.from_string(PRESET_TEMPLATE).render(units=self.profile.preset_disable)

    def render(self) -> str:
        """
        :return: The complete bash script.
        """
        return self.env.from_string(SCRIPT_TEMPLATE).render(
            profile=self.profile,
            apt=self.profile.package_manager is PackageManager.APT,
            stub=STUB_RESOLV,
            network_file=DEFAULT_NETWORK_FILE,
            preset_dir=PRESET_FILE.rsplit("/", 1)[0],
            preset_file=PRESET_FILE,
            preset=self.render_preset(),
            authorized_keys=self.render_authorized_keys().rstrip("\n"),
        )

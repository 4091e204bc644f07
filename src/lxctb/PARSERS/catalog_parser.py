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
Parser for `pveam available` listings.
"""
import re
from typing import List


class CatalogParser:
    """
    Extracts template identifiers from the two-column pveam listing:

        system          ubuntu-24.04-standard_24.04-2_amd64.tar.zst
        turnkeylinux    debian-12-turnkey-wordpress_18.0-1_amd64.tar.gz
    """

    @staticmethod
    def parse_from_string(content: str) -> List[str]:
        identifiers = []
        for line in content.splitlines():
            fields = line.split()
            if len(fields) >= 2:
                identifiers.append(fields[1])
        return identifiers

    @staticmethod
    def filter(identifiers: List[str], pattern: str, release: str) -> List[str]:
        """
        Keeps the identifiers matching a profile pattern. `{release}` in the
        pattern is replaced by the literal (escaped) release string.

        Args:
            identifiers (List[str]): Catalog identifiers.
            pattern (str): Regular expression with a `{release}` placeholder.
            release (str): Target release, e.g. "24.04".

        Returns:
            List[str]: Matching identifiers, in catalog order.
        """
        regex = re.compile(pattern.replace("{release}", re.escape(release)))
        return [i for i in identifiers if regex.search(i)]

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
Version-aware ordering of template file names, in the spirit of `sort -V`.
"""
import re
from typing import Iterable, List, Optional, Tuple

_CHUNK_RE = re.compile(r"(\D*)(\d*)")


def version_key(name: str) -> Tuple[Tuple[str, int], ...]:
    """
    Splits a name into (text, number) pairs so digit runs compare numerically.

    >>> version_key("a_10.tar") > version_key("a_2.tar")
    True
    """
    chunks = []
    for text, digits in _CHUNK_RE.findall(name):
        if not text and not digits:
            continue
        chunks.append((text, int(digits) if digits else -1))
    return tuple(chunks)


def version_sorted(names: Iterable[str]) -> List[str]:
    return sorted(names, key=version_key)


def latest(names: Iterable[str]) -> Optional[str]:
    ordered = version_sorted(names)
    return ordered[-1] if ordered else None

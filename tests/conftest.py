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
Shared fixtures: a recording stand-in for the external command runner.
"""
import pytest
from lxctb.errors import CommandError
from lxctb.RUNNERS.command_runner import CmdResult, CommandRunner, format_argv

DEFAULT_TOOLS = {"pveam", "tar", "unzstd", "zstd", "xz", "chroot", "mount", "umount"}


class FakeRunner(CommandRunner):
    """
    Records every command instead of running it.

    - responses: argv prefix (tuple) -> stdout
    - failures: argv prefixes that exit non-zero
    - hooks: argv prefix -> callable(argv) run when the command is issued
    """

    def __init__(self, responses=None, failures=None, hooks=None, tools=None):
        self.responses = dict(responses or {})
        self.failures = set(failures or ())
        self.hooks = dict(hooks or {})
        self.tools = set(DEFAULT_TOOLS if tools is None else tools)
        self.calls = []
        self.envs = []

    @staticmethod
    def _matches(argv, prefix):
        return tuple(argv[:len(prefix)]) == tuple(prefix)

    def _lookup(self, mapping, argv):
        for prefix, value in mapping.items():
            if self._matches(argv, prefix):
                return value
        return None

    def _issue(self, argv):
        hook = self._lookup(self.hooks, argv)
        if hook:
            hook(argv)
        failed = any(self._matches(argv, p) for p in self.failures)
        return 1 if failed else 0

    def run(self, argv, check=True, env=None, stream=False):
        argv = list(argv)
        self.calls.append(argv)
        self.envs.append(env)
        returncode = self._issue(argv)
        result = CmdResult(argv=argv, returncode=returncode,
                           stdout=self._lookup(self.responses, argv) or "")
        if check and returncode != 0:
            raise CommandError(f"Command failed ({returncode}): {format_argv(argv)}", result)
        return result

    def pipe(self, producer, consumer, output_path=None):
        producer, consumer = list(producer), list(consumer)
        self.calls.append(producer)
        self.calls.append(consumer)
        self.envs.extend([None, None])
        for argv in (producer, consumer):
            if self._issue(argv):
                raise CommandError(f"Command failed (1): {format_argv(argv)}",
                                   CmdResult(argv=argv, returncode=1))
        if output_path:
            with open(output_path, "wb") as f:
                f.write(b"archive")
        if consumer[0] == "zstd" and "-o" in consumer:
            with open(consumer[consumer.index("-o") + 1], "wb") as f:
                f.write(b"archive")
        return CmdResult(argv=consumer, returncode=0)

    def which(self, tool):
        return f"/usr/bin/{tool}" if tool in self.tools else None

    def commands(self, name):
        """All recorded argv lists starting with `name`."""
        return [c for c in self.calls if c and c[0] == name]


@pytest.fixture
def fake_runner():
    return FakeRunner


@pytest.fixture
def ubuntu_profile():
    from lxctb.PARSERS.profile_parser import ProfileParser
    return ProfileParser().load("ubuntu")


@pytest.fixture
def fedora_profile():
    from lxctb.PARSERS.profile_parser import ProfileParser
    return ProfileParser().load("fedora")

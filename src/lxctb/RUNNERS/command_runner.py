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
Execution of external tools with logging and typed results.
"""
import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..errors import CommandError, DependencyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    """Outcome of a single external command."""

    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """
    Runs host commands. Every stage of a build goes through one instance,
    so tests can swap it for a recording fake.
    """

    def run(self,
            argv: Sequence[str],
            check: bool = True,
            env: Optional[Dict[str, str]] = None,
            stream: bool = False) -> CmdResult:
        """
        Runs a command to completion.

        Args:
            argv (Sequence[str]): Command and arguments. Never run through a shell.
            check (bool): Raise CommandError on a non-zero exit. With check=False
                the failure is tolerated and only returned.
            env (Optional[Dict[str, str]]): Extra environment variables.
            stream (bool): Let the command write to our stdout/stderr instead of
                capturing its output.

        Returns:
            CmdResult: Exit status and captured output.
        """
        argv_list = list(argv)
        logger.debug("CMD %s", format_argv(argv_list))

        capture = None if stream else subprocess.PIPE
        try:
            proc = subprocess.run(
                argv_list,
                text=True,
                stdout=capture,
                stderr=capture,
                env=dict(os.environ, **(env or {})),
            )
        except FileNotFoundError as e:
            raise DependencyError(f"{argv_list[0]} not found") from e

        result = CmdResult(argv=argv_list,
                           returncode=proc.returncode,
                           stdout=proc.stdout or "",
                           stderr=proc.stderr or "")
        if result.stderr:
            logger.debug("STDERR %s", result.stderr.strip())

        if check and not result.ok:
            raise CommandError(
                f"Command failed ({result.returncode}): {format_argv(argv_list)}"
                + (f"\n{result.stderr.strip()}" if result.stderr.strip() else ""),
                result,
            )
        return result

    def pipe(self,
             producer: Sequence[str],
             consumer: Sequence[str],
             output_path: Optional[str] = None) -> CmdResult:
        """
        Streams producer's stdout into consumer's stdin, like `a | b` with pipefail.

        Args:
            producer (Sequence[str]): The upstream command.
            consumer (Sequence[str]): The downstream command.
            output_path (Optional[str]): File receiving the consumer's stdout.

        Returns:
            CmdResult: Result of the consumer. A failure of either side raises.
        """
        producer, consumer = list(producer), list(consumer)
        logger.debug("CMD %s | %s%s", format_argv(producer), format_argv(consumer),
                     f" > {output_path}" if output_path else "")

        out_handle = open(output_path, "wb") if output_path else None
        try:
            try:
                upstream = subprocess.Popen(producer, stdout=subprocess.PIPE)
            except FileNotFoundError as e:
                raise DependencyError(f"{producer[0]} not found") from e
            try:
                downstream = subprocess.Popen(consumer, stdin=upstream.stdout, stdout=out_handle)
            except FileNotFoundError as e:
                upstream.kill()
                upstream.wait()
                raise DependencyError(f"{consumer[0]} not found") from e
            # Let the producer see SIGPIPE if the consumer exits early
            upstream.stdout.close()
            downstream.wait()
            upstream.wait()
        finally:
            if out_handle:
                out_handle.close()

        # Consumer first: when it dies the producer only reports SIGPIPE
        for argv, proc, other in ((consumer, downstream, upstream), (producer, upstream, downstream)):
            if proc.returncode != 0:
                result = CmdResult(argv=argv, returncode=proc.returncode)
                raise CommandError(
                    f"Command failed ({proc.returncode}): {format_argv(argv)}"
                    f" (other side of the pipe exited {other.returncode})",
                    result,
                )
        return CmdResult(argv=consumer, returncode=0)

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def require(self, tool: str, hint: str) -> str:
        """
        Returns the absolute path of a host tool or raises DependencyError.
        """
        path = self.which(tool)
        if not path:
            raise DependencyError(f"{tool} not found; {hint}")
        return path

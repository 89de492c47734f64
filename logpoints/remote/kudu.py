"""Remote debugging client that goes through the site's Kudu command API.

The log points debugger agent listens on localhost inside the application
container, so it cannot be reached directly.  Every operation is therefore
expressed as a ``curl`` command line that Kudu (the SCM companion site of the
application) runs inside the container::

    POST https://<site>.<scm domain>/api/command
    {"command": "curl -s -S http://localhost:32923/debugger/...", "dir": "/"}

Kudu answers with ``{"Output": ..., "Error": ..., "ExitCode": ...}`` where
``Output`` is the agent's JSON reply.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shlex
from typing import TYPE_CHECKING
from typing import Any
from urllib.parse import quote

import requests

from logpoints.config.adapter_config import DEFAULT_AGENT_PORT
from logpoints.config.adapter_config import DEFAULT_SCM_DOMAIN
from logpoints.errors import RemoteCallError
from logpoints.remote.client import RemoteDebugClient
from logpoints.remote.results import Failure
from logpoints.remote.results import Success

if TYPE_CHECKING:
    from logpoints.config import AdapterConfig
    from logpoints.remote.operations import CloseSessionRequest
    from logpoints.remote.operations import LoadedScriptsRequest
    from logpoints.remote.operations import LoadSourceRequest
    from logpoints.remote.operations import PublishCredential
    from logpoints.remote.operations import RemoveLogpointRequest
    from logpoints.remote.operations import SetLogpointRequest
    from logpoints.remote.results import CommandResult

logger = logging.getLogger(__name__)

AFFINITY_COOKIE = "ARRAffinity"


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _error_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def parse_command_output(body: dict[str, Any]) -> CommandResult[dict[str, Any]]:
    """Map a Kudu command result onto a ``CommandResult``.

    The run counts as successful when the command exited with 0 and printed
    a JSON object without an ``error`` member.
    """
    exit_code = body.get("ExitCode")
    output = body.get("Output") or ""
    stderr = (body.get("Error") or "").strip()

    try:
        parsed = json.loads(output)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        if parsed.get("error"):
            return Failure(_error_text(parsed["error"]))
        if exit_code == 0:
            return Success(parsed)

    if stderr:
        return Failure(stderr)
    if exit_code != 0:
        return Failure(f"Remote command exited with code {exit_code}")
    return Failure(f"Unexpected output from debugger agent: {output[:200]!r}")


def _data_payload(result: CommandResult[dict[str, Any]], expected: type) -> CommandResult[Any]:
    """Unwrap the ``data`` member of a successful agent reply."""
    if not result.is_successful:
        return result
    data = result.payload.get("data")
    if not isinstance(data, expected):
        return Failure(f"Debugger agent reply has no '{expected.__name__}' data")
    return Success(data)


class KuduLogPointsClient(RemoteDebugClient):
    """Talks to the in-container debugger agent through Kudu."""

    def __init__(
        self,
        *,
        scm_domain: str = DEFAULT_SCM_DOMAIN,
        agent_port: int = DEFAULT_AGENT_PORT,
        timeout: float = 30.0,
    ) -> None:
        self.scm_domain = scm_domain
        self.agent_port = agent_port
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: AdapterConfig) -> KuduLogPointsClient:
        return cls(
            scm_domain=config.scm_domain,
            agent_port=config.agent_port,
            timeout=config.remote_timeout,
        )

    # ---- URL / command construction ---------------------------------------

    def command_url(self, site_name: str) -> str:
        return f"https://{site_name}.{self.scm_domain}/api/command"

    def agent_url(self, *segments: str) -> str:
        path = "/".join(_segment(s) for s in segments)
        return f"http://localhost:{self.agent_port}/{path}"

    @staticmethod
    def curl(url: str, *, method: str = "GET", payload: dict[str, Any] | None = None) -> str:
        """Build the shell command line Kudu runs inside the container."""
        argv = ["curl", "-s", "-S"]
        if method != "GET":
            argv += ["-X", method]
        if payload is not None:
            argv += ["-H", "Content-Type: application/json", "-d", json.dumps(payload)]
        argv.append(url)
        return shlex.join(argv)

    # ---- Transport ----------------------------------------------------------

    def _post_command(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        command: str,
    ) -> dict[str, Any]:
        """Run ``command`` through Kudu; blocking, called from a worker thread."""
        cookies = {AFFINITY_COOKIE: instance_affinity} if instance_affinity else None
        response = requests.post(
            self.command_url(site_name),
            json={"command": command, "dir": "/"},
            auth=(credential.username, credential.password),
            cookies=cookies,
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise RemoteCallError(
                "Kudu command API returned an unexpected reply",
                site_name=site_name,
                details={"status_code": response.status_code},
            )
        return body

    async def _run(
        self,
        operation: str,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        command: str,
    ) -> CommandResult[dict[str, Any]]:
        logger.debug("%s on %s (instance %s): %s", operation, site_name, instance_affinity, command)
        try:
            body = await asyncio.to_thread(
                self._post_command, site_name, instance_affinity, credential, command
            )
        except requests.RequestException as exc:
            logger.warning("%s on %s failed: %s", operation, site_name, exc)
            return Failure(f"Request to {site_name} failed: {exc}")
        except RemoteCallError as exc:
            logger.warning("%s on %s failed: %s", operation, site_name, exc)
            return Failure(str(exc))

        result = parse_command_output(body)
        if not result.is_successful:
            logger.debug("%s on %s returned error: %s", operation, site_name, result.error)
        return result

    # ---- Operations ---------------------------------------------------------

    async def load_source(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: LoadSourceRequest,
    ) -> CommandResult[str]:
        url = self.agent_url(
            "debugger", "session", request.session_id,
            "debugee", request.debug_id, "source", request.source_id,
        )  # fmt: skip
        result = await self._run(
            "loadSource", site_name, instance_affinity, credential, self.curl(url)
        )
        return _data_payload(result, str)

    async def set_logpoint(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: SetLogpointRequest,
    ) -> CommandResult[dict[str, Any]]:
        url = self.agent_url(
            "debugger", "session", request.session_id,
            "debugee", request.debug_id, "logpoints",
        )  # fmt: skip
        payload = {
            "sourceId": request.source_id,
            "zeroBasedLineNumber": request.line_number,
            "zeroBasedColumnNumber": request.column_number,
            "expressionToLog": request.expression,
        }
        command = self.curl(url, method="POST", payload=payload)
        return await self._run("setLogpoint", site_name, instance_affinity, credential, command)

    async def remove_logpoint(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: RemoveLogpointRequest,
    ) -> CommandResult[dict[str, Any]]:
        url = self.agent_url(
            "debugger", "session", request.session_id,
            "debugee", request.debug_id, "logpoints", request.logpoint_id,
        )  # fmt: skip
        command = self.curl(url, method="DELETE")
        return await self._run("removeLogpoint", site_name, instance_affinity, credential, command)

    async def loaded_scripts(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: LoadedScriptsRequest,
    ) -> CommandResult[list[dict[str, Any]]]:
        url = self.agent_url(
            "debugger", "session", request.session_id,
            "debugee", request.debug_id, "source",
        )  # fmt: skip
        result = await self._run(
            "loadedScripts", site_name, instance_affinity, credential, self.curl(url)
        )
        return _data_payload(result, list)

    async def close_session(
        self,
        site_name: str,
        instance_affinity: str | None,
        credential: PublishCredential,
        request: CloseSessionRequest,
    ) -> CommandResult[dict[str, Any]]:
        url = self.agent_url("debugger", "session", request.session_id)
        command = self.curl(url, method="DELETE")
        return await self._run("closeSession", site_name, instance_affinity, credential, command)

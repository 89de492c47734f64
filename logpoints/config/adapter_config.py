"""Configuration for the log points debug adapter.

``AdapterConfig`` holds the process-wide settings chosen on the command line;
``AttachConfig`` holds the arguments the frontend passes with ``attach``.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any
from typing import Literal

from logpoints.errors import ConfigurationError

if TYPE_CHECKING:
    import argparse

    from logpoints.adapter.types import AttachRequest

DEFAULT_SCM_DOMAIN = "scm.azurewebsites.net"
DEFAULT_AGENT_PORT = 32923
DEFAULT_TCP_PORT = 4711

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class AdapterConfig:
    """Settings for one adapter process."""

    transport: Literal["stdio", "tcp"] = "stdio"
    host: str = "localhost"
    port: int = DEFAULT_TCP_PORT

    log_level: LogLevel = "INFO"
    log_file: str | None = None

    # Remote debugging service
    scm_domain: str = DEFAULT_SCM_DOMAIN
    agent_port: int = DEFAULT_AGENT_PORT
    remote_timeout: float = 30.0

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> AdapterConfig:
        """Create config from parsed command line arguments."""
        port = getattr(args, "port", None)
        return cls(
            transport="tcp" if port is not None else "stdio",
            host=getattr(args, "host", "localhost"),
            port=DEFAULT_TCP_PORT if port is None else port,
            log_level=getattr(args, "log_level", "INFO"),
            log_file=getattr(args, "log_file", None),
            scm_domain=getattr(args, "scm_domain", DEFAULT_SCM_DOMAIN),
            agent_port=getattr(args, "agent_port", DEFAULT_AGENT_PORT),
            remote_timeout=getattr(args, "remote_timeout", 30.0),
        )

    def validate(self) -> None:
        """Validate configuration and raise errors for invalid setups."""
        if self.transport == "tcp" and not 0 <= self.port <= 65535:
            raise ConfigurationError(
                "TCP port must be between 0 and 65535",
                config_key="port",
                details={"port": self.port},
            )

        if not 0 < self.agent_port <= 65535:
            raise ConfigurationError(
                "Debugger agent port must be between 1 and 65535",
                config_key="agent_port",
                details={"agent_port": self.agent_port},
            )

        if self.remote_timeout <= 0:
            raise ConfigurationError(
                "Remote timeout must be positive",
                config_key="remote_timeout",
                details={"remote_timeout": self.remote_timeout},
            )

        if not self.scm_domain:
            raise ConfigurationError("SCM domain must not be empty", config_key="scm_domain")


# attach argument name -> AttachConfig field, for the required string values
_REQUIRED_ATTACH_ARGUMENTS = {
    "sessionId": "session_id",
    "debugId": "debug_id",
    "siteName": "site_name",
    "publishCredentialUsername": "publish_username",
    "publishCredentialPassword": "publish_password",
}


@dataclass
class AttachConfig:
    """Arguments of an ``attach`` request.

    Only types are checked: the frontend that starts the session is
    responsible for passing meaningful values.
    """

    session_id: str = ""
    debug_id: str = ""
    site_name: str = ""
    publish_username: str = ""
    publish_password: str = field(default="", repr=False)
    instance_id: str | None = None
    trace: bool = False

    @classmethod
    def from_attach_request(cls, request: AttachRequest) -> AttachConfig:
        """Create config from attach request arguments.

        Raises:
            ConfigurationError: If a required argument is missing or is not a
                string, or an optional one has the wrong type.
        """
        args: dict[str, Any] = dict(request.get("arguments") or {})

        values: dict[str, Any] = {}
        for arg_name, field_name in _REQUIRED_ATTACH_ARGUMENTS.items():
            value = args.get(arg_name)
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"Attach argument '{arg_name}' must be a string",
                    config_key=arg_name,
                    details={"type": type(value).__name__},
                )
            values[field_name] = value

        config = cls(
            instance_id=args.get("instanceId"),
            trace=False if args.get("trace") is None else args["trace"],
            **values,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate the optional arguments."""
        if self.instance_id is not None and not isinstance(self.instance_id, str):
            raise ConfigurationError(
                "Attach argument 'instanceId' must be a string",
                config_key="instanceId",
                details={"type": type(self.instance_id).__name__},
            )

        if not isinstance(self.trace, bool):
            raise ConfigurationError(
                "Attach argument 'trace' must be a boolean",
                config_key="trace",
                details={"type": type(self.trace).__name__},
            )


"""User lingering via loginctl.

A user-scope service is stopped when the user's last session ends unless
lingering is enabled for that user.
"""

import logging
from dataclasses import dataclass

from keeper.config.models import ServiceEnv
from keeper.service.exec import CommandResult, CommandRunner, run_command
from keeper.service.show import parse_key_value_output

logger = logging.getLogger(__name__)

LOGINCTL = "loginctl"


@dataclass
class LingerStatus:
    """Lingering state for a user. ``linger`` is None when it could not be read."""

    user: str | None
    linger: bool | None = None
    detail: str | None = None


async def read_linger_status(
    env: ServiceEnv, runner: CommandRunner = run_command
) -> LingerStatus:
    if not env.user:
        return LingerStatus(user=None, detail="Cannot determine current user")

    result = await runner(LOGINCTL, "show-user", env.user, "-p", "Linger")
    if not result.ok:
        return LingerStatus(
            user=env.user, detail=result.detail.strip() or "loginctl failed"
        )

    value = parse_key_value_output(result.stdout).get("linger", "").lower()
    if value in ("yes", "no"):
        return LingerStatus(user=env.user, linger=value == "yes")
    return LingerStatus(user=env.user, detail=f"Unexpected loginctl output: {value!r}")


async def enable_linger(
    env: ServiceEnv,
    runner: CommandRunner = run_command,
    sudo: bool = False,
) -> CommandResult:
    """Enable lingering for the environment's user.

    Args:
        sudo: Run loginctl through ``sudo -n`` (never prompts).
    """
    if not env.user:
        return CommandResult(code=1, stderr="Cannot determine current user")

    if sudo:
        result = await runner("sudo", "-n", LOGINCTL, "enable-linger", env.user)
    else:
        result = await runner(LOGINCTL, "enable-linger", env.user)
    if result.ok:
        logger.info("Enabled lingering for %s", env.user)
    return result

"""Shell integration: startup hooks and environment scripts."""

from __future__ import annotations

import enum
import string
from typing import Mapping, Optional

from .config import Config, env_for

_SAFE_CHARS = frozenset(string.ascii_letters + string.digits + "-_=/,.+")

_ZSH_INIT = """\
autoload -U add-zsh-hook
_rv_autoload_hook () {{
    eval "$({exe} shell env zsh)"
}}
add-zsh-hook chpwd _rv_autoload_hook
_rv_autoload_hook
"""

_BASH_INIT = """\
_rv_autoload_hook() {{
    eval "$({exe} shell env bash)"
}}
_rv_autoload_hook
_chpwd_hook() {{
    if [[ "$PWD" != "$_OLDPWD" ]]; then
        _rv_autoload_hook
        _OLDPWD="$PWD"
    fi
}}
_OLDPWD="$PWD"
PROMPT_COMMAND="_chpwd_hook${{PROMPT_COMMAND:+; $PROMPT_COMMAND}}"
"""

_FISH_INIT = """\
function _rv_autoload_hook --on-variable PWD
    "{exe}" shell env fish | source
end
_rv_autoload_hook
"""


class Shell(enum.Enum):
    """Supported shells; zsh is the default."""

    ZSH = "zsh"
    BASH = "bash"
    FISH = "fish"


def _escape(value: str) -> str:
    if not value:
        return "''"
    if all(char in _SAFE_CHARS for char in value):
        return value
    body = "".join(f"'\\{char}'" if char in "'!" else char for char in value)
    return f"'{body}'"


def init_script(config: Config, shell: Shell) -> str:
    """The snippet a shell's startup file evaluates to hook rv in."""
    template = {Shell.ZSH: _ZSH_INIT, Shell.BASH: _BASH_INIT, Shell.FISH: _FISH_INIT}[
        Shell(shell)
    ]
    return template.format(exe=config.current_exe)


def env_script(
    config: Config, shell: Shell, environ: Optional[Mapping[str, str]] = None
) -> str:
    """Commands that switch the shell's environment to the project's Ruby."""
    unset, to_set = env_for(config.project_ruby(), environ)
    lines: list[str] = []
    if Shell(shell) is Shell.FISH:
        if unset:
            lines.append(f"set --erase {' '.join(unset)}")
        lines.extend(f"set --export {var} {_escape(value)}" for var, value in to_set)
    else:
        if unset:
            lines.append(f"unset {' '.join(unset)}")
        lines.extend(f"export {var}={_escape(value)}" for var, value in to_set)
        lines.append("hash -r")
    return "".join(f"{line}\n" for line in lines)
from pathlib import Path

import pytest

from rvtool.config import Config
from rvtool.shell import Shell, env_script, init_script

ALL_UNSET = "unset RUBY_ROOT RUBY_ENGINE RUBY_VERSION RUBYOPT GEM_ROOT GEM_HOME GEM_PATH"


def make_config(tmp_path: Path) -> Config:
    return Config(
        ruby_dirs=[tmp_path / "opt" / "rubies"],
        root=tmp_path,
        current_dir=tmp_path,
        cache_dir=tmp_path / "cache",
        current_exe=Path("/tmp/bin/rv"),
    )


def create_ruby_dir(base: Path, name: str) -> Path:
    engine, _, version = name.partition("-")
    ruby_dir = base / name
    bin_dir = ruby_dir / "bin"
    bin_dir.mkdir(parents=True)
    ruby_exe = bin_dir / "ruby"
    ruby_exe.write_text(
        "#!/bin/sh\n"
        f'echo "{engine}"\n'
        f'echo "{version}"\n'
        'echo "aarch64-darwin23"\n'
        'echo "aarch64"\n'
        'echo "darwin23"\n'
        'echo ""\n'
    )
    ruby_exe.chmod(0o755)
    return ruby_dir


def test_init_zsh(tmp_path):
    expected = (
        "autoload -U add-zsh-hook\n"
        "_rv_autoload_hook () {\n"
        '    eval "$(/tmp/bin/rv shell env zsh)"\n'
        "}\n"
        "add-zsh-hook chpwd _rv_autoload_hook\n"
        "_rv_autoload_hook\n"
    )
    assert init_script(make_config(tmp_path), Shell.ZSH) == expected


def test_init_bash(tmp_path):
    script = init_script(make_config(tmp_path), Shell.BASH)
    assert script.startswith("_rv_autoload_hook() {\n")
    assert '    eval "$(/tmp/bin/rv shell env bash)"\n' in script
    assert script.endswith(
        'PROMPT_COMMAND="_chpwd_hook${PROMPT_COMMAND:+; $PROMPT_COMMAND}"\n'
    )


def test_init_fish(tmp_path):
    expected = (
        "function _rv_autoload_hook --on-variable PWD\n"
        '    "/tmp/bin/rv" shell env fish | source\n'
        "end\n"
        "_rv_autoload_hook\n"
    )
    assert init_script(make_config(tmp_path), Shell.FISH) == expected


def test_env_succeeds_without_path(tmp_path):
    out = env_script(make_config(tmp_path), Shell.ZSH, {})
    assert out == f"{ALL_UNSET}\nexport PATH=''\nhash -r\n"


def test_env_with_path(tmp_path):
    out = env_script(make_config(tmp_path), Shell.ZSH, {"PATH": "/tmp/bin"})
    assert out == f"{ALL_UNSET}\nexport PATH=/tmp/bin\nhash -r\n"


def test_env_clears_ruby_vars(tmp_path):
    environ = {
        "PATH": "/tmp/bin",
        "RUBY_ROOT": "/tmp/ruby",
        "RUBY_ENGINE": "ruby",
        "RUBY_VERSION": "3.4.5",
        "RUBYOPT": "--verbose",
    }
    out = env_script(make_config(tmp_path), Shell.ZSH, environ)
    assert out == f"{ALL_UNSET}\nexport PATH=/tmp/bin\nhash -r\n"


def test_env_clears_gem_vars(tmp_path):
    environ = {
        "PATH": "/tmp/bin",
        "GEM_ROOT": "/tmp/ruby/gems",
        "GEM_HOME": "/tmp/root/.gems",
        "GEM_PATH": "/tmp/root/.gems/bin:/tmp/ruby/gems",
    }
    out = env_script(make_config(tmp_path), Shell.ZSH, environ)
    assert out == f"{ALL_UNSET}\nexport PATH=/tmp/bin\nhash -r\n"


def test_env_removes_old_ruby_bin_from_path(tmp_path):
    environ = {"PATH": "/tmp/ruby/bin:/tmp/bin", "RUBY_ROOT": "/tmp/ruby"}
    out = env_script(make_config(tmp_path), Shell.BASH, environ)
    assert "export PATH=/tmp/bin\n" in out


def test_env_quotes_values_with_separators(tmp_path):
    out = env_script(make_config(tmp_path), Shell.ZSH, {"PATH": "/a:/b"})
    assert "export PATH='/a:/b'\n" in out


def test_env_fish(tmp_path):
    out = env_script(make_config(tmp_path), Shell.FISH, {"PATH": "/tmp/bin"})
    assert out == (
        "set --erase RUBY_ROOT RUBY_ENGINE RUBY_VERSION RUBYOPT GEM_ROOT GEM_HOME GEM_PATH\n"
        "set --export PATH /tmp/bin\n"
    )


def test_env_with_ruby(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", "/tmp/home")
    config = make_config(tmp_path)
    ruby_dir = create_ruby_dir(config.ruby_dirs[0], "ruby-3.3.5")
    environ = {
        "PATH": "/tmp/bin",
        "RUBY_ROOT": "/tmp/ruby",
        "RUBY_ENGINE": "ruby",
        "RUBY_VERSION": "3.4.5",
        "RUBYOPT": "--verbose",
        "GEM_ROOT": "/tmp/ruby/gems",
        "GEM_HOME": "/tmp/root/.gems",
        "GEM_PATH": "/tmp/root/.gems/bin:/tmp/ruby/gems",
    }
    lines = env_script(config, Shell.ZSH, environ).splitlines()
    assert lines[0] == "unset RUBYOPT GEM_ROOT"
    assert f"export RUBY_ROOT={ruby_dir}" in lines
    assert "export RUBY_ENGINE=ruby" in lines
    assert "export RUBY_VERSION=3.3.5" in lines
    assert "export GEM_HOME=/tmp/home/.gem/ruby/3.3.5" in lines
    assert "export GEM_PATH=/tmp/home/.gem/ruby/3.3.5/bin" in lines
    assert f"export PATH='/tmp/home/.gem/ruby/3.3.5/bin:{ruby_dir}/bin:/tmp/bin'" in lines
    assert lines[-1] == "hash -r"


@pytest.mark.parametrize("shell", list(Shell))
def test_shell_values_round_trip(shell):
    assert Shell(shell.value) is shell
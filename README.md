# rvtool

A Ruby version manager. It finds the Ruby interpreters installed on your
machine, reads the `.ruby-version` file of your project, installs prebuilt
Rubies, and sets up your shell so that the right Ruby is active in every
directory.

## Installing

```
pip install rvtool
```

This installs the `rv` command. It needs no third-party libraries.

## Listing and finding Rubies

Rubies are looked for in the directories directly inside `~/.rubies`,
`/opt/rubies` and `/usr/local/rubies` (the last two only when they exist), or
in the directories given with `--ruby-dir`. Each candidate must hold an
executable `bin/ruby`; rvtool runs it once to learn its engine, version,
platform and default gem directory, and caches what it learned until the
interpreter file changes.

```
rv ruby list
rv ruby list --format json
```

The text listing shows each Ruby's version and interpreter path, sorted by
engine and version, with the Ruby your project asks for marked with `*`.
Symlinked interpreters are shown with their target. `--installed-only` is
accepted but changes nothing, since only installed Rubies are listed.

Print the interpreter path of the newest Ruby that satisfies a request, or
the project's request when none is given:

```
rv ruby find 3.3
rv ruby find jruby-9
```

## Pinning a project

```
rv ruby pin           # show the contents of the project's .ruby-version
rv ruby pin 3.4.5     # write "3.4.5" to .ruby-version
```

The project directory is the nearest directory, from the current one upwards,
that holds a `.ruby-version` file; `--project-dir` overrides the search. When
pinning without a project directory, the file is written to the current
directory.

## Installing a Ruby

```
export RV_RUBY_RELEASES_URL=<base URL of the release downloads>
rv ruby install 3.4.5
rv ruby install --install-dir ~/.rubies 3.4.5
```

The request must give major, minor and patch numbers. The tarball is fetched
from `$RV_RUBY_RELEASES_URL/<number>/portable-<version>.<arch>.bottle.tar.gz`,
kept in the cache, and unpacked into the first Ruby directory (or
`--install-dir`), with `portable-ruby/` renamed to `ruby-`. There is no default
release location: without `RV_RUBY_RELEASES_URL` the command fails. Prebuilt
tarballs are only known for macOS on arm64 and Linux on x86_64 and arm64.

## Running a Ruby

```
rv ruby run 3.4 -- -e 'puts RUBY_VERSION'
```

The current process is replaced by the chosen interpreter, with `PATH` and the
Ruby and gem variables set for it. This uses `os.execve`, so it needs a POSIX
system.

## The cache

```
rv cache dir
rv cache clean
```

The cache lives in `--cache-dir`, else `$RV_CACHE_DIR`, else
`$XDG_CACHE_HOME/rv`, else `~/.cache/rv`. `clean` removes it and logs how many
directories and bytes were removed.

## Shell integration

Add one of these to your shell's startup file:

```
eval "$(rv shell init zsh)"
eval "$(rv shell init bash)"
rv shell init fish | source
```

The hook runs `rv shell env <shell>` whenever the directory changes. That
command unsets `RUBY_ROOT`, `RUBY_ENGINE`, `RUBY_VERSION`, `RUBYOPT`,
`GEM_ROOT`, `GEM_HOME` and `GEM_PATH`, removes the old Ruby and gem `bin`
directories from `PATH`, and then exports the variables and `PATH` for the
Ruby your project asks for (for zsh and bash it also runs `hash -r`).

## Version requests

A request names an engine and as many version numbers as you care about, up
to four: `3`, `3.4`, `3.4.5`, `3.4.0-preview1`, `ruby-dev`, `jruby-9.4`,
`truffleruby-24.1`. A request without an engine means `ruby`. Parts left out
match anything, and the newest installed Ruby that matches is chosen.

## Options

- `--ruby-dir DIR` (repeatable): directories to search for Rubies
- `--project-dir DIR`: use this project directory instead of searching upwards
- `--gemfile PATH` (or `BUNDLE_GEMFILE`)
- `--color auto|always|never` (or `RV_COLOR`; `NO_COLOR`, `FORCE_COLOR` and `CLICOLOR_FORCE` are honoured): colours log output
- `--cache-dir DIR`: where downloads and interpreter metadata are cached
- `-v` / `-q` (repeatable): more or less log output
- `--version`

## Using it from Python

```python
from rvtool.request import RubyRequest
from rvtool.version import Version
from rvtool.discovery import discover_rubies

request = RubyRequest.parse("jruby-9.4")
str(request)               # "jruby-9.4"

Version("1.0") == Version("1.0.0")             # True
Version("1.0.0-rc1") < Version("1.0.0")        # True
Version("5.2.4").bump()                        # Version('5.3')

rubies = discover_rubies(["/opt/rubies"], "/tmp/rv-cache")
match = request.find_match_in(reversed(rubies))  # raises MatchError if none
```
# minishell

A small interactive command shell for POSIX systems. It reads a line,
checks its syntax, expands variables, sets up redirections and runs the
commands, either as built-ins or as programs found on `PATH`.

## Installing

```
pip install .
```

## Running

```
minishell
```

The prompt is `minishell$ `. End the session with `exit` or Ctrl-D (which
prints `exit`). Ctrl-C at the prompt starts a new line and sets the status
to 130. When the `readline` module is available, entered lines are added
to its history.

## What it understands

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `<` input, `>` truncate, `>>` append, `<<` here-document.
  A here-document reads lines at the `heredoc> ` prompt until a line that
  starts with the delimiter, expands variables in them and stores them in
  `.heredoc_tmp` in the current directory. Ctrl-C during a here-document
  abandons the line with status 130.
- Single quotes keep text literal; double quotes allow `$` expansion.
- `$NAME` expands a variable, `$?` the status of the last command.
- Syntax errors are reported on standard error: two operators in a row
  (such as `| |` or `> >`) and unclosed quotes set the status to 2; a line
  ending in `|`, `<` or `>` is rejected and leaves the status as it was.
- A command that cannot be found gives status 127; a redirection file that
  cannot be opened gives status 1. A program killed by a signal gives
  128 plus the signal number.

Built-in commands:

| Command  | Effect                                                          |
|----------|-----------------------------------------------------------------|
| `echo`   | print its arguments; `-n` (or `-nnn`) drops the newline         |
| `cd`     | change to the one given directory and update `PWD` and `OLDPWD` |
| `pwd`    | print the working directory                                     |
| `export` | set variables, or list them sorted by name as `declare -x`      |
| `unset`  | remove variables                                                |
| `env`    | print the variables that were given a value                     |
| `exit`   | leave the shell with an optional numeric status                 |

`cd`, `export`, `unset` and `exit` change the shell itself when run on
their own; inside a pipeline they act on a copy, and `exit` there only
returns its status. On start the shell increments `SHLVL`, creating it as
1 when it is missing.

## What it does not do

There is no `;`, `&&` or `||`, no background jobs or job control, no
globbing, no backslash escapes and no script files: every line is one
pipeline typed at the prompt. `cd` needs a directory argument; it does not
go to `HOME`.

## Using it from Python

```python
from minishell.shell import init_shell, run_line

shell = init_shell(["PATH=/usr/bin:/bin", "HOME=/tmp"])
run_line(shell, "export GREETING=hello")
run_line(shell, "echo $GREETING world > out.txt")
print(shell.status)
```

`init_shell()` with no argument takes the process environment.
`minishell.shell.repl(shell, reader)` runs the loop with any function that
takes a prompt and returns a line or `None`, and returns the exit status;
`minishell.shell.main()` starts the interactive loop, the same as the
`minishell` command. Lower-level pieces live in `minishell.parser`
(`parse_line`), `minishell.executor` (`execute`), `minishell.expand`
(`expand_word`, `remove_quotes`), `minishell.syntax` (`check_line`,
`ShellSyntaxError`) and `minishell.environment` (`Environment`).

## Tests

```
pip install .[test]
pytest
```
# craterlite

Building blocks for a server that runs build experiments across a package
ecosystem. The server takes commands from GitHub comments, hands work to
remote agents and reports results back on the issue.

## Installation

```
pip install craterlite
```

`pip install craterlite[test]` also installs the test dependencies
(`pytest` and `responses`).

## Modules

- `craterlite.toolchain`: `Toolchain.parse` reads specifications such as
  `stable`, `nightly-1970-01-01`, `master#<sha>` or
  `try#<sha>+target=<triple>+rustflags=...+patch=name=repo=branch`.
  `str(toolchain)` writes them back in the same form, and
  `Toolchain.to_path_component` percent-encodes that string so it can be
  used as a file name. The source is a `DistSource` or a `CiSource`.
  Patches are `CratePatch` values. Malformed input raises
  `ToolchainParseError`.
- `craterlite.size`: `Size.parse` reads sizes like `1234`, `12k`, `3MB` or
  `4Gb`. `Size.to_bytes` converts them using powers of 1024, and `str(size)`
  prints the short form (`3M`). The unit is a `SizeUnit`.
- `craterlite.quoting`: `split_quoted` splits a line on spaces and tabs. It
  honours double quotes and backslash escapes, and raises
  `UnbalancedQuotesError` when a quote is left open.
- `craterlite.hexcodec`: `from_hex` decodes hexadecimal into `bytes`. It
  raises `InvalidCharError` or `InvalidLengthError`, both subclasses of
  `HexError`.
- `craterlite.tokens`: `Tokens.load(path)` reads `tokens.toml` by default,
  and `Tokens.from_toml(text)` parses text directly. The file holds agent
  tokens, the reports bucket (`ReportsBucket`, whose region is an `S3Region`
  or a `CustomRegion`) and, optionally, the bot's credentials (`BotTokens`).
- `craterlite.api_types`: `ApiResponse` is the JSON envelope returned to
  agents. It has the constructors `success`, `slow_down`, `internal_error`,
  `unauthorized` and `not_found`, plus `status_code`, `to_dict` and
  `to_json`. `CraterToken` formats an `Authorization` value.
- `craterlite.github`: `GitHubApi` is a GitHub REST client built on
  `requests`. It can post comments, list, add and remove labels, list teams
  and their members, fetch commits and read a pull request's head commit.
  Requests that fail raise `GitHubError`. `EventIssueComment.from_dict`
  reads an `issue_comment` webhook payload.
- `craterlite.auth`: `parse_token` and `git_revision` read the agent
  headers. `check_auth` turns a header mapping into `AuthDetails`. `Acl`
  decides who may command the bot, using listed users and `org/team`
  entries loaded with `Acl.refresh_cache`. It can also check a team
  permissions URL given as `permissions_url`.
- `craterlite.messages`: `Message` builds a bot comment from
  emoji-prefixed lines and notes (`line`, `note`, `render`). `Message.send`
  posts it and, if `set_label` was called with a `MessageLabel`, updates the
  issue's labels according to `LabelSettings`.
- `craterlite.args`: `CommandParser` parses bot commands into a
  `ParsedCommand`. `COMMAND_PARSER` is ready-made and knows `run`, `check`,
  `abort`/`cancel`, `ping`, `retry-report`, `retry` and `reload-acl`. Any
  other line is read as an `edit`. Errors are subclasses of
  `CommandParseError`.
- `craterlite.try_builds`: `TryBuildStore` detects completed try builds in
  comments, stores them in SQLite and returns them with `get_sha`.
- `craterlite.webhooks`: `verify_signature` checks an `X-Hub-Signature`
  value of the form `sha1=<hex>`. `find_command` returns the first command
  addressed to the bot in a comment.
- `craterlite.agents`: `Agents` keeps registered agents in SQLite. It
  synchronizes them with the agent tokens and records heartbeats, git
  revisions, capabilities and recently active workers. `Agent.status`
  returns an `AgentStatus`.
- `craterlite.display`: `humanize_duration` and `agent_status_display` are
  formatting helpers for web pages.
- `craterlite.naming`: `ExperimentNames` remembers the experiment name used
  on each issue. It also generates fresh names (`pr-123`, `pr-123-1`, ...)
  by consulting a callable that tells whether a name is taken.

## Examples

```python
from craterlite.toolchain import Toolchain

tc = Toolchain.parse("stable+rustflags=-Dwarnings")
print(tc.rustflags)              # -Dwarnings
print(str(tc))                   # stable+rustflags=-Dwarnings
print(tc.to_path_component())
```

```python
from craterlite.size import Size

print(Size.parse("4G").to_bytes())   # 4294967296
```

```python
from craterlite.args import COMMAND_PARSER

command = COMMAND_PARSER.parse("run name=foo start=stable end=beta p=2")
print(command.name)                  # run
print(command.args["priority"])      # 2
```

A tokens file looks like this:

```toml
[agents]
token = "agent-1"

[reports-bucket]
bucket = "reports"
public-url = "https://{bucket}.s3.example.com"
access-key = "placeholder"
secret-key = "secret"

[reports-bucket.region]
type = "s3"
region = "us-west-1"

[bot]
webhooks-secret = "secret"
api-token = "token"
```

## What this package does not do

It has no HTTP server, no routes and no command-line program. It does not
store or run experiments, and it does not generate or upload reports. It
has no metrics or scheduled jobs. The pieces above are meant to be wired
into such a server by the code that uses them.
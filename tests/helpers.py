"""Stub query engine used by the tests.

Each stub is a small Python script with a shebang pointing at the running
interpreter. It appends its argv to a calls file so tests can count
invocations, then runs a behaviour snippet.
"""

from dataclasses import dataclass
from pathlib import Path
import stat
import sys
import textwrap

_PREAMBLE = """\
#!{python}
import json
import os
import re
import sys
from pathlib import Path

CALLS = Path({calls!r})
with CALLS.open("a", encoding="utf-8") as fh:
    fh.write(" ".join(sys.argv[1:]) + "\\n")
CALL_NUMBER = len(CALLS.read_text(encoding="utf-8").splitlines())


def echo_dmmf():
    staged = os.environ["PRISMA_DML_PATH"]
    schema = Path(staged).read_text(encoding="utf-8")
    models = [
        {{"name": name, "fields": [], "isEmbedded": False, "dbName": None}}
        for name in re.findall(r"model\\s+(\\w+)", schema)
    ]
    print(json.dumps({{
        "datamodel": {{"models": models, "enums": []}},
        "schema": {{}},
        "mappings": [],
        "stagedPath": staged,
        "backtrace": os.environ.get("RUST_BACKTRACE"),
        "cwd": os.getcwd(),
    }}))

"""

ECHO_DMMF = "echo_dmmf()"

CONFIG = """\
assert sys.argv[1:3] == ["cli", "--get_config"], sys.argv
assert sys.argv[3] == os.environ["PRISMA_DML_PATH"]
print(json.dumps({
    "datasources": [{
        "name": "db",
        "connectorType": "postgresql",
        "url": {"fromEnvVar": "DATABASE_URL", "value": ""},
        "config": {},
    }],
    "generators": [{
        "name": "client",
        "provider": "prisma-client-js",
        "output": None,
        "config": {},
        "binaryTargets": ["native"],
    }],
}))
"""

DML = """\
assert sys.argv[1:3] == ["cli", "--dmmf_to_dml"], sys.argv
assert "PRISMA_DML_PATH" not in os.environ
whole = json.loads(Path(sys.argv[3]).read_text(encoding="utf-8"))
for source in whole["config"]["datasources"]:
    print("datasource " + source["name"] + " {")
    print("  provider = \\"" + source["connectorType"] + "\\"")
    print("}")
for model in whole["dmmf"]["models"]:
    print("model " + model["name"] + " {")
    for field in model["fields"]:
        print("  " + field["name"] + " " + field["type"])
    print("}")
"""

BAD_INPUT = """\
sys.stderr.write("bad input")
sys.exit(1)
"""

STDOUT_ONLY_FAILURE = """\
print("error on stdout")
sys.exit(2)
"""

MALFORMED = """\
print("{not json")
"""

HUGE_OUTPUT = """\
sys.stdout.write("x" * 4096)
"""


def wait_then(n: int, then: str = ECHO_DMMF) -> str:
    """Print the readiness banner for the first ``n`` calls."""
    return (
        f"if CALL_NUMBER <= {n}:\n"
        "    print('Please wait until the engine has finished starting')\n"
        "    sys.exit(0)\n"
        f"{then}\n"
    )


@dataclass
class StubEngine:
    path: Path
    calls_file: Path

    @property
    def calls(self) -> list[str]:
        if not self.calls_file.exists():
            return []
        return self.calls_file.read_text(encoding="utf-8").splitlines()

    @property
    def call_count(self) -> int:
        return len(self.calls)


def write_stub_engine(directory: Path, behaviour: str, name: str = "query-engine-stub") -> StubEngine:
    """Write an executable stub engine running ``behaviour``."""
    directory.mkdir(parents=True, exist_ok=True)
    calls_file = directory / f"{name}.calls"
    script = _PREAMBLE.format(python=sys.executable, calls=str(calls_file))
    script += textwrap.dedent(behaviour)
    path = directory / name
    path.write_text(script, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return StubEngine(path=path, calls_file=calls_file)

DML_QUOTING_MARKER = """\
print("/// Please wait until the migration finishes before editing")
print("model User {")
print("  id Int @id")
print("}")
"""

"""Run code snippets through an online compiler service."""

from __future__ import annotations

import json
import os
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import NamedTuple

__all__ = [
    "COMMAND",
    "RunCodeError",
    "RunType",
    "TABLE",
    "TEMPLATES",
    "UnsupportedLanguage",
    "clear_newline_suffix",
    "cut_too_long",
    "lookup",
    "parse_response",
    "run_code",
    "template",
]

API_URL = "https://tool.runoob.com/compile2.php"
TOKEN_ENV = "RUNCODE_TOKEN"
COMMAND = re.compile(r"^>runcode(raw)?\s(.+?)\s([\s\S]+)$")

_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "Referer": "https://c.runoob.com/",
    "User-Agent": "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:87.0) Gecko/20100101 Firefox/87.0",
}

_CUT_MARK = "\n............\n............"
_MAX_LINES = 30
_MAX_CHARS = 1000


class RunType(NamedTuple):
    language: str
    fileext: str


class UnsupportedLanguage(LookupError):
    """The language is not one the service runs."""


class RunCodeError(Exception):
    """The service reported an error or could not be reached."""


_JS = 'console.log("Hello World!");'
_CPP = '#include <iostream>\nusing namespace std;\n\nint main()\n{\n   cout << "Hello World";\n   return 0;\n}'
_RUST = 'fn main() {\n    println!("Hello World!");\n}'
_CS = (
    "using System;\nnamespace HelloWorldApplication\n{\n   class HelloWorld\n   {\n"
    "      static void Main(string[] args)\n      {\n"
    '         Console.WriteLine("Hello World!");\n      }\n   }\n}'
)
_SH = "echo 'Hello World!'"
_PY = 'print("Hello, World!")'
_SWIFT = 'var myString = "Hello, World!"\nprint(myString)'
_KT = 'fun main(args : Array<String>){\n    println("Hello World!")\n}'
_TS = 'const hello : string = "Hello World!"\nconsole.log(hello)'
_RB = 'puts "Hello World!";'

TEMPLATES: dict[str, str] = {
    "py2": "print 'Hello World!'",
    "ruby": _RB,
    "rb": _RB,
    "php": "<?php\n\techo 'Hello World!';\n?>",
    "javascript": _JS,
    "js": _JS,
    "node.js": _JS,
    "scala": 'object Main {\n  def main(args:Array[String])\n  {\n    println("Hello World!")\n  }\n\t\t\n}',
    "go": 'package main\n\nimport "fmt"\n\nfunc main() {\n   fmt.Println("Hello, World!")\n}',
    "c": '#include <stdio.h>\n\nint main()\n{\n   printf("Hello, World! \n");\n   return 0;\n}',
    "c++": _CPP,
    "cpp": _CPP,
    "java": (
        "public class HelloWorld {\n    public static void main(String []args) {\n"
        '       System.out.println("Hello World!");\n    }\n}'
    ),
    "rust": _RUST,
    "rs": _RUST,
    "c#": _CS,
    "cs": _CS,
    "csharp": _CS,
    "shell": _SH,
    "bash": _SH,
    "erlang": '% escript will ignore the first line\n\nmain(_) ->\n    io:format("Hello World!~n").',
    "perl": 'print "Hello, World!\n";',
    "python": _PY,
    "py": _PY,
    "swift": _SWIFT,
    "lua": _SWIFT,
    "pascal": "runcode Hello;\nbegin\n  writeln ('Hello, world!')\nend.",
    "kotlin": _KT,
    "kt": _KT,
    "r": 'myString <- "Hello, World!"\nprint ( myString)',
    "vb": 'Module Module1\n\n    Sub Main()\n        Console.WriteLine("Hello World!")\n    End Sub\n\nEnd Module',
    "typescript": _TS,
    "ts": _TS,
}

TABLE: dict[str, RunType] = {
    name: RunType(*pair)
    for name, pair in {
        "py2": ("0", "py"),
        "ruby": ("1", "rb"),
        "rb": ("1", "rb"),
        "php": ("3", "php"),
        "javascript": ("4", "js"),
        "js": ("4", "js"),
        "node.js": ("4", "js"),
        "scala": ("5", "scala"),
        "go": ("6", "go"),
        "c": ("7", "c"),
        "c++": ("7", "cpp"),
        "cpp": ("7", "cpp"),
        "java": ("8", "java"),
        "rust": ("9", "rs"),
        "rs": ("9", "rs"),
        "c#": ("10", "cs"),
        "cs": ("10", "cs"),
        "csharp": ("10", "cs"),
        "shell": ("10", "sh"),
        "bash": ("10", "sh"),
        "erlang": ("12", "erl"),
        "perl": ("14", "pl"),
        "python": ("15", "py3"),
        "py": ("15", "py3"),
        "swift": ("16", "swift"),
        "lua": ("17", "lua"),
        "pascal": ("18", "pas"),
        "kotlin": ("19", "kt"),
        "kt": ("19", "kt"),
        "r": ("80", "r"),
        "vb": ("84", "vb"),
        "typescript": ("1010", "ts"),
        "ts": ("1010", "ts"),
    }.items()
}


def lookup(language: str) -> RunType:
    """Return the service's language id and file extension for a language name."""
    try:
        return TABLE[language.lower()]
    except KeyError:
        raise UnsupportedLanguage(language) from None


def template(language: str) -> str:
    """Return the hello-world template for a supported language."""
    key = language.lower()
    if key not in TABLE:
        raise UnsupportedLanguage(language)
    return TEMPLATES[key]


def clear_newline_suffix(text: str) -> str:
    """Drop trailing newlines."""
    return text.rstrip("\n")


def cut_too_long(text: str) -> str:
    """Truncate text after 30 line breaks or about 1000 characters."""
    count = 0
    last = len(text) - 1
    for i, ch in enumerate(text):
        if ch == "\r" and i < last and text[i + 1] == "\n":
            pass  # counted when the "\n" is reached
        elif ch in "\n\r":
            count += 1
        if count > _MAX_LINES or i > _MAX_CHARS:
            return text[: i - 1] + _CUT_MARK
    return text


def _string_field(content: object, key: str) -> str:
    if isinstance(content, dict):
        value = content.get(key)
        if isinstance(value, str):
            return value
    return ""


def parse_response(payload: str | bytes) -> str:
    """Return the program output from a service reply, raising on reported errors."""
    content = json.loads(payload)
    errors = _string_field(content, "errors")
    if errors != "\n\n":
        raise RunCodeError(cut_too_long(clear_newline_suffix(errors)))
    return cut_too_long(clear_newline_suffix(_string_field(content, "output")))


def run_code(code: str, run_type: RunType | tuple[str, str], timeout: float = 15) -> str:
    """Send code to the service and return its trimmed output."""
    language, fileext = run_type
    form = urllib.parse.urlencode(
        {
            "code": code,
            "token": os.environ.get(TOKEN_ENV, ""),
            "stdin": "",
            "language": language,
            "fileext": fileext,
        }
    ).encode()
    request = urllib.request.Request(API_URL, data=form, headers=_HEADERS, method="POST")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = response.status
            body = response.read()
    except urllib.error.HTTPError:
        raise RunCodeError("code not 200") from None
    except OSError as exc:
        raise RunCodeError(str(exc)) from exc
    if status != 200:
        raise RunCodeError("code not 200")
    return parse_response(body)
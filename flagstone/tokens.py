"""
Flagstone tokenizer: classify raw argument strings.

Overview
- Tag: the discriminant shared by every token (COMMAND or FLAG).
- Command: bare positional argument, e.g. "build" in `tool build --fast`.
- Flag: "-x", "--name" or "--name=value" token, with its raw value.
- parse(args): turn an argument vector into an ordered tuple of tokens.

Token rules
- "--name"        → Flag(name, True, short=False)
- "--name=value"  → Flag(name, "value", short=False)   (split on the first '=')
- "-x"            → Flag("x", True, short=True)
- "-abc"          → Flag("a"), Flag("b"), Flag("c"), all short and sharing one order
- "-x=value"      → Flag("x", "value", short=True)     (clusters with '=' are not expanded)
- bare "value"    → the value of the previous token when it is a Flag still holding
                    the placeholder True, otherwise Command("value")

Every token keeps the index of the raw string it came from as `order`, and the
result is sorted by it. There is no end-of-options marker: a lone "--" is a long
flag with an empty name and a lone "-" a short one.

Consumers branch on `token.tag`, never on the token's Python type:

    >>> for token in parse(["build", "--jobs", "4"]):
    ...     match token.tag:
    ...         case Tag.COMMAND: ...
    ...         case Tag.FLAG: ...
"""
import operator
from collections.abc import Iterable
from enum import StrEnum
from typing import NamedTuple


class Tag(StrEnum):
    """
    discriminant of the token union.
    """
    COMMAND = "command"
    FLAG = "flag"


class Command(NamedTuple):
    """
    bare positional argument not consumed as a flag value.
    """
    name: str
    order: int

    tag = Tag.COMMAND


class Flag(NamedTuple):
    """
    named switch with its raw value.

    `value` is the literal text after '=' or after a separating space, or True when
    the flag was given without any value.
    """
    name: str
    value: str | bool
    order: int
    short: bool = False

    tag = Tag.FLAG


type Token = Command | Flag


def _resolve_flag(raw, order, /):
    # "-" prefix means short unless it is the "--" long prefix
    short = not raw.startswith("--")
    name, separator, value = raw.removeprefix("-" if short else "--").partition("=")

    if separator:
        return [Flag(name, value, order, short)]

    if short and len(name) > 1:
        return [Flag(letter, True, order, True) for letter in name]

    return [Flag(name, True, order, short)]


def parse(args, /):
    """
    tokenize an argument vector.

    parameters
    - args: Iterable[str]
      raw invocation arguments, without the program name (e.g. sys.argv[1:]).

    returns
    - tuple[Command | Flag, ...] sorted by order.

    behavior
    - deterministic and side-effect free; any string is accepted.
    - a bare string right after a flag that has no value yet becomes that flag's
      value instead of a Command. this applies to long and short flags alike,
      so `-c 5` and `--count 5` are equivalent.

    raises
    - TypeError when args is a plain string or yields non-string items.
    """
    if isinstance(args, str) or not isinstance(args, Iterable):
        raise TypeError("parse() argument must be an iterable of strings")

    tokens = []

    for order, raw in enumerate(args):
        if not isinstance(raw, str):
            raise TypeError("parse() argument must be an iterable of strings")

        if raw.startswith("-"):
            tokens.extend(_resolve_flag(raw, order))
            continue

        # bare string: fill the pending value of the previous flag, if any
        if tokens and tokens[-1].tag is Tag.FLAG and tokens[-1].value is True:
            tokens[-1] = tokens[-1]._replace(value=raw)
        else:
            tokens.append(Command(raw, order))

    return tuple(sorted(tokens, key=operator.attrgetter("order")))


__all__ = (
    "Tag",
    "Command",
    "Flag",
    "Token",
    "parse",
)

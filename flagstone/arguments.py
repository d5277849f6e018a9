r"""
Flagstone declarations and the resolution engine.

Overview
- Declaration: one named flag as the program expects it — long name, optional
  short alias, description lines, lazy default supplier, convertor, help visibility.
- Arguments: owns the declarations of a program and the tokens parsed once from
  its argument vector; resolves typed values on demand and renders help.

Quick start
    import sys
    from flagstone import Arguments, integer_convertor

    args = Arguments(sys.argv[1:], {
        **Arguments.create_help_options(),
        "count": {
            "short": "c",
            "description": "How many times to run.",
            "convertor": integer_convertor,
            "default": lambda: 10,
        },
    })

    if args.is_help_requested():
        args.trigger_help()

    count = args.get("count")   # `-c 5` → 5, nothing → 10

Resolution (get)
1. the first long-form token named like the long name (“--count”),
   otherwise the first short-form token named like the short alias (“-c”).
   a long-form “--c” never satisfies the alias “c”, and “-count” never
   satisfies the long name.
2. a matching token: its raw value goes through the convertor.
3. no token but a default supplier: the supplier is called (only now) and its
   result goes through the convertor.
4. neither: the convertor receives None and applies its own “no value” policy.

Convertor errors are not intercepted; whatever the convertor raises reaches the
caller unchanged.

Naming
- long names are trimmed and lower-cased; lookups are case-insensitive.
- short aliases are reduced to their first (lower-cased) character.
- declaring the same long name twice raises DeclarationConflictError; sharing a
  short alias only emits a ShortNameCollisionWarning (the earlier declaration
  keeps matching it first).
"""
import io
import warnings
from collections.abc import Iterable, Mapping
from collections import defaultdict
from types import MappingProxyType

from rich.console import Console
from rich.pretty import pretty_repr
from rich.text import Text

from .convertors import *
from .faults import *
from .tokens import Tag, parse
from .utils import *


def _normalize(name, /):
    return name.strip().lower()


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate declaration metadata in place.

    Responsibilities
    - name: required non-empty string; trimmed and lower-cased.
    - convertor: required callable.
    - short: Unset or non-empty string; reduced to its first lower-cased
      character, None when Unset.
    - description: Unset, a string (stripped, split on newlines), or an
      iterable of strings (one line each); a tuple of lines, empty when Unset.
    - default: Unset or a zero-argument callable; None when Unset.

    Raises
    - TypeError: wrong types (including an explicit None).
    - ValueError: empty strings after trimming.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := _normalize(name)):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if not callable(metadata["convertor"]):
        raise TypeError(f"{cls.__typename__} 'convertor' must be callable")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and not (short := _normalize(short)):
        raise ValueError(f"{cls.__typename__} 'short' cannot be empty")
    metadata["short"] = coalesce(short and short[0])

    description = metadata["description"]
    if isinstance(description, str):
        if not (description := description.strip()):
            raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
        lines = description.split("\n")
    elif isinstance(description, Iterable):
        lines = list(description)
        if not all(isinstance(line, str) for line in lines):
            raise TypeError(f"{cls.__typename__} 'description' lines must be strings")
    elif description is Unset:
        lines = []
    else:
        raise TypeError(f"{cls.__typename__} 'description' must be a string or an iterable of strings")
    metadata["description"] = tuple(lines)

    if (default := metadata["default"]) is not Unset and not callable(default):
        raise TypeError(f"{cls.__typename__} 'default' must be a zero-argument callable")
    metadata["default"] = coalesce(default)


class Declaration:
    """
    Named flag declaration.

    Properties (read-only)
    - name: normalized long name.
    - short: single-character alias or None.
    - description: tuple of help lines.
    - default: zero-argument supplier or None. It is never called here; the
      engine calls it only when the flag is absent (or to show it in help).
    - convertor: callable turning a raw value (str, True, None, or the
      default's result) into the declared type.
    - hidden: True when excluded from help.
    """
    __typename__ = "declaration"
    __introspectable__ = (
        "name",
        "short",
        "description",
        "default",
        "convertor",
        "hidden",
    )

    name = mirror("name")
    short = mirror("short")
    description = mirror("description")
    default = mirror("default")
    convertor = mirror("convertor")
    hidden = mirror("hidden")

    def __new__(
            cls,
            name,
            /,
            *,
            convertor,
            short=Unset,
            description=Unset,
            default=Unset,
            exclude_from_help=False
    ):
        metadata = {
            "name": name,
            "convertor": convertor,
            "short": short,
            "description": description,
            "default": default,
            "hidden": bool(exclude_from_help),
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __repr__(self):
        return f"{type(self).__typename__}({", ".join("%s=%r" % pair for pair in self.__rich_repr__())})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


class Arguments:
    """
    Declared flags of a program, resolved against its argument vector.

    The argument vector is passed explicitly and tokenized once, here; nothing is
    re-parsed later. Instances are meant to live for one invocation and are not
    synchronized.

    Parameters
    - argv: Iterable[str]
      raw arguments without the program name, usually sys.argv[1:].
    - declarations: Mapping[str, Mapping]
      long name → keyword options accepted by declare().
    - colorful: bool | Unset
      style the help text with ANSI sequences. Unset follows whether stdout
      is a terminal.
    - width: int | Unset
      wrap width of the help text. Unset follows the terminal width.
    """

    tokens = mirror("tokens")
    description = mirror("description")

    def __init__(self, argv, declarations=Unset, /, *, colorful=Unset, width=Unset):
        if not isinstance(colorful, bool | Unset):
            raise TypeError("arguments 'colorful' must be a boolean")
        if isinstance(width, bool) or not isinstance(width, int | Unset):
            raise TypeError("arguments 'width' must be an integer")
        if isinstance(width, int) and width < 1:
            raise ValueError("arguments 'width' must be a positive integer")

        self._tokens = parse(argv)
        self._declarations = {}
        self._description = None
        self._colorful = colorful
        self._width = width

        if declarations is Unset:
            return
        if not isinstance(declarations, Mapping):
            raise TypeError("arguments 'declarations' must be a mapping")
        for name, options in declarations.items():
            if not isinstance(options, Mapping):
                raise TypeError(f"options of {name!r} must be a mapping")
            self.declare(name, **options)

    @property
    def commands(self):
        """
        names of the positional (Command) tokens, in order.
        """
        return tuple(token.name for token in self._tokens if token.tag is Tag.COMMAND)

    def declare(self, name, /, **options):
        """
        register a flag; see Declaration for the accepted options.

        returns self for chaining.

        raises
        - DeclarationConflictError when the normalized long name is taken.
        """
        declaration = Declaration(name, **options)

        if declaration.name in self._declarations:
            raise DeclarationConflictError(
                "argument %r is already declared" % declaration.name,
                name=declaration.name,
            )

        if declaration.short is not None:
            for other in self._declarations.values():
                if other.short == declaration.short:
                    warnings.warn(ShortNameCollisionWarning(
                        "short name %r of %r is already used by %r" % (declaration.short, declaration.name, other.name)
                    ), stacklevel=2)
                    break

        self._declarations[declaration.name] = declaration
        return self

    def set_description(self, description, /):
        """
        set the banner shown above the flags in help; returns self.
        """
        if not isinstance(description, str):
            raise TypeError("set_description() argument must be a string")
        self._description = description.strip() or None
        return self

    def _find(self, name, /, *, short):
        for token in self._tokens:
            if token.tag is Tag.FLAG and token.short is short and _normalize(token.name) == name:
                return token
        return None

    def _resolve(self, declaration, /):
        token = self._find(declaration.name, short=False)
        if token is None and declaration.short is not None:
            token = self._find(declaration.short, short=True)

        if token is not None:
            return declaration.convertor(token.value)
        if declaration.default is not None:
            return declaration.convertor(declaration.default())
        return declaration.convertor(None)

    def get(self, name, /):
        """
        resolve the value of a declared flag by its long name.

        raises
        - UndeclaredArgumentError when the name was never declared.
        - whatever the convertor raises.
        """
        if not isinstance(name, str):
            raise TypeError("get() argument must be a string")
        try:
            declaration = self._declarations[_normalize(name)]
        except KeyError:
            raise UndeclaredArgumentError("argument %r is not declared" % name, name=name) from None
        return self._resolve(declaration)

    def get_flags(self):
        """
        resolve every declaration; read-only mapping of long name → value, in
        declaration order.
        """
        return MappingProxyType({
            name: self._resolve(declaration) for name, declaration in self._declarations.items()
        })

    def is_help_requested(self):
        """
        True when the "help" flag (or its "-h" alias) resolves truthy.

        the flag must have been declared, usually via create_help_options().
        """
        return bool(self.get("help"))

    def should_help(self):
        warnings.warn(DeprecatedMethodWarning(
            "should_help() is deprecated, use is_help_requested() instead"
        ), stacklevel=2)
        return self.is_help_requested()

    def render_help(self):
        """
        Render the help document to a string.

        Layout
        - the description banner (if set), then one block per visible declaration
          in declaration order, blocks separated by blank lines:

              --name, -n
                description line (wrapped)
                Default: <pretty repr of the default supplier's result>

        Palette keys
        - description-section, flag-name, argument-description, default-label,
          default-value

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed entirely.
        """
        colorful = coalesce(self._colorful, Console().is_terminal)
        console = Console(
            file=io.StringIO(),
            width=coalesce(self._width, None),
            force_terminal=colorful,
            highlight=False,
        )
        styles = defaultdict(str, {
            "description-section": "italic #A3A3A3",  # neutral gray banner
            "flag-name": "bold",  # names stand out
            "argument-description": "#9CA3AF",  # muted gray
            "default-label": "#9CA3AF",  # muted gray, same as descriptions
            "default-value": "#FFD600",  # amber values
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def tab(count=1):
            return "  " * max(count, 1)

        def wrapped(fragment, width):
            # wrapping keeps the separating space at the end of each line
            for line in fragment.wrap(console, max(width, 1)):
                line.rstrip()
                yield line

        width = console.width
        blocks = []

        for declaration in filter(lambda x: not x.hidden, self._declarations.values()):
            names = ["--" + declaration.name]
            if declaration.short is not None:
                names.append("-" + declaration.short)

            lines = [Text(tab(1)) + Text(", ").join(Text(name, styler("flag-name")) for name in names)]

            for line in declaration.description:
                if not line.strip():
                    lines.append(Text())
                    continue
                for segment in wrapped(Text(line, styler("argument-description")), width - len(tab(2))):
                    lines.append(Text(tab(2)) + segment)

            if declaration.default is not None:
                label = "Default: "
                first, *rest = pretty_repr(
                    declaration.default(),
                    max_width=max(width - len(tab(2)) - len(label), 1),
                ).split("\n")
                lines.append(Text.assemble(tab(2), (label, styler("default-label")), (first, styler("default-value"))))
                lines.extend(Text.assemble(tab(4), (line, styler("default-value"))) for line in rest)

            blocks.append(Text("\n").join(lines))

        sections = []
        if self._description:
            sections.append(Text("\n").join(
                wrapped(Text(self._description, styler("description-section")), width)
            ))
        if blocks:
            sections.append(Text("\n\n").join(blocks))

        console.print(Text("\n\n").join(sections), soft_wrap=True, end="")
        return console.file.getvalue()

    def trigger_help(self):
        """
        raise HelpRequested carrying the rendered help text.
        """
        raise HelpRequested(self.render_help())

    def __repr__(self):
        return f"arguments({", ".join("%s=%r" % pair for pair in self.__rich_repr__())})"

    def __rich_repr__(self):
        yield "declarations", tuple(self._declarations.values())
        yield "tokens", self._tokens
        yield "description", self._description

    @staticmethod
    def is_printable_exception(error, /):
        """
        True when the error is meant for the end user (HelpRequested, ExpectedException, ...).
        """
        return isinstance(error, PrintableException)

    @staticmethod
    def rethrow_unprintable_exception(error, /):
        """
        re-raise the error unless it is printable.

        Example
            try:
                ...
            except Exception as error:
                Arguments.rethrow_unprintable_exception(error)
                print(error)
        """
        if not isinstance(error, PrintableException):
            raise error

    @staticmethod
    def create_help_options():
        """
        declaration options of the canonical help flag ("--help" / "-h"),
        excluded from the help listing itself.

        Example
            Arguments(argv, {**Arguments.create_help_options(), ...})
        """
        return {
            "help": {
                "short": "h",
                "description": "Show this help message.",
                "convertor": strict_boolean_convertor,
                "exclude_from_help": True,
            },
        }

    boolean_convertor = staticmethod(boolean_convertor)
    strict_boolean_convertor = staticmethod(strict_boolean_convertor)

    number_convertor = staticmethod(number_convertor)
    strict_number_convertor = staticmethod(strict_number_convertor)
    integer_convertor = staticmethod(integer_convertor)

    string_convertor = staticmethod(string_convertor)
    strict_string_convertor = staticmethod(strict_string_convertor)


__all__ = (
    "Declaration",
    "Arguments",
)

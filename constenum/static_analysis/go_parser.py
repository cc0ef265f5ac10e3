"""Go Source Parser for Constant Extraction

Pragmatic parser focused on what the generator needs:
- package clause
- type declarations (name -> underlying type text)
- const declarations, grouped or single, with initializer expressions

Everything else (imports, vars, funcs, method bodies) is skipped by bracket
tracking. Source is tokenized with one compiled regular expression and
newlines are turned into semicolons the way the Go lexer does it.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
from dataclasses import dataclass, field
import logging

from constenum.errors import SourceParseError
from .expressions import (
    Expression, IntegerLiteral, Literal, CounterReference, IdentifierReference,
    UnaryOperation, BinaryOperation, Conversion, Call,
)

logger = logging.getLogger(__name__)


@dataclass
class Token:
    """Lexical token"""
    kind: str  # ident, int, float, imag, char, string, op, semi
    text: str
    line: int


@dataclass
class ConstSpec:
    """One line of a const declaration: names [type] [= expressions]"""
    names: List[str]
    type_name: Optional[str] = None
    expressions: List[Expression] = field(default_factory=list)
    line_number: int = 0

    @property
    def has_values(self) -> bool:
        return bool(self.expressions)


@dataclass
class ConstBlock:
    """A `const` declaration; its specs share one iota scope"""
    specs: List[ConstSpec]
    file_path: Optional[Path] = None
    line_number: int = 0
    grouped: bool = True


@dataclass
class ParsedGoFile:
    """Declarations extracted from a single Go file"""
    file_path: Optional[Path]
    package_name: str
    const_blocks: List[ConstBlock]
    type_specs: Dict[str, str]


@dataclass
class ParsedGoPackage:
    """All files of one package, in file order"""
    name: str
    files: List[ParsedGoFile]

    @property
    def const_blocks(self) -> List[ConstBlock]:
        blocks = []
        for parsed_file in self.files:
            blocks.extend(parsed_file.const_blocks)
        return blocks

    @property
    def type_specs(self) -> Dict[str, str]:
        types = {}
        for parsed_file in self.files:
            types.update(parsed_file.type_specs)
        return types


# A newline after one of these ends the statement (Go spec, "Semicolons")
_SEMICOLON_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_SEMICOLON_OPS = frozenset({"++", "--", ")", "]", "}"})

# Builtins that are calls, not conversions, when applied to arguments
_BUILTIN_FUNCTIONS = frozenset({
    "len", "cap", "real", "imag", "complex", "min", "max",
    "new", "make", "append", "copy", "delete", "panic", "print", "println",
})

_OPENERS = {"(": ")", "[": "]", "{": "}"}


class ExpressionParser:
    """
    Precedence-climbing parser for Go constant expressions.

    Binary precedence follows the Go spec, all operators left associative:
        5  *  /  %  <<  >>  &  &^
        4  +  -  |  ^
        3  ==  !=  <  <=  >  >=
        2  &&
        1  ||
    """

    BINARY_PRECEDENCE = {
        "||": 1,
        "&&": 2,
        "==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
        "+": 4, "-": 4, "|": 4, "^": 4,
        "*": 5, "/": 5, "%": 5, "<<": 5, ">>": 5, "&": 5, "&^": 5,
    }
    UNARY_OPERATORS = frozenset({"+", "-", "^", "!"})

    def __init__(self, tokens: List[Token], file_path: Optional[Path] = None):
        self.tokens = tokens
        self.pos = 0
        self.file_path = file_path

    def parse(self) -> Expression:
        if not self.tokens:
            raise SourceParseError("empty expression", self.file_path)
        expression = self._binary(1)
        if self.pos != len(self.tokens):
            token = self.tokens[self.pos]
            raise self._error(f"unexpected {token.text!r} in expression", token)
        return expression

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            last = self.tokens[-1]
            raise self._error("unexpected end of expression", last)
        self.pos += 1
        return token

    def _expect(self, text: str) -> Token:
        token = self._next()
        if token.text != text:
            raise self._error(f"expected {text!r}, found {token.text!r}", token)
        return token

    def _error(self, message: str, token: Token) -> SourceParseError:
        return SourceParseError(message, self.file_path, token.line)

    def _binary(self, min_precedence: int) -> Expression:
        left = self._unary()
        while True:
            token = self._peek()
            if token is None or token.kind != "op":
                return left
            precedence = self.BINARY_PRECEDENCE.get(token.text)
            if precedence is None or precedence < min_precedence:
                return left
            self.pos += 1
            right = self._binary(precedence + 1)
            left = BinaryOperation(token.text, left, right)

    def _unary(self) -> Expression:
        token = self._peek()
        if token is not None and token.kind == "op" and token.text in self.UNARY_OPERATORS:
            self.pos += 1
            return UnaryOperation(token.text, self._unary())
        return self._primary()

    def _primary(self) -> Expression:
        token = self._next()

        if token.kind in ("int", "char"):
            try:
                if token.kind == "int":
                    return IntegerLiteral(parse_int_literal(token.text), token.text)
                return IntegerLiteral(decode_rune(token.text), token.text)
            except ValueError:
                raise self._error(f"invalid literal {token.text}", token)
        if token.kind in ("float", "imag", "string"):
            return Literal(token.text, token.kind)
        if token.text == "(":
            inner = self._binary(1)
            self._expect(")")
            return self._postfix(inner)
        if token.kind == "ident":
            if token.text == "iota":
                return CounterReference()
            name = token.text
            # qualified identifier: pkg.Name
            while self._peek() is not None and self._peek().text == ".":
                self.pos += 1
                name += "." + self._next().text
            return self._postfix(IdentifierReference(name))

        raise self._error(f"unexpected {token.text!r} in expression", token)

    def _postfix(self, operand: Expression) -> Expression:
        token = self._peek()
        if token is None or token.text != "(":
            return operand
        self.pos += 1
        arguments = []
        while self._peek() is not None and self._peek().text != ")":
            arguments.append(self._binary(1))
            if self._peek() is not None and self._peek().text == ",":
                self.pos += 1
        self._expect(")")

        if isinstance(operand, IdentifierReference):
            name = operand.name
            if name not in _BUILTIN_FUNCTIONS and "." not in name and len(arguments) == 1:
                return Conversion(name, arguments[0])
            return Call(name, tuple(arguments))
        # (T)(x) style conversions are rare in const blocks; treat as a call
        return Call(str(operand), tuple(arguments))


def parse_int_literal(text: str) -> int:
    """Integer literal in any Go form: 42, 0x2A, 0o52, 0b101010, 052, 1_000"""
    digits = text.replace("_", "")
    if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit():
        return int(digits, 8)
    return int(digits, 0)


_SIMPLE_ESCAPES = {
    "a": 0x07, "b": 0x08, "f": 0x0C, "n": 0x0A, "r": 0x0D,
    "t": 0x09, "v": 0x0B, "\\": 0x5C, "'": 0x27, '"': 0x22,
}


def decode_rune(text: str) -> int:
    """Code point of a rune literal such as 'a', '\\n', '\\x41' or '\\u00e9'"""
    body = text[1:-1]
    if not body.startswith("\\"):
        if len(body) != 1:
            raise ValueError(f"invalid rune literal {text}")
        return ord(body)
    escape = body[1:]
    if escape in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[escape]
    if escape[:1] in ("x", "u", "U"):
        return int(escape[1:], 16)
    if escape.isdigit():
        return int(escape, 8)
    raise ValueError(f"invalid rune literal {text}")


class GoSourceParser:
    """
    Go source parser for constant extraction.

    - Tokenizes with Go's implicit semicolon rule
    - Extracts package, type and const declarations
    - Builds expression trees for const initializers
    """

    def __init__(self):
        number = (
            r"(?:0[xX][0-9a-fA-F_]+"
            r"|0[bB][01_]+"
            r"|0[oO][0-7_]+"
            r"|\d[\d_]*\.[\d_]*(?:[eE][+-]?\d+)?"
            r"|\.\d[\d_]*(?:[eE][+-]?\d+)?"
            r"|\d[\d_]*[eE][+-]?\d+"
            r"|\d[\d_]*)i?"
        )
        operator = (
            r"&\^=|<<=|>>=|\.\.\.|&\^|&&|\|\||<<|>>|<-|\+\+|--"
            r"|==|!=|<=|>=|:=|[-+*/%&|^]="
            r"|[-+*/%&|^<>=!(){}\[\],;.:~]"
        )
        self.token_pattern = re.compile(
            r"(?P<newline>\n)"
            r"|(?P<space>[ \t\r\f]+)"
            r"|(?P<line_comment>//[^\n]*)"
            r"|(?P<block_comment>/\*.*?\*/)"
            r"|(?P<raw_string>`[^`]*`)"
            r"|(?P<string>\"(?:\\.|[^\"\\\n])*\")"
            r"|(?P<char>'(?:\\(?:'|[^'\n]+)|[^'\\\n])')"
            rf"|(?P<number>{number})"
            r"|(?P<ident>[^\W\d]\w*)"
            rf"|(?P<op>{operator})",
            re.DOTALL
        )

    def tokenize(self, source: str, file_path: Optional[Path] = None) -> List[Token]:
        """Split source into tokens, inserting semicolons at line ends"""
        tokens: List[Token] = []
        line = 1
        pos = 0

        def end_of_line():
            if not tokens:
                return
            last = tokens[-1]
            if (last.kind in ("ident", "int", "float", "imag", "char", "string")
                    and last.text not in ("package", "import", "type", "const", "var", "func")
                    or last.text in _SEMICOLON_KEYWORDS
                    or last.kind == "op" and last.text in _SEMICOLON_OPS):
                tokens.append(Token("semi", "\n", line))

        while pos < len(source):
            match = self.token_pattern.match(source, pos)
            if match is None:
                raise SourceParseError(f"unexpected character {source[pos]!r}", file_path, line)
            kind = match.lastgroup
            text = match.group()
            pos = match.end()

            if kind == "newline":
                end_of_line()
                line += 1
            elif kind == "block_comment":
                if "\n" in text:
                    end_of_line()
                    line += text.count("\n")
            elif kind == "raw_string":
                tokens.append(Token("string", text, line))
                line += text.count("\n")
            elif kind in ("space", "line_comment"):
                continue
            elif kind == "number":
                if text.endswith("i"):
                    number_kind = "imag"
                elif text[:2].lower() != "0x" and ("." in text or "e" in text.lower()):
                    number_kind = "float"
                else:
                    number_kind = "int"
                tokens.append(Token(number_kind, text, line))
            elif kind == "op" and text == ";":
                tokens.append(Token("semi", text, line))
            else:
                tokens.append(Token(kind, text, line))

        end_of_line()
        return tokens

    def parse_source(self, source: str, file_path: Optional[Path] = None) -> ParsedGoFile:
        """Parse Go source text"""
        tokens = self.tokenize(source, file_path)
        return _DeclarationScanner(tokens, file_path).scan()

    def parse_file(self, file_path: Union[str, Path]) -> ParsedGoFile:
        """
        Parse a Go file.

        Args:
            file_path: Path to Go source file

        Returns:
            ParsedGoFile with package name, const blocks and type specs
        """
        file_path = Path(file_path)
        logger.debug(f"Parsing Go file: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            source = f.read()

        parsed = self.parse_source(source, file_path)
        logger.debug(
            f"  package {parsed.package_name}: {len(parsed.const_blocks)} const block(s), "
            f"{len(parsed.type_specs)} type(s)"
        )
        return parsed

    def discover_files(self, paths: Iterable[Union[str, Path]]) -> List[Path]:
        """
        Expand the command line paths into Go source files.

        A single directory expands to its .go files in name order, test files
        excluded. Otherwise the paths are taken as files, in the order given.
        """
        paths = [Path(p) for p in paths]
        if len(paths) == 1 and paths[0].is_dir():
            files = sorted(
                p for p in paths[0].glob("*.go")
                if p.is_file() and not p.name.endswith("_test.go")
            )
            if not files:
                raise SourceParseError("no Go files found", paths[0])
            return files
        for path in paths:
            if path.is_dir():
                raise SourceParseError("a directory must be the only path given", path)
        return paths

    def parse_package(self, paths: Iterable[Union[str, Path]]) -> ParsedGoPackage:
        """Parse every file of a package; all files must agree on the package name"""
        files = self.discover_files(paths)
        logger.info(f"Parsing {len(files)} Go file(s)")

        parsed_files = [self.parse_file(f) for f in files]
        name = parsed_files[0].package_name
        for parsed in parsed_files[1:]:
            if parsed.package_name != name:
                raise SourceParseError(
                    f"found packages {name} and {parsed.package_name}", parsed.file_path
                )
        return ParsedGoPackage(name=name, files=parsed_files)


class _DeclarationScanner:
    """Walks the token stream of one file and picks out top-level declarations"""

    def __init__(self, tokens: List[Token], file_path: Optional[Path]):
        self.tokens = tokens
        self.pos = 0
        self.file_path = file_path

    def scan(self) -> ParsedGoFile:
        package_name = ""
        const_blocks: List[ConstBlock] = []
        type_specs: Dict[str, str] = {}

        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token.kind == "semi":
                self.pos += 1
            elif token.text == "package" and not package_name:
                self.pos += 1
                package_name = self._next().text
            elif token.text == "const":
                self.pos += 1
                const_blocks.append(self._const_declaration(token.line))
            elif token.text == "type":
                self.pos += 1
                type_specs.update(self._type_declaration())
            else:
                self._skip_declaration()

        if not package_name:
            raise SourceParseError("missing package clause", self.file_path)
        return ParsedGoFile(self.file_path, package_name, const_blocks, type_specs)

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Token:
        if self.pos >= len(self.tokens):
            line = self.tokens[-1].line if self.tokens else 0
            raise SourceParseError("unexpected end of file", self.file_path, line)
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _skip_declaration(self):
        """Advance past the current statement, including any bracketed body"""
        depth = 0
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            if token.text in _OPENERS:
                depth += 1
            elif token.text in (")", "]", "}"):
                depth -= 1
            elif token.kind == "semi" and depth <= 0:
                return

    def _collect_until(self, stops) -> List[Token]:
        """Tokens up to (not including) a stop token at bracket depth 0"""
        collected = []
        depth = 0
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if depth == 0 and (token.kind == "semi" and "semi" in stops
                               or token.kind == "op" and token.text in stops):
                break
            if token.text in _OPENERS:
                depth += 1
            elif token.text in (")", "]", "}"):
                if depth == 0:
                    break
                depth -= 1
            collected.append(token)
            self.pos += 1
        return collected

    def _grouped(self, parse_spec):
        """Run parse_spec for each spec inside ( ... ) or once for a single spec"""
        if self._peek() is not None and self._peek().text == "(":
            self.pos += 1
            while True:
                token = self._peek()
                if token is None:
                    raise SourceParseError("unterminated declaration group", self.file_path,
                                           self.tokens[-1].line)
                if token.text == ")":
                    self.pos += 1
                    return True
                if token.kind == "semi":
                    self.pos += 1
                    continue
                parse_spec()
        parse_spec()
        return False

    def _type_declaration(self) -> Dict[str, str]:
        specs = {}

        def parse_spec():
            name = self._next().text
            if self._peek() is not None and self._peek().text == "=":
                self.pos += 1
            type_tokens = self._collect_until({"semi"})
            specs[name] = _join(type_tokens)

        self._grouped(parse_spec)
        return specs

    def _const_declaration(self, line: int) -> ConstBlock:
        specs: List[ConstSpec] = []

        def parse_spec():
            first = self._peek()
            names = [self._next().text]
            while self._peek() is not None and self._peek().text == ",":
                self.pos += 1
                names.append(self._next().text)

            type_tokens = self._collect_until({"=", "semi"})
            spec = ConstSpec(names=names, type_name=_join(type_tokens) or None,
                             line_number=first.line)

            if self._peek() is not None and self._peek().text == "=":
                self.pos += 1
                while True:
                    expression_tokens = self._collect_until({",", "semi"})
                    spec.expressions.append(
                        ExpressionParser(expression_tokens, self.file_path).parse()
                    )
                    if self._peek() is not None and self._peek().text == ",":
                        self.pos += 1
                        continue
                    break
                if len(spec.expressions) != len(names):
                    raise SourceParseError(
                        f"{len(names)} name(s) but {len(spec.expressions)} value(s)",
                        self.file_path, first.line
                    )
            elif spec.type_name is not None:
                raise SourceParseError(
                    f"missing init expression for {names[0]}", self.file_path, first.line
                )
            specs.append(spec)

        grouped = self._grouped(parse_spec)
        return ConstBlock(specs=specs, file_path=self.file_path, line_number=line,
                          grouped=grouped)


def _join(tokens: List[Token]) -> str:
    return "".join(token.text for token in tokens)

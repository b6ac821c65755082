import re
from enum import Enum


class TokenClass(Enum):
    """Highlighting classes for BlockPipe source. Values are the grammar labels."""
    # Delimiters
    LEFT_PAREN = 'leftParen'
    RIGHT_PAREN = 'rightParen'
    LEFT_BRACE = 'leftBrace'
    RIGHT_BRACE = 'rightBrace'

    # Pipe operators
    PIPE = 'pipe'            # |   pass the value as one argument
    PIPE_STAR = 'pipeStar'   # |*  spread a tuple into arguments

    COLON = 'colon'          # :   binding
    IDENTIFIER = 'identifier'

    # Literals
    STRING_LITERAL = 'stringLiteral'
    BOOLEAN_LITERAL = 'booleanLiteral'
    INTEGER_LITERAL = 'integerLiteral'
    FLOAT_LITERAL = 'floatLiteral'

    KEYWORD = 'keyword'

    # Anything no rule matched (whitespace included)
    UNCLASSIFIED = 'unclassified'

    @property
    def label(self):
        return self.value


class Token:
    def __init__(self, type_, value, start, end, line, column):
        self.type = type_
        self.value = value
        self.start = start
        self.end = end
        self.line = line
        self.column = column

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self.type, self.value, self.start, self.end) == \
               (other.type, other.value, other.start, other.end)

    def __hash__(self):
        return hash((self.type, self.value, self.start, self.end))

    def __repr__(self):
        return (f"Token({self.type.name}, {self.value!r}, {self.start}:{self.end}, "
                f"line={self.line}, col={self.column})")


# =====================================================================
# ORDER IS SEMANTIC: at a given position the first rule that matches wins,
# even when a later rule would match a longer prefix.
# =====================================================================
TOKEN_RULES = (
    (r'\(', TokenClass.LEFT_PAREN),
    (r'\)', TokenClass.RIGHT_PAREN),
    (r'\{', TokenClass.LEFT_BRACE),
    (r'\}', TokenClass.RIGHT_BRACE),
    (r'\|\*', TokenClass.PIPE_STAR),              # MUST precede PIPE
    (r'\|', TokenClass.PIPE),
    (r':', TokenClass.COLON),
    (r'\$[a-z_][a-zA-Z0-9_]*', TokenClass.IDENTIFIER),
    (r'"(?:[^"\\]|\\.)*"', TokenClass.STRING_LITERAL),
    (r'\b(?:T|F)\b', TokenClass.BOOLEAN_LITERAL),
    (r'\b-?[0-9]+\.[0-9]+\b', TokenClass.FLOAT_LITERAL),  # MUST precede INTEGER
    (r'\b-?[0-9]+\b', TokenClass.INTEGER_LITERAL),
    (r'\btype\b', TokenClass.KEYWORD),
    (r'\bpaste\b', TokenClass.KEYWORD),
)

# Rule order of the first web highlighter. PIPE shadows PIPE_STAR and
# INTEGER shadows FLOAT, so `|*` and `1.5` never come out as single tokens.
LEGACY_TOKEN_RULES = (
    (r'\(', TokenClass.LEFT_PAREN),
    (r'\)', TokenClass.RIGHT_PAREN),
    (r'\{', TokenClass.LEFT_BRACE),
    (r'\}', TokenClass.RIGHT_BRACE),
    (r'\|', TokenClass.PIPE),
    (r'\|\*', TokenClass.PIPE_STAR),
    (r':', TokenClass.COLON),
    (r'\$[a-z_][a-zA-Z0-9_]*', TokenClass.IDENTIFIER),
    (r'"(?:[^"\\]|\\.)*"', TokenClass.STRING_LITERAL),
    (r'\b(?:T|F)\b', TokenClass.BOOLEAN_LITERAL),
    (r'\b-?[0-9]+\b', TokenClass.INTEGER_LITERAL),
    (r'\b-?[0-9]+\.[0-9]+\b', TokenClass.FLOAT_LITERAL),
    (r'\btype\b', TokenClass.KEYWORD),
    (r'\bpaste\b', TokenClass.KEYWORD),
)

_REGEX_CACHE = {}


def compile_rules(rules):
    """Build the master alternation for a rule set (cached per rule tuple)."""
    rules = tuple(rules)
    regex = _REGEX_CACHE.get(rules)
    if regex is None:
        pattern_parts = [f'(?P<R{index}>{pattern})' for index, (pattern, _) in enumerate(rules)]
        regex = re.compile('|'.join(pattern_parts))
        _REGEX_CACHE[rules] = regex
    return regex


def produced_classes(rules=TOKEN_RULES):
    """Every class a rule set can emit, UNCLASSIFIED included."""
    return {token_class for _, token_class in rules} | {TokenClass.UNCLASSIFIED}


class Lexer:
    def __init__(self, source, rules=TOKEN_RULES):
        self.source = source
        self.rules = tuple(rules)
        self._regex = compile_rules(self.rules)

    def tokenize(self):
        """Yield tokens covering the source left to right. Each call is a fresh pass."""
        source = self.source
        regex = self._regex
        pos = 0
        line, column = 1, 1
        pending_start = None
        pending_line, pending_col = line, column

        while pos < len(source):
            match = regex.match(source, pos)
            if not match or match.end() == pos:
                if pending_start is None:
                    pending_start = pos
                    pending_line, pending_col = line, column
                line, column = self._advance(source[pos], line, column)
                pos += 1
                continue

            if pending_start is not None:
                yield Token(TokenClass.UNCLASSIFIED, source[pending_start:pos],
                            pending_start, pos, pending_line, pending_col)
                pending_start = None

            value = match.group()
            token_class = self.rules[int(match.lastgroup[1:])][1]
            yield Token(token_class, value, pos, match.end(), line, column)
            line, column = self._advance(value, line, column)
            pos = match.end()

        if pending_start is not None:
            yield Token(TokenClass.UNCLASSIFIED, source[pending_start:],
                        pending_start, len(source), pending_line, pending_col)

    @staticmethod
    def _advance(text, line, column):
        newlines = text.count('\n')
        if newlines:
            return line + newlines, len(text) - text.rfind('\n')
        return line, column + len(text)


def tokenize(source, rules=TOKEN_RULES):
    return Lexer(source, rules).tokenize()


if __name__ == "__main__":
    code = """
    (
        main: { ($1 $0) }
        (1 2.5) |* main | { ($0 "done") }
    )
    """
    for t in tokenize(code):
        if t.type is not TokenClass.UNCLASSIFIED:
            print(t)

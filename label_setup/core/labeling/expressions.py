"""
Label Setup: expression validation

Filter expressions use a small SQL-like syntax over attribute fields:

    [POP2000] > 10000 AND [STATE_NAME] <> 'Texas'

The text is translated token by token into a Python expression and the
resulting AST is checked against a whitelist of node types. Nothing is ever
evaluated here; this only answers "valid or not".
"""
import ast
import logging
import re

logger = logging.getLogger("Expressions")

_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | \[(?P<field>[^\[\]]+)\]
  | '(?P<string>(?:[^']|'')*)'
  | (?P<number>\d+(?:\.\d*)?|\.\d+)
  | (?P<op><>|!=|<=|>=|=|<|>|\+|-|\*|/|%|\(|\)|,)
  | (?P<word>[A-Za-z_][A-Za-z0-9_]*)
""", re.VERBOSE)

_KEYWORDS = {
    "AND": "and",
    "OR": "or",
    "NOT": "not",
    "IN": "in",
    "IS": "is",
    "TRUE": "True",
    "FALSE": "False",
    "NULL": "None",
}

_ALLOWED_NODES = (
    ast.Expression, ast.BoolOp, ast.And, ast.Or,
    ast.UnaryOp, ast.Not, ast.USub, ast.UAdd,
    ast.BinOp, ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod,
    ast.Compare, ast.Eq, ast.NotEq, ast.Lt, ast.LtE, ast.Gt, ast.GtE,
    ast.In, ast.NotIn, ast.Is, ast.IsNot,
    ast.Name, ast.Load, ast.Constant, ast.Tuple,
)

_PLACEHOLDER = "_f"


def _known_field(name: str, field_set) -> bool:
    # No table bound: field references can't be checked
    if not field_set:
        return True
    wanted = name.strip().casefold()
    return any(str(f).casefold() == wanted for f in field_set)


def _translate(text: str, field_set):
    """SQL-like filter text -> Python source, or None if a token is unknown."""
    out = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            logger.debug(f"Unexpected character at {pos}: {text[pos]!r}")
            return None
        pos = m.end()
        kind = m.lastgroup
        if kind == "ws":
            continue
        if kind == "field" or (kind == "word" and m.group("word").upper() not in _KEYWORDS
                               and m.group("word").upper() != "LIKE"):
            name = m.group(kind)
            if not _known_field(name, field_set):
                logger.debug(f"Unknown field: {name!r}")
                return None
            out.append(f"{_PLACEHOLDER}{len(out)}")
        elif kind == "string":
            out.append(repr(m.group("string").replace("''", "'")))
        elif kind == "number":
            out.append(m.group("number"))
        elif kind == "op":
            op = m.group("op")
            out.append({"=": "==", "<>": "!="}.get(op, op))
        else:
            word = m.group("word").upper()
            if word == "LIKE":
                # NOT LIKE -> !=, LIKE -> ==
                if out and out[-1] == "not":
                    out[-1] = "!="
                else:
                    out.append("==")
            else:
                out.append(_KEYWORDS[word])
    return " ".join(out)


def validate_expression(text: str, field_set=()) -> bool:
    """True if `text` is a syntactically valid filter over `field_set`."""
    if not text or not text.strip():
        return False

    source = _translate(text, field_set)
    if source is None:
        return False

    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        logger.debug(f"Filter syntax error in {text!r}: {exc}")
        return False

    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            logger.debug(f"Unsupported construct in {text!r}: {type(node).__name__}")
            return False
        if isinstance(node, ast.Name) and not node.id.startswith(_PLACEHOLDER):
            return False
    return _is_condition(tree.body)


def _is_condition(node) -> bool:
    """A filter must yield true/false, not a field value, number or tuple."""
    if isinstance(node, (ast.Compare, ast.BoolOp)):
        return True
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not):
        return True
    return isinstance(node, ast.Constant) and isinstance(node.value, bool)


def validate_label_expression(text: str, field_set=()) -> bool:
    """
    Label text is free text with [FIELD] placeholders.
    Brackets must be balanced and every placeholder must name a known field.
    """
    if not text:
        return True

    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch == "[":
            if depth:
                return False
            depth = 1
            start = i + 1
        elif ch == "]":
            if not depth:
                return False
            depth = 0
            name = text[start:i]
            if not name.strip() or not _known_field(name, field_set):
                return False
    return depth == 0

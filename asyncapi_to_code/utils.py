"""
Identifier utilities for the AsyncAPI to code generator.

Pure string transforms shared by the schema resolver and the channel
classifier: case conversion, reserved-word escaping and package splitting.
Every function is total: empty or missing input gives an empty string.
"""

import re

# Regex pattern to split text into words, handling camelCase and acronym boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+")

# Segments for type names: anything that is not a letter or digit separates
_SEGMENT_SEPARATOR = re.compile(r"[^a-zA-Z0-9]+")

ANONYMOUS_MARKER = "<"

PLACEHOLDER_CLASS_NAME = "UnknownSchema"

# Java reserved words (and literals) that cannot be used as identifiers
JAVA_RESERVED_WORDS = {
    "abstract",
    "assert",
    "boolean",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "class",
    "const",
    "continue",
    "default",
    "do",
    "double",
    "else",
    "enum",
    "extends",
    "final",
    "finally",
    "float",
    "for",
    "goto",
    "if",
    "implements",
    "import",
    "instanceof",
    "int",
    "interface",
    "long",
    "native",
    "new",
    "package",
    "private",
    "protected",
    "public",
    "return",
    "short",
    "static",
    "strictfp",
    "super",
    "switch",
    "synchronized",
    "this",
    "throw",
    "throws",
    "transient",
    "try",
    "void",
    "volatile",
    "while",
    "true",
    "false",
    "null",
}


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries and separators."""
    return _WORD_PATTERN.findall(text)


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _segments(text: str) -> list[str]:
    cleaned = text.replace("{", "").replace("}", "")
    return [segment for segment in _SEGMENT_SEPARATOR.split(cleaned) if segment]


def word_camel_case(text: str | None) -> str:
    """Convert text to camelCase by splitting it into words first.

    Examples:
        "first_name" -> "firstName"
        "userID" -> "userId"
        "<anonymous-schema-1>" -> "anonymousSchema1"
    """
    if not text:
        return ""
    words = _split_into_words(str(text))
    if not words:
        return ""
    return words[0].lower() + "".join(word.capitalize() for word in words[1:])


def to_type_name(raw: str | None) -> str:
    """Convert any separated text to a PascalCase type name.

    Braces are dropped, then the text is split on every non-alphanumeric
    character and each segment gets an upper-case first letter. The rest of
    each segment keeps its case.

    Examples:
        "orders/{region}" -> "OrdersRegion"
        "order_placed" -> "OrderPlaced"
        "orderPlaced" -> "OrderPlaced"

    Args:
        raw: The text to convert

    Returns:
        PascalCase string, empty for empty input
    """
    if not raw:
        return ""
    return "".join(_upper_first(segment) for segment in _segments(str(raw)))


def to_camel_case(raw: str | None) -> str:
    """Same split as to_type_name, with a lower-case first segment."""
    if not raw:
        return ""
    segments = _segments(str(raw))
    if not segments:
        return ""
    return _lower_first(segments[0]) + "".join(_upper_first(segment) for segment in segments[1:])


def is_reserved_word(word: str | None) -> bool:
    return bool(word) and word.lower() in JAVA_RESERVED_WORDS


def to_identifier(raw: str | None) -> str:
    """Convert a property or parameter name into a valid identifier.

    Examples:
        "first_name" -> "firstName"
        "long" -> "_long"
        "Class" -> "_class"

    Args:
        raw: The original name

    Returns:
        camelCase identifier, prefixed with "_" when it is a reserved word
    """
    identifier = word_camel_case(raw)
    if is_reserved_word(identifier):
        return f"_{identifier}"
    return identifier


def fix_class_name(raw: str | None) -> str:
    """Upper-first camelCase class name ("my_schema" -> "MySchema")."""
    return _upper_first(word_camel_case(raw))


def to_parameter_name(raw: str | None) -> str:
    """Convert a channel parameter id into a method argument name.

    Examples:
        "{transactionID}" -> "transactionID"
        "orderId" -> "orderId"
        "REGION" -> "region"
    """
    if not raw:
        return ""
    cleaned = str(raw).replace("{", "").replace("}", "")
    if re.match(r"^[a-z]+[A-Z][A-Z]", cleaned):
        return cleaned
    if re.match(r"^[a-z]+[A-Z][a-z]*$", cleaned):
        return _lower_first(cleaned)
    return cleaned.lower()


def to_consumer_bean_name(raw: str | None) -> str:
    """Convert a durable queue name into a consumer bean name.

    Examples:
        "status-queue" -> "statusQueue"
        "coreBanking.accounts" -> "coreBankingAccounts"
    """
    if not raw:
        return ""
    cleaned = re.sub(r"[{}:,]", "", str(raw))
    if "." in cleaned:
        first, *rest = cleaned.split(".")
        cleaned = to_camel_case(first) + "".join(to_type_name(part) for part in rest)
    return to_camel_case(cleaned)


def strip_package_name(dotted_name) -> tuple[str, str | None]:
    """Split a fully qualified name into (class_name, package).

    Examples:
        "com.example.User" -> ("User", "com.example")
        "User" -> ("User", None)
    """
    if not isinstance(dotted_name, str):
        return PLACEHOLDER_CLASS_NAME, None
    if "." in dotted_name:
        package, _, class_name = dotted_name.rpartition(".")
        return class_name, package or None
    return dotted_name, None


def is_anonymous_name(name: str | None) -> bool:
    return bool(name) and str(name).startswith(ANONYMOUS_MARKER)


def is_numeric_name(name) -> bool:
    return isinstance(name, int) or (isinstance(name, str) and name.isdigit())

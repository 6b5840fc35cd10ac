"""
Decoding of raw feed documents into advisory entries.

A feed document is either a single advisory object or an array of them.
The whole stream must be one well-formed JSON document; anything else is a
DecodeError and no entries are returned.
"""
import json
from typing import IO, Any, Dict, List, Optional, Union


class DecodeError(ValueError):
    """Raised when a feed document is not well-formed JSON of the expected shape."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        position: Optional[int] = None
    ):
        self.line = line
        self.column = column
        self.position = position
        super().__init__(message)


def decode_feed(stream: IO[Union[bytes, str]]) -> List[Dict[str, Any]]:
    """
    Read the entire stream and decode it into advisory entries.

    Args:
        stream: Binary or text stream holding one JSON document

    Returns:
        Entries in feed order

    Raises:
        DecodeError: If the document is malformed, truncated, followed by
            trailing data, or not an object/array of objects
    """
    data = stream.read()
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"invalid UTF-8 in JSON input at offset {e.start}", position=e.start
            ) from e

    try:
        document = json.loads(data, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise DecodeError(
            _describe_syntax_error(e), line=e.lineno, column=e.colno, position=e.pos
        ) from e
    except DecodeError:
        raise
    except RecursionError as e:
        raise DecodeError("exceeded max depth") from e
    except ValueError as e:
        # integer literals past the interpreter's digit limit
        raise DecodeError(f"invalid number literal: {e}") from e

    if isinstance(document, dict):
        return [document]

    if not isinstance(document, list):
        raise DecodeError(f"cannot decode {_json_type(document)} into advisory feed")

    for index, entry in enumerate(document):
        if not isinstance(entry, dict):
            raise DecodeError(
                f"cannot decode {_json_type(entry)} into advisory entry at index {index}"
            )

    return document


def _describe_syntax_error(error: json.JSONDecodeError) -> str:
    """Phrase a JSON syntax error around the offending character."""
    if error.pos >= len(error.doc) or error.msg.startswith("Unterminated string"):
        return "unexpected end of JSON input"

    char = error.doc[error.pos]
    if error.msg == "Extra data":
        context = "after top-level value"
    else:
        context = error.msg[0].lower() + error.msg[1:]

    return f"invalid character {char!r} {context} (line {error.lineno} column {error.colno})"


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise DecodeError(f"invalid character {name[0]!r} looking for beginning of value")


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for every payload exchanged with the client.
    - camelCase on the wire (isPublished, fileName, ...), snake_case in Python
    - accepts either spelling on input
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


def reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("must not be null")
    return value


def format_validation_errors(errors: Iterable[dict]) -> list[dict]:
    """
    Turns pydantic/FastAPI error dicts into field-level entries:
      {"path": "metadata.category", "message": "...", "type": "enum"}
    The leading "body" segment FastAPI adds is dropped. A body that failed
    to parse at all (loc is "body" plus a byte offset) is reported as "body".
    """
    out = []
    for err in errors:
        raw = list(err.get("loc", ()))
        if raw and raw[0] == "body":
            raw = raw[1:]
            if not raw or isinstance(raw[0], int):
                raw = ["body"]
        out.append(
            {
                "path": ".".join(str(p) for p in raw),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
        )
    return out

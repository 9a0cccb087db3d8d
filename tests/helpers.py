from fastval.decorators import validation_schema


def build_schema(
    name: str = "Payload",
    /,
    *,
    strict: bool | None = None,
    messages: dict | None = None,
    condition=None,
    **fields,
) -> type:
    """
    Create a class with the given field declarations.

    The class is only passed through validation_schema (which compiles it)
    when a schema-level option is given; otherwise it compiles on first use.

      build_schema("User", contact=Email())
      build_schema("User", strict=True, name=Alphabet())
    """
    cls = type(name, (), dict(fields))
    if strict is not None or messages is not None or condition is not None:
        validation_schema(strict=bool(strict), messages=messages, condition=condition)(cls)
    return cls

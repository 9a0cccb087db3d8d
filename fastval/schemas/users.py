from fastval.decorators import (
    Alphabet,
    ArrayOf,
    Boolean,
    Date,
    Email,
    Enum,
    EqualTo,
    Numeric,
    NestedObject,
    ObjectId,
    validation_schema,
)


class Address:
    city = Alphabet()
    zip = Numeric()


class Tag:
    label = Alphabet(max=30)


@validation_schema(strict=True)
class CreateUser:
    name = Alphabet(min=2, max=100)
    email = Email()
    password = Alphabet(min=8)
    password_confirm = EqualTo(field="password")
    role = Enum(values=["admin", "member", "viewer"], default="member")
    newsletter = Boolean(optional=True)
    birthday = Date(optional=True, convert=True)
    address: Address = NestedObject()
    tags = ArrayOf(items=Tag, optional=True, max=5)


@validation_schema
class ListUsersQuery:
    limit = Numeric(optional=True, integer=True, min=1, max=100)
    offset = Numeric(optional=True, integer=True, min=0)
    search = Alphabet(optional=True)


@validation_schema
class UserPath:
    user_id = ObjectId()

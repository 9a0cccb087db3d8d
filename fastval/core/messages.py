"""Default message templates, keyed by error type.

Templates may reference `{field}`, `{expected}` and `{actual}`.
"""

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "The '{field}' field is required.",
    "string": "The '{field}' field must be a string.",
    "stringEmpty": "The '{field}' field must not be empty.",
    "stringMin": "The '{field}' field length must be greater than or equal to {expected} characters long.",
    "stringMax": "The '{field}' field length must be less than or equal to {expected} characters long.",
    "stringLength": "The '{field}' field length must be {expected} characters long.",
    "stringPattern": "The '{field}' field fails to match the required pattern.",
    "number": "The '{field}' field must be a number.",
    "numberMin": "The '{field}' field must be greater than or equal to {expected}.",
    "numberMax": "The '{field}' field must be less than or equal to {expected}.",
    "numberEqual": "The '{field}' field must be equal to {expected}.",
    "numberInteger": "The '{field}' field must be an integer.",
    "numberPositive": "The '{field}' field must be a positive number.",
    "numberNegative": "The '{field}' field must be a negative number.",
    "array": "The '{field}' field must be an array.",
    "arrayEmpty": "The '{field}' field must not be an empty array.",
    "arrayMin": "The '{field}' field must contain at least {expected} items.",
    "arrayMax": "The '{field}' field must contain less than or equal to {expected} items.",
    "arrayLength": "The '{field}' field must contain {expected} items.",
    "arrayContains": "The '{field}' field must contain the '{expected}' item.",
    "arrayUnique": "The '{actual}' value in '{field}' field does not unique the '{expected}' values.",
    "arrayEnum": "The '{actual}' value in '{field}' field does not match any of the '{expected}' values.",
    "boolean": "The '{field}' field must be a boolean.",
    "date": "The '{field}' field must be a Date.",
    "enumValue": "The '{field}' field value '{expected}' does not match any of the allowed values.",
    "equalValue": "The '{field}' field value must be equal to '{expected}'.",
    "equalField": "The '{field}' field value must be equal to '{expected}' field value.",
    "email": "The '{field}' field must be a valid e-mail.",
    "emailEmpty": "The '{field}' field must not be empty.",
    "uuid": "The '{field}' field must be a valid UUID.",
    "uuidVersion": "The '{field}' field must be a valid UUID version provided.",
    "object": "The '{field}' must be an Object.",
    "objectStrict": "The object '{field}' contains forbidden keys: '{actual}'.",
}

FALLBACK_MESSAGE = "The '{field}' field is invalid."

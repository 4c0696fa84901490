"""
Snippetbox: Form Schemas
=========================

What:  Pydantic models binding and validating the HTML forms.
How:   bind_form() copies the submitted fields into a plain dict (so the page
       can be re-rendered with what the user typed), validates it against a
       schema, and collects failures into a FormErrors value: one message per
       field plus form-wide messages such as "Email or password is incorrect".

Validation rules:
    SnippetCreateForm:       title not blank, <= 100 chars; content not blank;
                             expires one of 1, 7, 365
    UserSignupForm:          name not blank; email not blank + email pattern;
                             password not blank, >= 8 chars
    UserLoginForm:           email not blank + email pattern; password not blank
    PasswordUpdateForm:      current password not blank; new password not
                             blank, >= 8 chars; confirmation equals new password
"""

import re
from typing import Annotated, Any, Callable, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

PERMITTED_EXPIRES = (1, 7, 365)

FormT = TypeVar("FormT", bound=BaseModel)


# ══════════════════════════════════════════════════════════════════════════
# Field Checks
# ══════════════════════════════════════════════════════════════════════════

def not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("blank", "This field cannot be blank")
    return value


def max_chars(n: int) -> Callable[[str], str]:
    def check(value: str) -> str:
        if len(value) > n:
            raise PydanticCustomError(
                "too_long", "This field cannot be more than {max} characters long", {"max": n}
            )
        return value
    return check


def min_chars(n: int) -> Callable[[str], str]:
    def check(value: str) -> str:
        if len(value) < n:
            raise PydanticCustomError(
                "too_short", "This field must be at least {min} characters long", {"min": n}
            )
        return value
    return check


def max_bytes(n: int) -> Callable[[str], str]:
    def check(value: str) -> str:
        if len(value.encode("utf-8")) > n:
            raise PydanticCustomError(
                "too_long_bytes", "This field cannot be more than {max} bytes long", {"max": n}
            )
        return value
    return check


def valid_email(value: str) -> str:
    if not EMAIL_RX.match(value):
        raise PydanticCustomError("email", "This field must be a valid email address")
    return value


NotBlank = Annotated[str, AfterValidator(not_blank)]
Email = Annotated[str, AfterValidator(not_blank), AfterValidator(valid_email)]
# bcrypt accepts at most 72 bytes
NewPassword = Annotated[
    str, AfterValidator(not_blank), AfterValidator(min_chars(8)), AfterValidator(max_bytes(72))
]


# ══════════════════════════════════════════════════════════════════════════
# Form Errors
# ══════════════════════════════════════════════════════════════════════════

class FormErrors:
    """
    Validation outcome for one form submission.

    Attributes:
        field_errors:      field name → first message for that field
        non_field_errors:  messages about the submission as a whole
    """

    def __init__(self) -> None:
        self.field_errors: Dict[str, str] = {}
        self.non_field_errors: List[str] = []

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "FormErrors":
        errors = cls()
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            if field:
                errors.add_field_error(field, error["msg"])
            else:
                errors.add_non_field_error(error["msg"])
        return errors

    def add_field_error(self, field: str, message: str) -> None:
        # Keep the first message per field
        self.field_errors.setdefault(field, message)

    def add_non_field_error(self, message: str) -> None:
        self.non_field_errors.append(message)

    @property
    def valid(self) -> bool:
        return not self.field_errors and not self.non_field_errors

    def __repr__(self) -> str:
        return f"<FormErrors(fields={self.field_errors}, non_field={self.non_field_errors})>"


def bind_form(
    schema: Type[FormT], form: Mapping[str, Any]
) -> Tuple[Optional[FormT], Dict[str, str], FormErrors]:
    """
    Validate submitted form data against `schema`.

    Returns:
        (parsed model or None, submitted values, errors)
    """
    values = {name: str(form.get(name) or "") for name in schema.model_fields}
    try:
        return schema.model_validate(values), values, FormErrors()
    except ValidationError as exc:
        return None, values, FormErrors.from_validation_error(exc)


# ══════════════════════════════════════════════════════════════════════════
# Forms
# ══════════════════════════════════════════════════════════════════════════

class SnippetCreateForm(BaseModel):
    title: Annotated[str, AfterValidator(not_blank), AfterValidator(max_chars(100))]
    content: NotBlank
    expires: int

    @field_validator("expires", mode="before")
    @classmethod
    def permitted_expires(cls, value: Any) -> int:
        try:
            days = int(value)
        except (TypeError, ValueError):
            days = None
        if days not in PERMITTED_EXPIRES:
            raise PydanticCustomError("permitted_value", "This field must equal 1, 7 or 365")
        return days


class UserSignupForm(BaseModel):
    name: NotBlank
    email: Email
    password: NewPassword


class UserLoginForm(BaseModel):
    email: Email
    password: NotBlank


class PasswordUpdateForm(BaseModel):
    current_password: NotBlank
    new_password: NewPassword
    new_password_confirmation: NotBlank

    @field_validator("new_password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and value != info.data["new_password"]:
            raise PydanticCustomError("mismatch", "Passwords do not match")
        return value

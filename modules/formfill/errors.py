"""Exception types raised by the form filling engine."""

from __future__ import annotations


class FormFillError(RuntimeError):
    """Base class for failures that abort a single document fill."""


class UnsupportedFormType(FormFillError, LookupError):
    """Raised when a form type has no registry entry."""

    def __init__(self, form_type: str):
        super().__init__(f"Unsupported form type: {form_type!r}")
        self.form_type = form_type


class TemplateResourceUnavailable(FormFillError):
    """Raised when the template bytes for a form type cannot be read or parsed."""

    def __init__(self, form_type: str, reason: str):
        super().__init__(f"Template for {form_type!r} unavailable: {reason}")
        self.form_type = form_type
        self.reason = reason


class SignatureDecodeFailure(FormFillError):
    """Raised when a signature image cannot be decoded or embedded."""

    def __init__(self, role: str, reason: str):
        super().__init__(f"Could not decode {role} signature: {reason}")
        self.role = role
        self.reason = reason


class GeometryValidationFailure(ValueError):
    """Raised when a signature geometry update is malformed."""

    def __init__(self, form_type: str, problems: list[str]):
        super().__init__(f"Invalid signature geometry for {form_type!r}: " + "; ".join(problems))
        self.form_type = form_type
        self.problems = list(problems)


__all__ = [
    "FormFillError",
    "GeometryValidationFailure",
    "SignatureDecodeFailure",
    "TemplateResourceUnavailable",
    "UnsupportedFormType",
]

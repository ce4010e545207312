"""
Contact details collected after an assessment completes.
"""

import re
from dataclasses import dataclass


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# 123-456-7890, (123) 456-7890, 123.456.7890, 1234567890
PHONE_PATTERN = re.compile(r"^\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})$")


@dataclass
class ContactInfo:
    """Who a lead belongs to."""
    name: str
    email: str
    phone: str

    def __post_init__(self):
        self.name = self.name.strip()
        self.email = self.email.strip()
        self.phone = self.phone.strip()

    def validate(self) -> list[str]:
        """
        Check each field.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.name:
            errors.append("Please enter your name")
        elif len(self.name) < 2:
            errors.append("Please enter a valid name (at least 2 characters)")

        if not self.email:
            errors.append("Please enter your email address")
        elif not EMAIL_PATTERN.match(self.email):
            errors.append(
                f"{self.email!r} is not a valid email address (e.g., name@example.com)"
            )

        if not self.phone:
            errors.append("Please enter your phone number")
        elif not PHONE_PATTERN.match(self.phone):
            errors.append(
                f"{self.phone!r} is not a valid phone number "
                "(format: 123-456-7890 or (123) 456-7890)"
            )

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email, "phone": self.phone}

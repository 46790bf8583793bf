"""Variable names and step text normalization.

Variable names follow the identifier rules shared by assignments and
pseudo-variables. Step text is compared in canonical form so that
reserved directives match regardless of case and spacing.
"""

from re import compile as regexp
from typing import Annotated

from pydantic import Field

_NAME_PATTERN = r'[a-zA-Z_][\w]*'

_WHITESPACE = regexp(r'\s+')

#: Pseudo-variable holding the pass/fail status of the last step or branch.
SUCCESSFUL = 'successful'
#: Pseudo-variable holding the fault of the last step or branch.
ERROR = 'error'

Variable = Annotated[
    str, Field(
        pattern=rf'^{_NAME_PATTERN}$',
        title='Variable identifier',
        description=(
            'Name of a variable assigned by a step. '
            'Must start with a letter or an underscore and may contain '
            'letters, digits, or underscores.'
        ),
        examples=[
            'userId',
            'api_token',
        ],
    ),
]


def canonicalize(text: str | None) -> str:
    """Return step text in canonical form.

    Leading and trailing whitespace is removed, inner whitespace runs
    collapse into a single space, and the text is lower-cased.

    Args:
        text: Raw step text.

    Returns:
        Canonical text, empty for `None`.
    """
    if not text:
        return ''

    return _WHITESPACE.sub(' ', text.strip()).lower()

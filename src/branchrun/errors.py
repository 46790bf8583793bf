"""Core exception hierarchy.

This module defines the fault types recorded against steps and branches
while a tree is executed, along with the error raised when an external
collaborator breaks its contract. Faults carry the source location of the
step that produced them and format themselves with a YAML snippet of the
variables visible at the moment of failure.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

from branchrun.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from typing import Self

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unknown file>'
FORMAT_INDENT = 4

UNEXPECTED_PASS_MESSAGE = 'This step passed, but it was expected to fail (#)'


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source file of the failing step.
    filename: str | None
    #: One-based line number of the failing step.
    line_number: int | None

    #: Original step text.
    text: str | None

    #: Underlying exception that triggered the fault.
    error: BaseException | None

    #: Variables visible to the step at the moment of failure.
    variables: dict[str, Any] | None


class ErrorFormatter:
    """Utility class for formatting fault messages.

    Produces human-readable messages with an optional source location
    and a YAML snippet of the variables visible to the failing step.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string with the filename, the line
            number and the step text when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename') or FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_number := context.get('line_number')) is not None:
            message += f', line {line_number}'
        message += linesep

        if text := context.get('text'):
            message += f'{indent}at step "{text.strip()}"{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a YAML snippet of the visible variables.

        Args:
            context: Error context containing variables.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no variables are available.
        """
        indent = cls._ensure_indent(indent)

        if not (variables := context.get('variables')):
            return ''

        snippet = f'{indent}{SNIPPET_ELLIPSIS}'
        snippet += cls._make_yaml({'variables': {**variables}}, indent)
        snippet += linesep

        return snippet

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively replace values YAML can not represent safely.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                f'{key}': cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a sanitized value to an indented YAML string."""
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string, dropping blank lines."""
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation given as a string or a number of spaces."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class BranchRunError(Exception, ErrorFormatter):
    """Base exception for all branchrun errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional runtime values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class ContractError(BranchRunError):
    """Error raised when an external collaborator breaks its contract.

    For example, when the Tree yields something that is neither a branch,
    the idle token, nor the end-of-run marker. This is the only error the
    execution loop lets escape.
    """


class StepFault(BranchRunError):
    """Fault recorded against a step.

    Payloads may raise a `StepFault` directly to control the recorded
    message or to request that the whole branch fails immediately. Any
    other exception raised by a payload is wrapped into one.
    """

    def __init__(self, message: str, *,
                 filename: str | None = None,
                 line_number: int | None = None,
                 fail_branch_now: bool = False,
                 context: ErrorContext | None = None) -> None:
        """Initialize a step fault.

        Args:
            message: Human-readable fault description.
            filename: Source file of the step that produced the fault.
            line_number: Source line of the step that produced the fault.
            fail_branch_now: Whether the whole branch must fail at once.
            context: Additional error context.
        """
        self.fail_branch_now = fail_branch_now

        super().__init__(message, context=ErrorContext({
            **(context or {}),
            'filename': filename,
            'line_number': line_number,
        }))

    @property
    def filename(self) -> str | None:
        """Source file of the step that produced the fault."""
        return self.context.get('filename') if self.context else None

    @property
    def line_number(self) -> int | None:
        """Source line of the step that produced the fault."""
        return self.context.get('line_number') if self.context else None

    def stamp(self, filename: str | None, line_number: int | None, *,
              text: str | None = None,
              variables: dict[str, Any] | None = None) -> 'Self':
        """Attach the source location of a step to the fault in place.

        Args:
            filename: Source file of the step.
            line_number: Source line of the step.
            text: Optional step text.
            variables: Optional variables visible to the step.

        Returns:
            The same fault instance.
        """
        context = ErrorContext({**(self.context or {})})
        context['filename'] = filename
        context['line_number'] = line_number
        if text is not None:
            context['text'] = text
        if variables is not None:
            context['variables'] = variables

        self.context = context

        return self

    @classmethod
    def from_exception(cls, error: BaseException, *,
                       filename: str | None = None,
                       line_number: int | None = None) -> 'Self':
        """Wrap an arbitrary exception raised by a payload.

        The original exception is kept as the cause and in the error
        context. A truthy `fail_branch_now` attribute on it is honoured.

        Args:
            error: Exception raised by a payload.
            filename: Source file of the step.
            line_number: Source line of the step.

        Returns:
            A step fault wrapping the exception.
        """
        fault = cls(
            f'{error!r}',
            filename=filename,
            line_number=line_number,
            fail_branch_now=bool(getattr(error, 'fail_branch_now', False)),
            context=ErrorContext(error=error),
        )
        fault.__cause__ = error

        return fault


class UnexpectedPassFault(StepFault):
    """Fault synthesized when an expect-failure step does not fail."""

    def __init__(self, *,
                 filename: str | None = None,
                 line_number: int | None = None) -> None:
        """Initialize an unexpected pass fault.

        Args:
            filename: Source file of the step.
            line_number: Source line of the step.
        """
        super().__init__(
            UNEXPECTED_PASS_MESSAGE,
            filename=filename,
            line_number=line_number,
        )


class BranchHookFault(StepFault):
    """Fault attached to a branch by a failing branch-level hook step.

    Branch hooks run after every step of a branch has been claimed, so
    there is no active step to record the fault on.
    """

    @classmethod
    def from_fault(cls, fault: StepFault) -> 'Self':
        """Build a branch fault from the fault of a hook step.

        Args:
            fault: Fault recorded for the hook step.

        Returns:
            A branch hook fault referring to the hook step location.
        """
        branch_fault = cls(
            fault.message,
            filename=fault.filename,
            line_number=fault.line_number,
            fail_branch_now=fault.fail_branch_now,
            context=ErrorContext(error=fault),
        )
        branch_fault.__cause__ = fault

        return branch_fault

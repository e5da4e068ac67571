"""Human-readable progress lines written to a caller-supplied stream."""

from typing import TextIO


def format_line(label: str, value: object) -> str:
    return f"{label}: {value}"


def write_formatted_lines(
    stdout: TextIO,
    lines: list[tuple[str, object]],
    leading_blank_line: bool = False,
) -> None:
    """Write ``label: value`` lines, optionally after a blank line.

    The blank line keeps output off a progress line that did not end with
    a newline.
    """
    if not lines:
        return
    if leading_blank_line:
        stdout.write("\n")
    for label, value in lines:
        stdout.write(f"{format_line(label, value)}\n")

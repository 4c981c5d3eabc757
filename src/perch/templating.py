"""Kida environment for perch's generated sources.

Generated Python modules and fragment templates are plain text, so the
environment renders without autoescaping.  Block tags trim their own
line so template layout doesn't leak into the output.
"""

from kida import Environment


def create_environment() -> Environment:
    """Create the kida Environment used for code and fragment generation."""
    return Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_source(env: Environment, source: str, context: dict[str, object]) -> str:
    """Render an inline template *source* with *context*."""
    template = env.from_string(source)
    return template.render(context)

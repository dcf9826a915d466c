"""Click Custom Types for Pipeline CLI

Domain-specific type validators for Click commands.
Provides early validation at CLI parsing time with clear error messages.
"""

import click

from vendors.factory import SOURCE_KEYS


class SourceKeyType(click.ParamType):
    """Validates a source key against the known sources

    Valid examples:
    - harris_county
    - hisd
    - metro

    Input is case-insensitive and dashes are accepted for underscores
    (houston-city-council).
    """

    name = "source"

    def convert(self, value, param, ctx):
        """Validate source key at CLI parse time

        Raises:
            click.BadParameter: If the source is unknown
        """
        if not value:
            self.fail("source cannot be empty", param, ctx)

        key = value.strip().lower().replace("-", "_")
        if key not in SOURCE_KEYS:
            self.fail(
                f"{value!r} is not a known source. "
                f"Choose from: {', '.join(SOURCE_KEYS)}",
                param,
                ctx
            )

        return key


SOURCE_KEY = SourceKeyType()

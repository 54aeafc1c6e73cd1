"""
Renders alert events into notification text.

Templates use str.format syntax with the named fields Line, File and
Keyword, e.g. "{Keyword} in {File}: {Line}".
"""

from logsentry.core import AlertEvent
from logsentry.errors import RenderError

TEMPLATE_FIELDS = ("Line", "File", "Keyword")


class AlertFormatter:
    """Renders an AlertEvent with a configured message template."""

    def __init__(self, template: str) -> None:
        self.template = template

    def render(self, event: AlertEvent) -> str:
        """
        Render a single alert.

        Args:
            event: The keyword match to render

        Returns:
            The rendered message

        Raises:
            RenderError: If the template references unknown fields or is malformed
        """
        fields = {
            "Line": event.line.strip(),
            "File": event.file,
            "Keyword": event.keyword,
        }
        try:
            return self.template.format_map(fields)
        except KeyError as e:
            raise RenderError(
                f"Template references unknown field {e}; "
                f"available fields: {', '.join(TEMPLATE_FIELDS)}"
            ) from e
        except (ValueError, IndexError, AttributeError) as e:
            raise RenderError(f"Template could not be rendered: {e}") from e

    def check(self) -> None:
        """Render a sample event so template mistakes surface at startup."""
        self.render(AlertEvent(line="sample line\n", file="sample.log", keyword="sample"))

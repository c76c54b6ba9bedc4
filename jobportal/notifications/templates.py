"""Template rendering for in-app notifications using Jinja2."""

import logging
from typing import Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders notification titles and messages from package templates.

    Output is plain text stored in the mailbox, so autoescaping is off.
    Templates are cached by the Jinja2 environment after first load.
    """

    def __init__(
        self,
        template_dir: str = "templates",
        title_template: str = "job_match_title.j2",
        message_template: str = "job_match_message.j2",
    ):
        """Initialize template renderer with Jinja2 environment.

        Args:
            template_dir: Directory name within the jobportal.notifications package
            title_template: Filename of the title template
            message_template: Filename of the message template
        """
        self.title_template_name = title_template
        self.message_template_name = message_template

        self.env = Environment(
            loader=PackageLoader("jobportal.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, context: Dict) -> Dict[str, str]:
        """Render title and message with the provided context.

        Args:
            context: Template variables (job_title, company_name, match_percentage)

        Returns:
            Dictionary with single-line "title" and "message" strings

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        try:
            title = self.env.get_template(self.title_template_name).render(context)
            message = self.env.get_template(self.message_template_name).render(context)
            return {
                "title": title.strip().replace("\n", " "),
                "message": message.strip().replace("\n", " "),
            }
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

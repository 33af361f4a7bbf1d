from typing import Any, Dict

from jinja2 import Template

from .base import RenderedMessage
from .config import Config


def render_message(config: Config, event_name: str, parameters: Dict[str, Any]) -> RenderedMessage:
    """
    Render the subject, text and optional html templates of an event.

    The event's default_parameters are overridden by `parameters`.
    """
    event_mapping = config.get_event(event_name)
    if not event_mapping:
        raise ValueError(f"Unknown delivery event: {event_name}")

    default_parameters = event_mapping.get('default_parameters', {})
    event_parameters = {**default_parameters, **parameters}

    subject = Template(event_mapping.get('subject', '')).render(**event_parameters)
    text = Template(event_mapping.get('text', '')).render(**event_parameters)
    html = None
    if event_mapping.get('html'):
        html = Template(event_mapping['html'], autoescape=True).render(**event_parameters)

    return RenderedMessage(subject=subject, text=text, html=html)
